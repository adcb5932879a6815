"""
OSRM HTTP client utilities.

Wraps the OSRM ``match`` service: one GET request per trace with the
coordinates encoded in the path, geometry requested as GeoJSON.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

import aiohttp
from yarl import URL

from config import (
    get_map_match_max_retries,
    get_map_match_timeout_seconds,
    require_osrm_match_url,
)
from core.constants import MAP_MATCH_MAX_POINTS, MAP_MATCH_RADIUS_M
from core.exceptions import ExternalServiceException
from core.http.request import request_json
from core.http.retry import retry_async
from core.http.session import get_session

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], Awaitable[Any]]


class OsrmClient:
    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout_seconds: float | None = None,
        max_retries: int | None = None,
        session_factory: SessionFactory = get_session,
    ) -> None:
        self._base_url = (base_url or require_osrm_match_url()).rstrip("/")
        self._timeout_seconds = (
            timeout_seconds
            if timeout_seconds is not None
            else get_map_match_timeout_seconds()
        )
        self._max_retries = (
            max_retries if max_retries is not None else get_map_match_max_retries()
        )
        self._session_factory = session_factory

    def build_match_url(
        self,
        coordinates: Sequence[tuple[float, float]],
        *,
        radius_m: int = MAP_MATCH_RADIUS_M,
    ) -> URL:
        """Build the match request URL for ``(lng, lat)`` pairs."""
        coord_string = ";".join(f"{lng:.6f},{lat:.6f}" for lng, lat in coordinates)
        radiuses = ";".join(str(radius_m) for _ in coordinates)
        query = (
            "overview=full&geometries=geojson&steps=false&annotations=false"
            f"&radiuses={radiuses}"
        )
        return URL(f"{self._base_url}/{coord_string}?{query}", encoded=True)

    async def match(
        self,
        coordinates: Sequence[tuple[float, float]],
        *,
        radius_m: int = MAP_MATCH_RADIUS_M,
    ) -> list[list[float]]:
        """Match ``(lng, lat)`` pairs and return the best matching's geometry.

        Returns an empty list when the service found no matching.

        Raises:
            ExternalServiceException: on invalid input, a non-success
                status or a malformed response body.
        """
        if len(coordinates) < 2:
            msg = "OSRM match requires at least two coordinates."
            raise ExternalServiceException(msg)
        if len(coordinates) > MAP_MATCH_MAX_POINTS:
            msg = (
                f"OSRM match accepts at most {MAP_MATCH_MAX_POINTS} coordinates, "
                f"got {len(coordinates)}."
            )
            raise ExternalServiceException(msg)

        url = self.build_match_url(coordinates, radius_m=radius_m)
        fetch = retry_async(max_retries=self._max_retries)(self._fetch)
        data = await fetch(url)
        return self._extract_best_geometry(data)

    async def _fetch(self, url: URL) -> Any:
        session = await self._session_factory()
        return await request_json(
            url,
            session=session,
            service_name="OSRM match",
            timeout=aiohttp.ClientTimeout(total=self._timeout_seconds),
        )

    @staticmethod
    def _extract_best_geometry(data: Any) -> list[list[float]]:
        if not isinstance(data, dict):
            msg = "OSRM match error: unexpected response"
            raise ExternalServiceException(msg)

        matchings = data.get("matchings")
        if not matchings:
            logger.info("OSRM match returned no matchings (code=%s)", data.get("code"))
            return []
        if not isinstance(matchings, list) or not isinstance(matchings[0], dict):
            msg = "OSRM match error: malformed matchings"
            raise ExternalServiceException(msg)

        geometry = matchings[0].get("geometry")
        coords = geometry.get("coordinates") if isinstance(geometry, dict) else None
        if not isinstance(coords, list):
            msg = "OSRM match error: matching has no GeoJSON geometry"
            raise ExternalServiceException(msg)

        return OsrmClient._coerce_coordinates(coords)

    @staticmethod
    def _coerce_coordinates(coords: list[Any]) -> list[list[float]]:
        result: list[list[float]] = []
        for item in coords:
            if not isinstance(item, list | tuple) or len(item) < 2:
                msg = "OSRM match error: malformed coordinate in geometry"
                raise ExternalServiceException(msg, {"coordinate": repr(item)})
            try:
                lng = float(item[0])
                lat = float(item[1])
            except (TypeError, ValueError) as e:
                msg = "OSRM match error: non-numeric coordinate in geometry"
                raise ExternalServiceException(msg, {"coordinate": repr(item)}) from e
            result.append([lng, lat])
        return result
