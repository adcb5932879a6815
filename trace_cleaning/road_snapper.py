"""
Road snapping through the OSRM match service.

Snapping is an enrichment: any failure (HTTP error, empty match set,
timeout, malformed body) yields a fallback result carrying the untouched
input trace. Only task cancellation propagates.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from core.constants import MAP_MATCH_MAX_POINTS, MAP_MATCH_RADIUS_M
from core.exceptions import ExternalServiceException
from core.http.osrm import OsrmClient
from trace_cleaning.decimation import decimate
from trace_cleaning.models import Point, Trace

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SnapResult:
    """Outcome of a snap attempt.

    ``snapped`` is False for fallbacks, in which case ``trace`` is the
    original input and ``error`` says why.
    """

    trace: Trace
    snapped: bool
    error: str | None = None

    @classmethod
    def success(cls, trace: Trace) -> SnapResult:
        return cls(trace=trace, snapped=True)

    @classmethod
    def fallback(cls, original: Trace, reason: str) -> SnapResult:
        return cls(trace=original, snapped=False, error=reason)


def reassociate_timestamps(
    snapped_coords: list[list[float]],
    original: Trace,
) -> Trace:
    """Attach timestamps to snapped ``[lng, lat]`` pairs by proportional index.

    Snapped point ``k`` takes the timestamp of ``original[k * n // m]`` where
    ``n`` and ``m`` are the original and snapped lengths. The service does not
    return per-point times, so this is an approximation that degrades when
    ``m`` and ``n`` differ a lot.
    """
    n = len(original)
    m = len(snapped_coords)
    result: Trace = []
    for k, (lng, lat) in enumerate(snapped_coords):
        source = original[k * n // m] if n else None
        result.append(
            Point(
                lat=lat,
                lng=lng,
                timestamp=source.timestamp if source is not None else None,
            ),
        )
    return result


class RoadSnapper:
    """Snaps traces to the road network, failing open to the input."""

    def __init__(
        self,
        client: OsrmClient | None = None,
        *,
        max_points: int = MAP_MATCH_MAX_POINTS,
        radius_m: int = MAP_MATCH_RADIUS_M,
    ) -> None:
        self.client = client or OsrmClient()
        self.max_points = max_points
        self.radius_m = radius_m

    async def snap_to_road(self, trace: Trace) -> SnapResult:
        if len(trace) < 2:
            return SnapResult.fallback(trace, "fewer than two points to match")

        sample = decimate(trace, self.max_points)
        if len(sample) != len(trace):
            logger.debug(
                "Decimated %d points to %d for map matching",
                len(trace),
                len(sample),
            )

        try:
            coords = await self.client.match(
                [(point.lng, point.lat) for point in sample],
                radius_m=self.radius_m,
            )
            if not coords:
                logger.warning(
                    "No matching roads found, returning original coordinates",
                )
                return SnapResult.fallback(trace, "no matching roads found")
            snapped = reassociate_timestamps(coords, trace)
        except ExternalServiceException as exc:
            logger.warning("Road snapping failed: %s", exc.message)
            return SnapResult.fallback(trace, exc.message)
        except Exception as exc:
            logger.exception("Unexpected error during road snapping")
            return SnapResult.fallback(trace, f"unexpected error: {exc!s}")

        logger.info("Snapped %d points to %d road points", len(trace), len(snapped))
        return SnapResult.success(snapped)
