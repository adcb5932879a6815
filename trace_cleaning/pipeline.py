"""Trace cleaning pipeline."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from typing import Any

from date_utils import parse_timestamp
from trace_cleaning.models import PipelineOptions, PipelineResult, Point, Trace
from trace_cleaning.noise_filter import filter_noise
from trace_cleaning.road_snapper import RoadSnapper
from trace_cleaning.smoothing import smooth

logger = logging.getLogger(__name__)


def _is_coordinate(value: Any) -> bool:
    return (
        isinstance(value, int | float)
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def coerce_point(raw: Any) -> Point | None:
    """Build a Point from a raw mapping, or None if lat/lng are not finite numbers."""
    if not isinstance(raw, dict):
        return None
    lat = raw.get("lat")
    lng = raw.get("lng")
    if not (_is_coordinate(lat) and _is_coordinate(lng)):
        return None
    return Point(
        lat=float(lat),
        lng=float(lng),
        timestamp=parse_timestamp(raw.get("timestamp")),
    )


def validate_points(raw_points: Sequence[Any]) -> tuple[Trace, int]:
    """Strip malformed entries, keeping order. Returns the trace and the drop count."""
    trace: Trace = []
    for raw in raw_points:
        point = coerce_point(raw)
        if point is not None:
            trace.append(point)
    return trace, len(raw_points) - len(trace)


class TracePipeline:
    """Linear pipeline: validate, filter noise, smooth, snap.

    Holds only collaborators; everything request-specific flows through
    ``run`` arguments and its return value.
    """

    def __init__(self, snapper: RoadSnapper | None = None) -> None:
        self._snapper = snapper

    @property
    def snapper(self) -> RoadSnapper:
        if self._snapper is None:
            self._snapper = RoadSnapper()
        return self._snapper

    async def run(
        self,
        raw_points: Sequence[Any],
        options: PipelineOptions,
        *,
        label: str = "trace",
    ) -> PipelineResult:
        original_count = len(raw_points)

        trace, invalid_count = validate_points(raw_points)
        if invalid_count:
            logger.info("%s: dropped %d malformed points", label, invalid_count)

        if not trace:
            logger.info("%s: no valid points, skipping processing", label)
            return PipelineResult(
                coordinates=[],
                original_count=original_count,
                processed_count=0,
                invalid_count=invalid_count,
            )

        logger.info("%s: processing %d coordinates", label, len(trace))

        filtered = filter_noise(trace)
        trace = filtered.trace
        logger.info("%s: %d coordinates after noise filtering", label, len(trace))

        if options.smooth:
            trace = smooth(trace)
            logger.info("%s: applied coordinate smoothing", label)

        snap_applied = False
        snap_error: str | None = None
        if options.snap:
            snap_result = await self.snapper.snap_to_road(trace)
            trace = snap_result.trace
            snap_applied = snap_result.snapped
            snap_error = snap_result.error
            if snap_applied:
                logger.info("%s: applied road snapping", label)
            else:
                logger.warning(
                    "%s: road snapping skipped, keeping unsnapped trace (%s)",
                    label,
                    snap_error,
                )

        return PipelineResult(
            coordinates=trace,
            original_count=original_count,
            processed_count=len(trace),
            road_snapped=options.snap,
            smoothed=options.smooth,
            invalid_count=invalid_count,
            noise_removed_count=filtered.removed,
            snap_applied=snap_applied,
            snap_error=snap_error,
        )
