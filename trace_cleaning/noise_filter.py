"""
Speed-based GPS noise filter.

A sample is dropped when reaching it from the last *kept* sample would
require travelling faster than ``max_speed_kmh``. Rejected samples are never
used as a reference, so a burst of bad fixes does not drag later good fixes
out with it.
"""

from __future__ import annotations

import logging
from typing import NamedTuple

from core.constants import DEFAULT_MAX_SPEED_KMH, FALLBACK_ELAPSED_SECONDS
from trace_cleaning.geo import distance_meters
from trace_cleaning.models import Point, Trace

logger = logging.getLogger(__name__)


class NoiseFilterResult(NamedTuple):
    trace: Trace
    removed: int


def elapsed_seconds(previous: Point, current: Point) -> float:
    """Seconds between two samples, or the fixed fallback when unknown.

    The fallback applies when either timestamp is missing or the delta is
    zero or negative (duplicate or out-of-order clock readings).
    """
    if previous.timestamp is None or current.timestamp is None:
        return FALLBACK_ELAPSED_SECONDS
    delta = (current.timestamp - previous.timestamp).total_seconds()
    if delta <= 0:
        return FALLBACK_ELAPSED_SECONDS
    return delta


def speed_kmh(previous: Point, current: Point) -> float:
    distance_km = distance_meters(previous, current) / 1000.0
    hours = elapsed_seconds(previous, current) / 3600.0
    return distance_km / hours


def filter_noise(
    trace: Trace,
    max_speed_kmh: float = DEFAULT_MAX_SPEED_KMH,
) -> NoiseFilterResult:
    """Drop samples that imply an implausible speed.

    Args:
        trace: Points in recording order.
        max_speed_kmh: Highest speed considered physically plausible.

    Returns:
        The kept points, in input order, and the number removed.
    """
    if len(trace) < 2:
        return NoiseFilterResult(list(trace), 0)

    kept: Trace = [trace[0]]
    for index, point in enumerate(trace[1:], start=1):
        speed = speed_kmh(kept[-1], point)
        if speed <= max_speed_kmh:
            kept.append(point)
        else:
            logger.debug(
                "Filtered out point %d with speed %.2f km/h (limit %.2f)",
                index,
                speed,
                max_speed_kmh,
            )

    removed = len(trace) - len(kept)
    if removed:
        logger.info("Noise filter removed %d of %d points", removed, len(trace))
    return NoiseFilterResult(kept, removed)
