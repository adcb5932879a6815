"""Single-pass Laplacian smoothing of a trace."""

from __future__ import annotations

from core.constants import DEFAULT_SMOOTHING_FACTOR
from trace_cleaning.models import Point, Trace


def smooth(trace: Trace, factor: float = DEFAULT_SMOOTHING_FACTOR) -> Trace:
    """Pull each interior point toward the midpoint of its neighbours.

    Every interior point is computed from the original neighbours, not from
    already smoothed ones. The first and last points are returned as-is and
    traces shorter than three points are returned unchanged.
    """
    if len(trace) < 3:
        return list(trace)

    smoothed: Trace = [trace[0]]
    for prev, curr, nxt in zip(trace, trace[1:], trace[2:]):
        smoothed.append(
            Point(
                lat=curr.lat + factor * (prev.lat + nxt.lat - 2 * curr.lat),
                lng=curr.lng + factor * (prev.lng + nxt.lng - 2 * curr.lng),
                timestamp=curr.timestamp,
            ),
        )
    smoothed.append(trace[-1])
    return smoothed
