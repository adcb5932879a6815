"""Fixed-stride downsampling for services with an input-size ceiling."""

from __future__ import annotations

import math
from typing import TypeVar

from core.constants import MAP_MATCH_MAX_POINTS

T = TypeVar("T")


def decimate(trace: list[T], max_points: int = MAP_MATCH_MAX_POINTS) -> list[T]:
    """Keep indices ``0, stride, 2*stride, ...`` with ``stride = ceil(n / max_points)``.

    The first point is always kept; the last one only if it falls on the stride.
    """
    if max_points < 1:
        msg = f"max_points must be at least 1, got {max_points}"
        raise ValueError(msg)
    if len(trace) <= max_points:
        return list(trace)

    stride = math.ceil(len(trace) / max_points)
    return trace[::stride]
