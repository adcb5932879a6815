"""Great-circle distance between trace points."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from core.constants import EARTH_RADIUS_M

if TYPE_CHECKING:
    from trace_cleaning.models import Point


def haversine_meters(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Calculate the great-circle distance in meters using the Haversine formula."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlmb = math.radians(lng2 - lng1)
    a = (
        math.sin(dphi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    )
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(a)))


def distance_meters(a: Point, b: Point) -> float:
    return haversine_meters(a.lat, a.lng, b.lat, b.lng)
