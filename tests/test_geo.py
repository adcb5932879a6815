import math

import pytest

from trace_cleaning.geo import distance_meters, haversine_meters
from trace_factories import make_point


def test_identical_points_are_zero_distance() -> None:
    point = make_point(51.5, -0.12)
    assert distance_meters(point, point) == 0.0


def test_one_degree_of_longitude_at_equator() -> None:
    expected = 6_371_000 * math.radians(1)
    assert haversine_meters(0.0, 0.0, 0.0, 1.0) == pytest.approx(expected)
    assert haversine_meters(0.0, 0.0, 0.0, 1.0) == pytest.approx(111_195, rel=1e-4)


def test_distance_is_symmetric() -> None:
    a = make_point(48.8566, 2.3522)
    b = make_point(52.52, 13.405)
    assert distance_meters(a, b) == pytest.approx(distance_meters(b, a))
    # Paris to Berlin is roughly 878 km
    assert distance_meters(a, b) == pytest.approx(878_000, rel=0.01)


def test_antipodal_points_do_not_overflow() -> None:
    assert haversine_meters(0.0, 0.0, 0.0, 180.0) == pytest.approx(
        math.pi * 6_371_000,
    )
