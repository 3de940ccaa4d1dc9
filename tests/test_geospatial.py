import math

import pytest

from voitheia.models.domain import Coordinate
from voitheia.services.geospatial import EARTH_RADIUS_M, bounding_box, haversine_m

BERLIN = Coordinate(52.5200, 13.4050)
PARIS = Coordinate(48.8566, 2.3522)


def _destination(origin: Coordinate, meters: float, bearing_deg: float) -> Coordinate:
    delta = meters / EARTH_RADIUS_M
    theta = math.radians(bearing_deg)
    phi1 = math.radians(origin.latitude)
    lambda1 = math.radians(origin.longitude)
    phi2 = math.asin(math.sin(phi1) * math.cos(delta) + math.cos(phi1) * math.sin(delta) * math.cos(theta))
    lambda2 = lambda1 + math.atan2(
        math.sin(theta) * math.sin(delta) * math.cos(phi1),
        math.cos(delta) - math.sin(phi1) * math.sin(phi2),
    )
    return Coordinate(math.degrees(phi2), math.degrees(lambda2))


def test_haversine_same_point_is_zero():
    assert haversine_m(BERLIN, BERLIN) == 0.0


def test_haversine_berlin_to_paris():
    assert haversine_m(BERLIN, PARIS) == pytest.approx(877_500, rel=0.01)


def test_haversine_is_symmetric():
    assert haversine_m(BERLIN, PARIS) == pytest.approx(haversine_m(PARIS, BERLIN))


def test_one_degree_of_latitude():
    distance = haversine_m(Coordinate(10.0, 20.0), Coordinate(11.0, 20.0))

    assert distance == pytest.approx(EARTH_RADIUS_M * math.pi / 180)


def test_antipodal_points_are_half_the_circumference_apart():
    distance = haversine_m(Coordinate(0.0, 0.0), Coordinate(0.0, 180.0))

    assert distance == pytest.approx(math.pi * EARTH_RADIUS_M)


@pytest.mark.parametrize("center", [BERLIN, Coordinate(-33.87, 151.21), Coordinate(70.0, 25.0)])
def test_bounding_box_encloses_the_search_circle(center):
    radius = 2500.0
    box = bounding_box(center, radius)

    assert box is not None
    for bearing in range(0, 360, 15):
        assert box.contains(_destination(center, radius * 0.999, bearing))


def test_bounding_box_is_skipped_near_the_poles():
    assert bounding_box(Coordinate(89.99, 0.0), 5000) is None
    assert bounding_box(Coordinate(-89.99, 0.0), 5000) is None


def test_bounding_box_is_skipped_across_the_antimeridian():
    assert bounding_box(Coordinate(0.0, 179.999), 5000) is None
    assert bounding_box(Coordinate(0.0, -179.999), 5000) is None
