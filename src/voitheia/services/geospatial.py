"""Geospatial helper functions."""

from __future__ import annotations

import math
from dataclasses import dataclass

from ..models.domain import Coordinate

EARTH_RADIUS_M = 6_371_000.0


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Axis-aligned lat/lon box that never crosses a pole or the antimeridian."""

    min_latitude: float
    max_latitude: float
    min_longitude: float
    max_longitude: float

    def contains(self, point: Coordinate) -> bool:
        return (
            self.min_latitude <= point.latitude <= self.max_latitude
            and self.min_longitude <= point.longitude <= self.max_longitude
        )


def haversine_m(origin: Coordinate, target: Coordinate) -> float:
    """Compute the great-circle distance in meters using the Haversine formula."""

    phi1, phi2 = math.radians(origin.latitude), math.radians(target.latitude)
    d_phi = math.radians(target.latitude - origin.latitude)
    d_lambda = math.radians(target.longitude - origin.longitude)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    # Rounding can push a just past 1 for antipodal points.
    a = min(1.0, a)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def bounding_box(center: Coordinate, radius_m: float) -> BoundingBox | None:
    """Return a box enclosing every point within ``radius_m`` of ``center``.

    Returns None when the box would wrap a pole or the antimeridian; callers
    then scan without a pre-filter.
    """

    lat_delta = math.degrees(radius_m / EARTH_RADIUS_M)
    min_lat = center.latitude - lat_delta
    max_lat = center.latitude + lat_delta
    if min_lat <= -90.0 or max_lat >= 90.0:
        return None

    # Widest longitude span occurs at the box edge closest to a pole.
    widest_lat = max(abs(min_lat), abs(max_lat))
    lon_delta = lat_delta / math.cos(math.radians(widest_lat))
    min_lon = center.longitude - lon_delta
    max_lon = center.longitude + lon_delta
    if min_lon < -180.0 or max_lon > 180.0:
        return None

    return BoundingBox(min_lat, max_lat, min_lon, max_lon)
