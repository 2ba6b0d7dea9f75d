"""Spherical-Earth distance, bearing and bounds helpers."""

from __future__ import annotations

import math
from typing import Iterable, Sequence

from .config import EARTH_RADIUS_M
from .models import BoundingBox, Center, TrackPoint


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Return the great-circle distance between two coordinates in metres."""

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)
    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    # Rounding can push ``a`` marginally above 1 for antipodal points.
    a = min(1.0, max(0.0, a))
    return 2 * EARTH_RADIUS_M * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def point_distance(first: TrackPoint, second: TrackPoint) -> float:
    """Haversine distance between two track points in metres."""

    return haversine_distance(
        first.latitude, first.longitude, second.latitude, second.longitude
    )


def initial_bearing(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Return the initial compass bearing (0-360 degrees) from point 1 to 2."""

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_lambda = math.radians(lon2 - lon1)
    x = math.sin(d_lambda) * math.cos(phi2)
    y = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(
        d_lambda
    )
    return (math.degrees(math.atan2(x, y)) + 360.0) % 360.0


def is_valid_coordinate(latitude: float, longitude: float) -> bool:
    """Return ``True`` for finite coordinates inside the WGS84 ranges."""

    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        return False
    return -90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0


def bounding_box(points: Iterable[TrackPoint]) -> BoundingBox:
    """Return the axis-aligned lat/lng box around ``points``.

    An empty iterable yields an all-zero box rather than infinite bounds.
    """

    north = -math.inf
    south = math.inf
    east = -math.inf
    west = math.inf
    for point in points:
        north = max(north, point.latitude)
        south = min(south, point.latitude)
        east = max(east, point.longitude)
        west = min(west, point.longitude)
    return BoundingBox(
        north=north if math.isfinite(north) else 0.0,
        south=south if math.isfinite(south) else 0.0,
        east=east if math.isfinite(east) else 0.0,
        west=west if math.isfinite(west) else 0.0,
    )


def is_point_in_bounds(point: TrackPoint, box: BoundingBox) -> bool:
    """Return ``True`` when ``point`` lies inside or on the edges of ``box``."""

    return (
        box.south <= point.latitude <= box.north
        and box.west <= point.longitude <= box.east
    )


def centroid(points: Sequence[TrackPoint]) -> Center:
    """Arithmetic mean of the coordinates, ``(0, 0)`` for no points."""

    if not points:
        return Center(lat=0.0, lng=0.0)
    lat_sum = math.fsum(point.latitude for point in points)
    lng_sum = math.fsum(point.longitude for point in points)
    return Center(lat=lat_sum / len(points), lng=lng_sum / len(points))


__all__ = [
    "bounding_box",
    "centroid",
    "haversine_distance",
    "initial_bearing",
    "is_point_in_bounds",
    "is_valid_coordinate",
    "point_distance",
]
