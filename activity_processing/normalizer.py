"""Filter parser output down to points with usable coordinates."""

from __future__ import annotations

import logging
import math
from typing import Iterable, List

from .errors import NoValidPointsError
from .geodesy import is_valid_coordinate
from .models import TrackPoint

LOGGER = logging.getLogger(__name__)


def _clean(point: TrackPoint) -> TrackPoint:
    elevation = point.elevation
    if elevation is not None and not math.isfinite(elevation):
        elevation = None
    return TrackPoint(
        latitude=float(point.latitude),
        longitude=float(point.longitude),
        elevation=elevation,
        timestamp_ms=point.timestamp_ms,
    )


def normalize(points: Iterable[TrackPoint]) -> List[TrackPoint]:
    """Return the points with finite, in-range latitude and longitude.

    Non-finite elevations are cleared rather than rejecting the point.

    Raises:
        NoValidPointsError: No point survives validation.
    """

    total = 0
    valid: List[TrackPoint] = []
    for point in points:
        total += 1
        if point.latitude is None or point.longitude is None:
            continue
        if not is_valid_coordinate(point.latitude, point.longitude):
            continue
        valid.append(_clean(point))
    if not valid:
        raise NoValidPointsError("No valid GPS coordinates found in file.")
    if len(valid) != total:
        LOGGER.debug("Dropped %d of %d points with invalid coordinates", total - len(valid), total)
    return valid


__all__ = ["normalize"]
