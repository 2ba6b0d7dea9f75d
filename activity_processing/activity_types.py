"""Utilities for labelling activity types."""

from __future__ import annotations

from typing import Any

from .config import (
    CYCLING_MIN_AVG_SPEED_KMH,
    HIKING_MIN_GAIN_PER_KM,
    RUNNING_MIN_AVG_SPEED_KMH,
)
from .models import ActivityStats

__all__ = [
    "infer_activity_type",
    "normalize_activity_type",
]


def normalize_activity_type(value: Any) -> str | None:
    """Return a lowercase activity type string or ``None`` when missing.

    FIT sport enums and caller labels arrive with inconsistent casing.
    """

    if value is None:
        return None
    normalized = str(value).strip().lower()
    return normalized or None


def infer_activity_type(stats: ActivityStats) -> str:
    """Guess an activity type from speed and climbing.

    Args:
        stats: Statistics of the processed track.

    Returns:
        ``"cycling"`` above 20 km/h average, ``"running"`` above 8 km/h,
        ``"hiking"`` when the climb exceeds 50 m per km, else ``"walking"``.
    """

    avg_kmh = stats.avg_speed_mps * 3.6
    if avg_kmh > CYCLING_MIN_AVG_SPEED_KMH:
        return "cycling"
    if avg_kmh > RUNNING_MIN_AVG_SPEED_KMH:
        return "running"
    distance_km = stats.distance_meters / 1000.0
    if stats.elevation_gain_meters > distance_km * HIKING_MIN_GAIN_PER_KM:
        return "hiking"
    return "walking"
