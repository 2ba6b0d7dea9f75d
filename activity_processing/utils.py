"""General utility helpers shared across modules."""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Optional

KM_TO_MILES = 0.621371


def to_epoch_ms(value: datetime) -> int:
    """Convert a datetime to epoch milliseconds, treating naive values as UTC."""

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(round(value.timestamp() * 1000))


def parse_timestamp_ms(text: Optional[str]) -> Optional[int]:
    """Parse an ISO-8601 timestamp into epoch milliseconds.

    Returns ``None`` for blank or unparseable input so a bad ``<time>`` never
    discards an otherwise usable coordinate.
    """

    if not text:
        return None
    raw = text.strip()
    if not raw:
        return None
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return None
    return to_epoch_ms(parsed)


def parse_float(text: Optional[str]) -> float:
    """Parse a decimal string, yielding ``nan`` when it is missing or invalid."""

    if text is None:
        return math.nan
    try:
        return float(text.strip())
    except (ValueError, TypeError):
        return math.nan


def parse_optional_float(text: Optional[str]) -> Optional[float]:
    """Like :func:`parse_float` but ``None`` for missing or non-finite values."""

    value = parse_float(text)
    return value if math.isfinite(value) else None


def format_distance(meters: float, unit: str = "km") -> str:
    """Render a distance for display, switching to metres below one unit."""

    converted = meters / 1000.0
    if unit == "miles":
        converted *= KM_TO_MILES
    if converted < 1:
        return f"{round(meters)} m"
    return f"{converted:.2f} {unit}"


def format_duration(seconds: float) -> str:
    """Render a duration as ``H:MM:SS`` or ``M:SS``."""

    total = int(max(seconds, 0))
    minutes, secs = divmod(total, 60)
    hours, minutes = divmod(minutes, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_speed(speed_mps: float, unit: str = "kmh") -> str:
    """Render a speed given in metres per second."""

    kmh = speed_mps * 3.6
    converted = kmh * KM_TO_MILES if unit == "mph" else kmh
    return f"{converted:.1f} {unit}"


def format_pace(pace_min_per_km: float, unit: str = "min/km") -> str:
    """Render a pace given in minutes per kilometre as ``M:SS unit``."""

    converted = pace_min_per_km / KM_TO_MILES if unit == "min/mile" else pace_min_per_km
    minutes = int(math.floor(converted))
    seconds = int(round((converted - minutes) * 60))
    if seconds == 60:
        minutes += 1
        seconds = 0
    return f"{minutes}:{seconds:02d} {unit}"
