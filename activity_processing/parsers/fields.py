"""Field-name candidate tables for decoded record shapes.

Binary decoders expose the same quantity under several names depending on
the device and message type. Each table lists the names in priority order;
the first non-null value wins.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

FIT_LATITUDE_FIELDS: tuple[str, ...] = (
    "position_lat",
    "latitude",
    "start_position_lat",
)
FIT_LONGITUDE_FIELDS: tuple[str, ...] = (
    "position_long",
    "longitude",
    "start_position_long",
)
FIT_ELEVATION_FIELDS: tuple[str, ...] = ("enhanced_altitude", "altitude")
FIT_TIMESTAMP_FIELDS: tuple[str, ...] = ("timestamp", "start_time")
FIT_SPORT_FIELDS: tuple[str, ...] = ("sport",)

# Message groups searched for positions, most specific first.
FIT_POINT_SOURCES: tuple[str, ...] = ("record", "lap", "session")

# Message groups searched for a sport label.
FIT_SPORT_SOURCES: tuple[str, ...] = ("session", "sport")


def first_present(record: Mapping[str, Any], candidates: Sequence[str]) -> Optional[Any]:
    """Return the first non-null value of ``candidates`` found in ``record``."""

    for name in candidates:
        value = record.get(name)
        if value is not None:
            return value
    return None


__all__ = [
    "FIT_ELEVATION_FIELDS",
    "FIT_LATITUDE_FIELDS",
    "FIT_LONGITUDE_FIELDS",
    "FIT_POINT_SOURCES",
    "FIT_SPORT_FIELDS",
    "FIT_SPORT_SOURCES",
    "FIT_TIMESTAMP_FIELDS",
    "first_present",
]
