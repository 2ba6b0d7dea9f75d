"""Dataclasses describing track points, derived statistics and pipeline output."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .config import (
    DEFAULT_MAX_POINTS,
    DEFAULT_SIMPLIFICATION_TOLERANCE,
    SIMPLIFY_GEOMETRY,
)


@dataclass(slots=True)
class TrackPoint:
    """One geographic sample produced by a parser."""

    latitude: float
    longitude: float
    elevation: Optional[float] = None
    timestamp_ms: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "latitude": self.latitude,
            "longitude": self.longitude,
        }
        if self.elevation is not None:
            payload["elevation"] = self.elevation
        if self.timestamp_ms is not None:
            payload["timestampMs"] = self.timestamp_ms
        return payload


@dataclass(frozen=True, slots=True)
class BoundingBox:
    north: float
    south: float
    east: float
    west: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "north": self.north,
            "south": self.south,
            "east": self.east,
            "west": self.west,
        }


@dataclass(frozen=True, slots=True)
class Center:
    lat: float
    lng: float

    def to_dict(self) -> Dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True, slots=True)
class ActivityStats:
    """Aggregate statistics derived from a normalized point sequence."""

    distance_meters: float
    duration_seconds: float
    elevation_gain_meters: float
    elevation_loss_meters: float
    max_elevation: float
    min_elevation: float
    avg_speed_mps: float
    max_speed_mps: float
    bounding_box: BoundingBox
    center: Center
    start_time_ms: Optional[int] = None
    end_time_ms: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Return the flat stats object expected by persistence callers."""

        payload: Dict[str, Any] = {
            "distanceMeters": self.distance_meters,
            "durationSeconds": self.duration_seconds,
            "elevationGainMeters": self.elevation_gain_meters,
            "elevationLossMeters": self.elevation_loss_meters,
            "maxElevation": self.max_elevation,
            "minElevation": self.min_elevation,
            "avgSpeedMps": self.avg_speed_mps,
            "maxSpeedMps": self.max_speed_mps,
            "boundingBox": self.bounding_box.to_dict(),
            "center": self.center.to_dict(),
        }
        if self.start_time_ms is not None:
            payload["startTimeMs"] = self.start_time_ms
        if self.end_time_ms is not None:
            payload["endTimeMs"] = self.end_time_ms
        return payload


@dataclass(slots=True)
class Geometry:
    """GeoJSON-style geometry with ``[lon, lat(, ele)]`` coordinates."""

    type: str
    coordinates: List[List[float]]

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "coordinates": [list(c) for c in self.coordinates]}


@dataclass(slots=True)
class ProcessedActivityData:
    """Unit of output handed back to the caller on success."""

    name: str
    geometry: Geometry
    stats: ActivityStats
    points: List[TrackPoint]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "geometry": self.geometry.to_dict(),
            "stats": self.stats.to_dict(),
            "points": [point.to_dict() for point in self.points],
        }


@dataclass(slots=True)
class ParsedTrack:
    """Raw parser output before normalization."""

    name: Optional[str]
    points: List[TrackPoint] = field(default_factory=list)


@dataclass(slots=True)
class ProcessingOptions:
    """Knobs for the simplification stage of the pipeline."""

    simplify: bool = SIMPLIFY_GEOMETRY
    tolerance: float = DEFAULT_SIMPLIFICATION_TOLERANCE
    max_points: Optional[int] = DEFAULT_MAX_POINTS
    preserve_elevation: bool = True
    preserve_timestamps: bool = True
    # When False the output ``points`` are the simplified points.
    include_full_points: bool = True


@dataclass(frozen=True, slots=True)
class ElevationProfilePoint:
    distance_meters: float
    elevation: float
    grade_percent: float


@dataclass(frozen=True, slots=True)
class SpeedProfilePoint:
    distance_meters: float
    speed_mps: float
    pace_min_per_km: float
    timestamp_ms: Optional[int]


@dataclass(slots=True)
class SpeedProfile:
    points: List[SpeedProfilePoint] = field(default_factory=list)
    average_speed_mps: float = 0.0
    max_speed_mps: float = 0.0
    total_time_seconds: float = 0.0


__all__ = [
    "ActivityStats",
    "BoundingBox",
    "Center",
    "ElevationProfilePoint",
    "Geometry",
    "ParsedTrack",
    "ProcessedActivityData",
    "ProcessingOptions",
    "SpeedProfile",
    "SpeedProfilePoint",
    "TrackPoint",
]
