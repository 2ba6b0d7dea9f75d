"""Aggregate statistics and per-point profiles for a normalized track.

Average speed is the mean of per-segment speeds, not total distance over
total duration. Segments only contribute a speed when both ends carry a
timestamp and time moves strictly forward.
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence

from .geodesy import bounding_box, centroid, point_distance
from .models import (
    ActivityStats,
    ElevationProfilePoint,
    SpeedProfile,
    SpeedProfilePoint,
    TrackPoint,
)


def segment_speed(previous: TrackPoint, current: TrackPoint) -> Optional[float]:
    """Speed in m/s between two points, or ``None`` without a positive time delta."""

    if previous.timestamp_ms is None or current.timestamp_ms is None:
        return None
    delta_s = (current.timestamp_ms - previous.timestamp_ms) / 1000.0
    if delta_s <= 0:
        return None
    return point_distance(previous, current) / delta_s


def compute_stats(points: Sequence[TrackPoint]) -> ActivityStats:
    """Single pass over ``points`` producing :class:`ActivityStats`.

    Raises:
        ValueError: ``points`` is empty.
    """

    if not points:
        raise ValueError("Cannot calculate stats for empty points array")

    total_distance = 0.0
    elevation_gain = 0.0
    elevation_loss = 0.0
    max_elevation: Optional[float] = None
    min_elevation: Optional[float] = None
    max_speed = 0.0
    speed_sum = 0.0
    speed_segments = 0
    previous: Optional[TrackPoint] = None
    previous_elevation: Optional[float] = None

    for current in points:
        elevation = current.elevation
        if elevation is not None:
            if max_elevation is None or elevation > max_elevation:
                max_elevation = elevation
            if min_elevation is None or elevation < min_elevation:
                min_elevation = elevation
            if previous_elevation is not None:
                diff = elevation - previous_elevation
                if diff > 0:
                    elevation_gain += diff
                else:
                    elevation_loss += -diff
            previous_elevation = elevation

        if previous is not None:
            total_distance += point_distance(previous, current)
            speed = segment_speed(previous, current)
            if speed is not None:
                max_speed = max(max_speed, speed)
                speed_sum += speed
                speed_segments += 1
        previous = current

    start_time = points[0].timestamp_ms
    end_time = points[-1].timestamp_ms
    duration = 0.0
    if start_time is not None and end_time is not None:
        duration = (end_time - start_time) / 1000.0

    final_min = min_elevation if min_elevation is not None else 0.0
    final_max = max_elevation if max_elevation is not None else final_min
    return ActivityStats(
        distance_meters=total_distance,
        duration_seconds=duration,
        elevation_gain_meters=elevation_gain,
        elevation_loss_meters=elevation_loss,
        max_elevation=final_max,
        min_elevation=final_min,
        avg_speed_mps=speed_sum / speed_segments if speed_segments else 0.0,
        max_speed_mps=max_speed,
        bounding_box=bounding_box(points),
        center=centroid(points),
        start_time_ms=start_time,
        end_time_ms=end_time,
    )


def elevation_profile(points: Sequence[TrackPoint]) -> List[ElevationProfilePoint]:
    """Cumulative distance, elevation and grade (percent) per point.

    Points without elevation reuse the last known elevation so the profile
    stays continuous.
    """

    profile: List[ElevationProfilePoint] = []
    cumulative = 0.0
    last_elevation = next(
        (p.elevation for p in points if p.elevation is not None), 0.0
    )
    previous: Optional[TrackPoint] = None
    for current in points:
        elevation = current.elevation if current.elevation is not None else last_elevation
        grade = 0.0
        if previous is not None:
            step = point_distance(previous, current)
            cumulative += step
            if step > 0:
                grade = (elevation - last_elevation) / step * 100.0
        profile.append(
            ElevationProfilePoint(
                distance_meters=cumulative,
                elevation=elevation,
                grade_percent=grade,
            )
        )
        last_elevation = elevation
        previous = current
    return profile


def speed_profile(points: Sequence[TrackPoint]) -> SpeedProfile:
    """Per-segment speed and pace along the track."""

    profile = SpeedProfile()
    if len(points) < 2:
        return profile

    cumulative = 0.0
    speed_sum = 0.0
    speed_count = 0
    for previous, current in zip(points, points[1:]):
        cumulative += point_distance(previous, current)
        speed = segment_speed(previous, current) or 0.0
        if speed > 0:
            speed_sum += speed
            speed_count += 1
            profile.max_speed_mps = max(profile.max_speed_mps, speed)
        pace = (1000.0 / speed) / 60.0 if speed > 0 else 0.0
        profile.points.append(
            SpeedProfilePoint(
                distance_meters=cumulative,
                speed_mps=speed,
                pace_min_per_km=pace,
                timestamp_ms=current.timestamp_ms,
            )
        )

    profile.average_speed_mps = speed_sum / speed_count if speed_count else 0.0
    stamps = [p.timestamp_ms for p in points if p.timestamp_ms is not None]
    if stamps:
        profile.total_time_seconds = (stamps[-1] - stamps[0]) / 1000.0
    return profile


def average_pace_min_per_km(stats: ActivityStats) -> float:
    """Pace implied by the per-segment average speed, ``0`` when stationary."""

    if stats.avg_speed_mps <= 0 or not math.isfinite(stats.avg_speed_mps):
        return 0.0
    return (1000.0 / stats.avg_speed_mps) / 60.0


__all__ = [
    "average_pace_min_per_km",
    "compute_stats",
    "elevation_profile",
    "segment_speed",
    "speed_profile",
]
