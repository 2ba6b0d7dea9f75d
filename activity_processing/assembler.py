"""Package points, statistics and geometry into the pipeline's output."""

from __future__ import annotations

from typing import List, Sequence

from shapely.geometry import LineString, MultiPoint, mapping

from .models import ActivityStats, Geometry, ProcessedActivityData, TrackPoint


def _coordinates(points: Sequence[TrackPoint]) -> List[tuple[float, ...]]:
    """``(lon, lat)`` pairs, or ``(lon, lat, ele)`` when every point has elevation."""

    with_elevation = all(p.elevation is not None for p in points)
    if with_elevation:
        return [(p.longitude, p.latitude, float(p.elevation)) for p in points]  # type: ignore[arg-type]
    return [(p.longitude, p.latitude) for p in points]


def build_geometry(points: Sequence[TrackPoint]) -> Geometry:
    """LineString for two or more points, MultiPoint for a single point.

    Raises:
        ValueError: ``points`` is empty.
    """

    if not points:
        raise ValueError("Cannot build geometry from an empty point list")
    coords = _coordinates(points)
    shape = LineString(coords) if len(coords) >= 2 else MultiPoint(coords)
    geojson = mapping(shape)
    return Geometry(
        type=geojson["type"],
        coordinates=[[float(value) for value in coord] for coord in geojson["coordinates"]],
    )


def assemble(
    name: str,
    stats: ActivityStats,
    geometry_points: Sequence[TrackPoint],
    points: Sequence[TrackPoint],
) -> ProcessedActivityData:
    """Build the caller-facing result; ``points`` are copied, not shared."""

    return ProcessedActivityData(
        name=name,
        geometry=build_geometry(geometry_points),
        stats=stats,
        points=list(points),
    )


__all__ = ["assemble", "build_geometry"]
