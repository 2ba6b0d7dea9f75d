"""Polyline reduction for storage and map rendering.

Three passes, in order:

1. Douglas-Peucker using planar point-to-chord distance in lat/lng degrees.
   Ties on the maximum distance resolve to the lowest index so output is
   reproducible.
2. Uniform stride sampling when the result still exceeds ``max_points``.
3. Re-insertion of dropped points that are local elevation extrema or that
   follow a long recording gap.

Douglas-Peucker runs on an explicit stack rather than recursion; the kept set
is identical to the recursive formulation.
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence, Set, TypeVar

import numpy as np
from numpy.typing import NDArray

from .config import (
    DEFAULT_MAX_POINTS,
    DEFAULT_SIMPLIFICATION_TOLERANCE,
    PRESERVE_TIME_GAP_SECONDS,
)
from .models import TrackPoint

CoordArray = NDArray[np.float64]
T = TypeVar("T")


def _coordinate_arrays(points: Sequence[TrackPoint]) -> tuple[CoordArray, CoordArray]:
    lat = np.fromiter((p.latitude for p in points), dtype=float, count=len(points))
    lon = np.fromiter((p.longitude for p in points), dtype=float, count=len(points))
    return lat, lon


def _chord_distances(
    lat: CoordArray, lon: CoordArray, start: int, end: int
) -> CoordArray:
    """Planar distance of each interior point of ``[start, end]`` to its chord."""

    d_lat = lat[start + 1 : end] - lat[start]
    d_lon = lon[start + 1 : end] - lon[start]
    chord_lat = lat[end] - lat[start]
    chord_lon = lon[end] - lon[start]
    length_sq = chord_lat * chord_lat + chord_lon * chord_lon
    if length_sq == 0:
        # Closed loop: measure from the shared endpoint.
        return np.hypot(d_lat, d_lon)
    param = np.clip((d_lat * chord_lat + d_lon * chord_lon) / length_sq, 0.0, 1.0)
    return np.hypot(d_lat - param * chord_lat, d_lon - param * chord_lon)


def douglas_peucker_indices(points: Sequence[TrackPoint], tolerance: float) -> List[int]:
    """Return the sorted indices Douglas-Peucker keeps for ``tolerance``."""

    count = len(points)
    if count <= 2:
        return list(range(count))
    lat, lon = _coordinate_arrays(points)
    keep = np.zeros(count, dtype=bool)
    keep[0] = keep[-1] = True
    stack = [(0, count - 1)]
    while stack:
        start, end = stack.pop()
        if end - start < 2:
            continue
        distances = _chord_distances(lat, lon, start, end)
        # argmax returns the first occurrence, giving the lowest-index tie-break.
        offset = int(np.argmax(distances))
        if distances[offset] > tolerance:
            split = start + 1 + offset
            keep[split] = True
            stack.append((split, end))
            stack.append((start, split))
    return [int(i) for i in np.flatnonzero(keep)]


def douglas_peucker(points: Sequence[TrackPoint], tolerance: float) -> List[TrackPoint]:
    """Douglas-Peucker reduction of ``points``."""

    return [points[i] for i in douglas_peucker_indices(points, tolerance)]


def uniform_sample(items: Sequence[T], max_points: Optional[int]) -> List[T]:
    """Stride-sample ``items`` down to exactly ``max_points``.

    The first and last items are always kept. ``None`` disables the cap and
    caps below two are raised to two.
    """

    if max_points is None:
        return list(items)
    target = max(2, max_points)
    if len(items) <= target:
        return list(items)
    step = (len(items) - 1) / (target - 1)
    sampled = [items[int(math.floor(i * step + 0.5))] for i in range(target - 1)]
    sampled.append(items[-1])
    return sampled


def _is_elevation_extremum(points: Sequence[TrackPoint], index: int) -> bool:
    before = points[index - 1].elevation
    here = points[index].elevation
    after = points[index + 1].elevation
    if before is None or here is None or after is None:
        return False
    return (here > before and here > after) or (here < before and here < after)


def _follows_time_gap(points: Sequence[TrackPoint], index: int, gap_ms: float) -> bool:
    before = points[index - 1].timestamp_ms
    here = points[index].timestamp_ms
    if before is None or here is None:
        return False
    return here - before > gap_ms


def important_point_indices(
    points: Sequence[TrackPoint],
    kept: Set[int],
    *,
    preserve_elevation: bool,
    preserve_timestamps: bool,
    gap_seconds: float = PRESERVE_TIME_GAP_SECONDS,
) -> List[int]:
    """Indices of dropped interior points worth restoring."""

    gap_ms = gap_seconds * 1000.0
    restored: List[int] = []
    for index in range(1, len(points) - 1):
        if index in kept:
            continue
        if preserve_elevation and _is_elevation_extremum(points, index):
            restored.append(index)
        elif preserve_timestamps and _follows_time_gap(points, index, gap_ms):
            restored.append(index)
    return restored


def simplify_indices(
    points: Sequence[TrackPoint],
    tolerance: float = DEFAULT_SIMPLIFICATION_TOLERANCE,
    max_points: Optional[int] = DEFAULT_MAX_POINTS,
    preserve_elevation: bool = True,
    preserve_timestamps: bool = True,
) -> List[int]:
    """Indices of ``points`` retained by :func:`simplify`."""

    if len(points) <= 2:
        return list(range(len(points)))
    indices = douglas_peucker_indices(points, tolerance)
    indices = uniform_sample(indices, max_points)
    if preserve_elevation or preserve_timestamps:
        extra = important_point_indices(
            points,
            set(indices),
            preserve_elevation=preserve_elevation,
            preserve_timestamps=preserve_timestamps,
        )
        if extra:
            indices = sorted(set(indices).union(extra))
    return indices


def simplify(
    points: Sequence[TrackPoint],
    tolerance: float = DEFAULT_SIMPLIFICATION_TOLERANCE,
    max_points: Optional[int] = DEFAULT_MAX_POINTS,
    preserve_elevation: bool = True,
    preserve_timestamps: bool = True,
) -> List[TrackPoint]:
    """Reduce ``points`` for storage or rendering; tracks of two or fewer points pass through."""

    indices = simplify_indices(
        points,
        tolerance=tolerance,
        max_points=max_points,
        preserve_elevation=preserve_elevation,
        preserve_timestamps=preserve_timestamps,
    )
    return [points[i] for i in indices]


__all__ = [
    "douglas_peucker",
    "douglas_peucker_indices",
    "important_point_indices",
    "simplify",
    "simplify_indices",
    "uniform_sample",
]
