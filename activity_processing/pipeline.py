"""End-to-end processing: payload in, :class:`ProcessedActivityData` out.

``process_activity_file`` is the canonical path used before persisting an
activity. ``preview_activity`` runs the same parsers, normalizer and
statistics with coarser simplification for quick previews. Both raise the
typed errors from :mod:`activity_processing.errors` and never return partial
output.
"""

from __future__ import annotations

import logging
import time
from typing import Optional, Sequence

from .assembler import assemble
from .config import (
    FIT_DECODE_TIMEOUT_SECONDS,
    PREVIEW_MAX_POINTS,
    PREVIEW_SIMPLIFICATION_TOLERANCE,
)
from .models import ProcessedActivityData, ProcessingOptions, TrackPoint
from .normalizer import normalize
from .parsers import Payload, parse
from .simplification import simplify
from .statistics import compute_stats

LOGGER = logging.getLogger(__name__)

UNTITLED_ACTIVITY = "Untitled Activity"


def preview_options() -> ProcessingOptions:
    return ProcessingOptions(
        simplify=True,
        tolerance=PREVIEW_SIMPLIFICATION_TOLERANCE,
        max_points=PREVIEW_MAX_POINTS,
        preserve_elevation=False,
        preserve_timestamps=False,
        include_full_points=False,
    )


def process_points(
    points: Sequence[TrackPoint],
    name: Optional[str] = None,
    options: Optional[ProcessingOptions] = None,
) -> ProcessedActivityData:
    """Normalize, measure and simplify an already-parsed point sequence.

    Raises:
        NoValidPointsError: No point has a usable coordinate.
    """

    opts = options or ProcessingOptions()
    valid = normalize(points)
    stats = compute_stats(valid)
    geometry_points = valid
    if opts.simplify:
        geometry_points = simplify(
            valid,
            tolerance=opts.tolerance,
            max_points=opts.max_points,
            preserve_elevation=opts.preserve_elevation,
            preserve_timestamps=opts.preserve_timestamps,
        )
    output_points = valid if opts.include_full_points else geometry_points
    return assemble(name or UNTITLED_ACTIVITY, stats, geometry_points, output_points)


def process_activity_file(
    data: Payload,
    extension: str,
    options: Optional[ProcessingOptions] = None,
    *,
    fit_timeout: float = FIT_DECODE_TIMEOUT_SECONDS,
) -> ProcessedActivityData:
    """Parse ``data`` according to ``extension`` and process the resulting track.

    Raises:
        ActivityProcessingError: A typed failure from parsing or normalization.
    """

    started = time.perf_counter()
    track = parse(data, extension, fit_timeout=fit_timeout)
    result = process_points(track.points, track.name, options)
    LOGGER.info(
        "Processed %s activity '%s': %d points (%d in geometry) in %.1fms",
        extension,
        result.name,
        len(track.points),
        len(result.geometry.coordinates),
        (time.perf_counter() - started) * 1000,
    )
    return result


def preview_activity(data: Payload, extension: str) -> ProcessedActivityData:
    """Quick preview: full statistics, coarse geometry, simplified points only."""

    return process_activity_file(data, extension, preview_options())


__all__ = [
    "UNTITLED_ACTIVITY",
    "preview_activity",
    "preview_options",
    "process_activity_file",
    "process_points",
]
