#!/usr/bin/env python3
"""Process a local activity file and print what the pipeline produces.

Useful for checking how an upload will be parsed before it reaches the
ingest service.

Usage examples:

    # Human-readable summary
    python -m activity_processing.tools.inspect_activity ride.fit

    # Full processed payload as JSON
    python -m activity_processing.tools.inspect_activity morning.gpx \
        --output-format json --output-file morning.json

    # Encoded polyline of the simplified geometry
    python -m activity_processing.tools.inspect_activity hike.kmz \
        --output-format polyline --tolerance 0.0002
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

import polyline

from activity_processing.activity_types import infer_activity_type
from activity_processing.config import DEFAULT_MAX_POINTS, DEFAULT_SIMPLIFICATION_TOLERANCE
from activity_processing.errors import ActivityProcessingError
from activity_processing.models import ProcessedActivityData, ProcessingOptions
from activity_processing.parsers import normalize_extension, supported_extensions
from activity_processing.pipeline import process_activity_file
from activity_processing.statistics import average_pace_min_per_km
from activity_processing.utils import (
    format_distance,
    format_duration,
    format_pace,
    format_speed,
)

LOGGER = logging.getLogger("inspect_activity")


def encode_geometry(result: ProcessedActivityData) -> str:
    """Encode the result geometry as a Google polyline (lat/lng order)."""

    return polyline.encode([(coord[1], coord[0]) for coord in result.geometry.coordinates])


def render_summary(result: ProcessedActivityData) -> str:
    stats = result.stats
    box = stats.bounding_box
    lines: List[str] = [
        f"Name:           {result.name}",
        f"Activity type:  {infer_activity_type(stats)}",
        f"Points:         {len(result.points)} ({len(result.geometry.coordinates)} in {result.geometry.type})",
        f"Distance:       {format_distance(stats.distance_meters)}",
        f"Duration:       {format_duration(stats.duration_seconds)}",
        f"Avg speed:      {format_speed(stats.avg_speed_mps)}",
        f"Max speed:      {format_speed(stats.max_speed_mps)}",
        f"Avg pace:       {format_pace(average_pace_min_per_km(stats))}",
        f"Elevation:      +{stats.elevation_gain_meters:.0f} m / -{stats.elevation_loss_meters:.0f} m "
        f"(min {stats.min_elevation:.0f} m, max {stats.max_elevation:.0f} m)",
        f"Bounds:         N {box.north:.5f} S {box.south:.5f} E {box.east:.5f} W {box.west:.5f}",
        f"Center:         {stats.center.lat:.5f}, {stats.center.lng:.5f}",
    ]
    return "\n".join(lines)


def render(result: ProcessedActivityData, output_format: str) -> str:
    if output_format == "json":
        return json.dumps(result.to_dict(), indent=2)
    if output_format == "geojson":
        feature = {
            "type": "Feature",
            "properties": {"name": result.name, **result.stats.to_dict()},
            "geometry": result.geometry.to_dict(),
        }
        return json.dumps(feature, indent=2)
    if output_format == "polyline":
        return encode_geometry(result)
    return render_summary(result)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Parse a GPS activity file and report its statistics and geometry"
    )
    parser.add_argument("path", help="Activity file (" + ", ".join(supported_extensions()) + ")")
    parser.add_argument(
        "--extension",
        help="Override the format instead of using the file suffix",
    )
    parser.add_argument(
        "--output-format",
        choices=["summary", "json", "geojson", "polyline"],
        default="summary",
        help="Output format (default: summary)",
    )
    parser.add_argument(
        "--tolerance",
        type=float,
        default=DEFAULT_SIMPLIFICATION_TOLERANCE,
        help="Douglas-Peucker tolerance in degrees",
    )
    parser.add_argument(
        "--max-points",
        type=int,
        default=DEFAULT_MAX_POINTS,
        help="Cap on geometry points (0 disables the cap)",
    )
    parser.add_argument(
        "--no-simplify",
        action="store_true",
        help="Use every normalized point for the geometry",
    )
    parser.add_argument(
        "--output-file",
        help="Write output to this path instead of stdout",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Python logging level",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for the inspect_activity tool."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
    )

    path = Path(args.path)
    extension = normalize_extension(args.extension or path.suffix)
    options = ProcessingOptions(
        simplify=not args.no_simplify,
        tolerance=args.tolerance,
        max_points=args.max_points if args.max_points > 0 else None,
    )

    try:
        result = process_activity_file(path.read_bytes(), extension, options)
    except OSError as exc:
        LOGGER.error("Cannot read %s: %s", path, exc)
        return 2
    except ActivityProcessingError as exc:
        LOGGER.error("%s [%s]", exc, exc.kind.value)
        return 1

    output = render(result, args.output_format)
    if args.output_file:
        output_path = Path(args.output_file)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(output)
        LOGGER.info("Output written to %s", output_path)
    else:
        sys.stdout.write(output + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
