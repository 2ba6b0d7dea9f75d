"""GPX, TCX and KML readers built on a namespace-agnostic element walk.

All three formats are plain XML; they differ only in where coordinates live
(attributes for GPX, child elements for TCX, a packed text block for KML).
Each reader returns a :class:`ParsedTrack` with raw points, leaving range
validation to the normalizer so that "no geometry" and "bad geometry" stay
distinguishable.
"""

from __future__ import annotations

import codecs
import logging
import math
import xml.etree.ElementTree as ET
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple, Union

from ..errors import InvalidFormatError, NoTrackDataError, UnsupportedFormatError
from ..models import ParsedTrack, TrackPoint
from ..utils import parse_float, parse_optional_float, parse_timestamp_ms

LOGGER = logging.getLogger(__name__)

Markup = Union[str, bytes]

DEFAULT_GPX_NAME = "GPX Activity"
DEFAULT_TCX_NAME = "TCX Activity"
DEFAULT_KML_NAME = "KML Track"

# GPX point elements in priority order: tracks, routes, standalone waypoints.
GPX_POINT_TAGS: Tuple[str, ...] = ("trkpt", "rtept", "wpt")

# Child paths (relative to the document root) searched for a GPX name.
GPX_NAME_PATHS: Tuple[Tuple[str, ...], ...] = (
    ("metadata", "name"),
    ("name",),
    ("trk", "name"),
    ("rte", "name"),
)

# KML geometry containers in priority order.
KML_GEOMETRY_TAGS: Tuple[str, ...] = ("LineString", "Track", "Point")


# ---------------------------------------------------------------------------
# Element helpers
# ---------------------------------------------------------------------------
def _local(tag: object) -> str:
    """Return the tag name without its ``{namespace}`` prefix."""

    if not isinstance(tag, str):
        # Comments and processing instructions carry callable tags.
        return ""
    return tag.rsplit("}", 1)[-1]


def _iter_local(element: ET.Element, name: str) -> Iterator[ET.Element]:
    for node in element.iter():
        if _local(node.tag) == name:
            yield node


def _child(element: ET.Element, name: str) -> Optional[ET.Element]:
    for node in element:
        if _local(node.tag) == name:
            return node
    return None


def _find_path(element: ET.Element, path: Sequence[str]) -> Optional[ET.Element]:
    current: Optional[ET.Element] = element
    for name in path:
        if current is None:
            return None
        current = _child(current, name)
    return current


def _text(element: Optional[ET.Element]) -> Optional[str]:
    if element is None or element.text is None:
        return None
    stripped = element.text.strip()
    return stripped or None


def _path_text(element: ET.Element, path: Sequence[str]) -> Optional[str]:
    return _text(_find_path(element, path))


def _prepare_markup(raw: Markup) -> Markup:
    """Strip a leading BOM and whitespace that would break the XML prolog."""

    if isinstance(raw, bytes):
        stripped = raw.lstrip()
        if stripped.startswith(codecs.BOM_UTF8):
            stripped = stripped[len(codecs.BOM_UTF8):].lstrip()
        return stripped
    return raw.lstrip("\ufeff \t\r\n")


def load_document(raw: Markup, label: str) -> ET.Element:
    """Parse markup into an element tree root or raise ``InvalidFormatError``."""

    try:
        return ET.fromstring(_prepare_markup(raw))
    except (ET.ParseError, LookupError, UnicodeError) as exc:
        raise InvalidFormatError(f"Invalid {label} file format: {exc}") from exc


# ---------------------------------------------------------------------------
# GPX
# ---------------------------------------------------------------------------
def _gpx_point(element: ET.Element) -> TrackPoint:
    return TrackPoint(
        latitude=parse_float(element.get("lat")),
        longitude=parse_float(element.get("lon")),
        elevation=parse_optional_float(_text(_child(element, "ele"))),
        timestamp_ms=parse_timestamp_ms(_text(_child(element, "time"))),
    )


def parse_gpx_document(root: ET.Element) -> ParsedTrack:
    """Extract points from a GPX root, preferring tracks over routes over waypoints."""

    elements: List[ET.Element] = []
    source = None
    for tag in GPX_POINT_TAGS:
        elements = list(_iter_local(root, tag))
        if elements:
            source = tag
            break
    if not elements:
        raise NoTrackDataError("No valid track or waypoint data found in the GPX file.")

    name = None
    for path in GPX_NAME_PATHS:
        name = _path_text(root, path)
        if name:
            break
    LOGGER.debug("GPX: %d <%s> elements found", len(elements), source)
    return ParsedTrack(
        name=name or DEFAULT_GPX_NAME,
        points=[_gpx_point(element) for element in elements],
    )


# ---------------------------------------------------------------------------
# TCX
# ---------------------------------------------------------------------------
def _tcx_name(root: ET.Element) -> str:
    for course in _iter_local(root, "Course"):
        name = _path_text(course, ("Name",))
        if name:
            return name
    for activity in _iter_local(root, "Activity"):
        notes = _path_text(activity, ("Notes",))
        if notes:
            return notes
        sport = (activity.get("Sport") or "").strip()
        if sport:
            return f"{sport} Activity"
    return DEFAULT_TCX_NAME


def parse_tcx_document(root: ET.Element) -> ParsedTrack:
    """Extract positioned ``Trackpoint`` elements from a TCX root."""

    points: List[TrackPoint] = []
    for trackpoint in _iter_local(root, "Trackpoint"):
        latitude = _find_path(trackpoint, ("Position", "LatitudeDegrees"))
        longitude = _find_path(trackpoint, ("Position", "LongitudeDegrees"))
        if latitude is None or longitude is None:
            # Pauses and sensor-only samples carry no position.
            continue
        points.append(
            TrackPoint(
                latitude=parse_float(latitude.text),
                longitude=parse_float(longitude.text),
                elevation=parse_optional_float(
                    _path_text(trackpoint, ("AltitudeMeters",))
                ),
                timestamp_ms=parse_timestamp_ms(_path_text(trackpoint, ("Time",))),
            )
        )
    if not points:
        raise NoTrackDataError("No positioned Trackpoint elements found in the TCX file.")
    return ParsedTrack(name=_tcx_name(root), points=points)


# ---------------------------------------------------------------------------
# KML
# ---------------------------------------------------------------------------
def parse_kml_coordinates(text: str) -> List[TrackPoint]:
    """Parse a KML ``lon,lat[,ele]`` tuple list separated by whitespace."""

    points: List[TrackPoint] = []
    for token in text.split():
        parts = token.split(",")
        longitude = parse_float(parts[0])
        latitude = parse_float(parts[1]) if len(parts) > 1 else math.nan
        elevation = parse_optional_float(parts[2]) if len(parts) > 2 else None
        points.append(TrackPoint(latitude, longitude, elevation))
    return points


def _kml_coordinates_of(geometry: ET.Element) -> List[TrackPoint]:
    return parse_kml_coordinates(_path_text(geometry, ("coordinates",)) or "")


def _kml_track_points(track: ET.Element) -> List[TrackPoint]:
    """Parse a ``gx:Track`` whose ``gx:coord`` entries pair with ``when`` stamps."""

    stamps = [parse_timestamp_ms(_text(node)) for node in track if _local(node.tag) == "when"]
    points: List[TrackPoint] = []
    coords = [node for node in track if _local(node.tag) == "coord"]
    for index, node in enumerate(coords):
        parts = (_text(node) or "").split()
        longitude = parse_float(parts[0]) if parts else math.nan
        latitude = parse_float(parts[1]) if len(parts) > 1 else math.nan
        elevation = parse_optional_float(parts[2]) if len(parts) > 2 else None
        timestamp = stamps[index] if index < len(stamps) else None
        points.append(TrackPoint(latitude, longitude, elevation, timestamp))
    return points


_KML_READERS: Dict[str, Callable[[ET.Element], List[TrackPoint]]] = {
    "LineString": _kml_coordinates_of,
    "Track": _kml_track_points,
    "Point": _kml_coordinates_of,
}


def _kml_name(root: ET.Element) -> str:
    for container in ("Document", "Placemark"):
        for node in _iter_local(root, container):
            name = _path_text(node, ("name",))
            if name:
                return name
    # A bare <kml><Placemark> root has no Document wrapper.
    return _path_text(root, ("name",)) or DEFAULT_KML_NAME


def parse_kml_document(root: ET.Element) -> ParsedTrack:
    """Read the first line, track or point geometry of a KML document."""

    for tag in KML_GEOMETRY_TAGS:
        reader = _KML_READERS[tag]
        for geometry in _iter_local(root, tag):
            points = reader(geometry)
            if points:
                LOGGER.debug("KML: %d points read from <%s>", len(points), tag)
                return ParsedTrack(name=_kml_name(root), points=points)
    raise NoTrackDataError("No <coordinates> element found in KML file.")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------
_DOCUMENT_PARSERS: Dict[str, Callable[[ET.Element], ParsedTrack]] = {
    "gpx": parse_gpx_document,
    "tcx": parse_tcx_document,
    "kml": parse_kml_document,
}


def parse_xml_track(raw: Markup, extension: str) -> ParsedTrack:
    """Parse GPX/TCX/KML markup into a :class:`ParsedTrack`."""

    parser = _DOCUMENT_PARSERS.get(extension)
    if parser is None:
        raise UnsupportedFormatError(f"Unsupported XML track format: .{extension}")
    root = load_document(raw, extension.upper())
    return parser(root)


__all__ = [
    "DEFAULT_GPX_NAME",
    "DEFAULT_KML_NAME",
    "DEFAULT_TCX_NAME",
    "load_document",
    "parse_gpx_document",
    "parse_kml_coordinates",
    "parse_kml_document",
    "parse_tcx_document",
    "parse_xml_track",
]
