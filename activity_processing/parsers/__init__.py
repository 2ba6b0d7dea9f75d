"""Format parsers keyed by declared file extension.

Each parser turns a raw payload into a :class:`ParsedTrack`; the extension is
supplied by the caller and never sniffed from content.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Tuple, Union

from ..config import FIT_DECODE_TIMEOUT_SECONDS, SUPPORTED_EXTENSIONS
from ..errors import DecodeError, UnsupportedFormatError
from ..models import ParsedTrack
from .fit import parse_fit
from .kmz import parse_kmz
from .xml_tracks import parse_xml_track

LOGGER = logging.getLogger(__name__)

Payload = Union[bytes, bytearray, memoryview, str]


def normalize_extension(value: str) -> str:
    """Lower-case an extension (or file name) and drop any leading dot."""

    cleaned = (value or "").strip().lower()
    if "." in cleaned:
        cleaned = cleaned.rsplit(".", 1)[-1]
    return cleaned


def _as_bytes(raw: Payload, label: str) -> bytes:
    if isinstance(raw, str):
        raise DecodeError(f"{label} payload must be binary, got text")
    return bytes(raw)


def _as_markup(raw: Payload) -> Union[bytes, str]:
    if isinstance(raw, str):
        return raw
    return bytes(raw)


def _parse_xml(extension: str) -> Callable[[Payload, float], ParsedTrack]:
    def _parse(raw: Payload, _timeout: float) -> ParsedTrack:
        return parse_xml_track(_as_markup(raw), extension)

    return _parse


def _parse_fit(raw: Payload, timeout: float) -> ParsedTrack:
    return parse_fit(_as_bytes(raw, "FIT"), timeout=timeout)


def _parse_kmz(raw: Payload, _timeout: float) -> ParsedTrack:
    return parse_kmz(_as_bytes(raw, "KMZ"))


PARSERS: Dict[str, Callable[[Payload, float], ParsedTrack]] = {
    "gpx": _parse_xml("gpx"),
    "tcx": _parse_xml("tcx"),
    "kml": _parse_xml("kml"),
    "fit": _parse_fit,
    "kmz": _parse_kmz,
}


def supported_extensions() -> Tuple[str, ...]:
    return tuple(ext for ext in SUPPORTED_EXTENSIONS if ext in PARSERS)


def parse(
    raw: Payload,
    extension: str,
    *,
    fit_timeout: float = FIT_DECODE_TIMEOUT_SECONDS,
) -> ParsedTrack:
    """Dispatch ``raw`` to the parser registered for ``extension``.

    Raises:
        UnsupportedFormatError: ``extension`` has no parser; nothing is parsed.
        ActivityProcessingError: Any typed failure from the chosen parser.
    """

    ext = normalize_extension(extension)
    if ext not in supported_extensions():
        raise UnsupportedFormatError(f"Unsupported file format: .{ext}")
    LOGGER.debug("Parsing %s payload", ext)
    return PARSERS[ext](raw, fit_timeout)


__all__ = [
    "PARSERS",
    "Payload",
    "normalize_extension",
    "parse",
    "supported_extensions",
]
