"""Central error types used across the processing pipeline."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Machine-checkable failure categories reported to callers."""

    UNSUPPORTED_FORMAT = "UnsupportedFormat"
    INVALID_FORMAT = "InvalidFormat"
    NO_TRACK_DATA = "NoTrackData"
    NO_VALID_POINTS = "NoValidPoints"
    MISSING_KML_ENTRY = "MissingKmlEntry"
    EMPTY_KML_ENTRY = "EmptyKmlEntry"
    PARSE_TIMEOUT = "ParseTimeout"
    DECODE_ERROR = "DecodeError"
    INVALID_PAYLOAD = "InvalidPayload"


class ActivityProcessingError(RuntimeError):
    """Base error for every failure raised by the processing core."""

    kind: ErrorKind = ErrorKind.DECODE_ERROR


class UnsupportedFormatError(ActivityProcessingError):
    """Raised when the declared extension has no registered parser."""

    kind = ErrorKind.UNSUPPORTED_FORMAT


class InvalidFormatError(ActivityProcessingError):
    """Raised when markup input is not well-formed."""

    kind = ErrorKind.INVALID_FORMAT


class NoTrackDataError(ActivityProcessingError):
    """Raised when a parser finds no coordinate-bearing elements at all."""

    kind = ErrorKind.NO_TRACK_DATA


class NoValidPointsError(ActivityProcessingError):
    """Raised when points exist but none has a usable latitude/longitude."""

    kind = ErrorKind.NO_VALID_POINTS


class MissingKmlEntryError(ActivityProcessingError):
    """Raised when a KMZ archive contains no ``.kml`` member."""

    kind = ErrorKind.MISSING_KML_ENTRY


class EmptyKmlEntryError(ActivityProcessingError):
    """Raised when the KML member of a KMZ archive is blank."""

    kind = ErrorKind.EMPTY_KML_ENTRY


class ParseTimeoutError(ActivityProcessingError):
    """Raised when FIT decoding misses its wall-clock deadline."""

    kind = ErrorKind.PARSE_TIMEOUT


class DecodeError(ActivityProcessingError):
    """Raised when an underlying decode library fails internally."""

    kind = ErrorKind.DECODE_ERROR


class InvalidPayloadError(ActivityProcessingError):
    """Raised by the ingest service for empty or oversized uploads."""

    kind = ErrorKind.INVALID_PAYLOAD


__all__ = [
    "ActivityProcessingError",
    "DecodeError",
    "EmptyKmlEntryError",
    "ErrorKind",
    "InvalidFormatError",
    "InvalidPayloadError",
    "MissingKmlEntryError",
    "NoTrackDataError",
    "NoValidPointsError",
    "ParseTimeoutError",
    "UnsupportedFormatError",
]
