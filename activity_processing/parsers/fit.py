"""FIT decoding behind a deadline-enforcing adapter.

``fitdecode`` streams frames from a binary payload. The adapter runs that
loop on a worker thread and races it against a wall-clock deadline; when the
deadline passes, a cancellation event stops the worker at its next frame and
the caller sees :class:`ParseTimeoutError`. The rest of the pipeline only
ever sees plain dictionaries grouped by message name.
"""

from __future__ import annotations

import io
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional

import fitdecode

from ..activity_types import normalize_activity_type
from ..config import FIT_DECODE_TIMEOUT_SECONDS, FIT_STRICT_CRC
from ..errors import (
    ActivityProcessingError,
    DecodeError,
    NoTrackDataError,
    NoValidPointsError,
    ParseTimeoutError,
)
from ..geodesy import is_valid_coordinate
from ..models import ParsedTrack, TrackPoint
from ..utils import to_epoch_ms
from .fields import (
    FIT_ELEVATION_FIELDS,
    FIT_LATITUDE_FIELDS,
    FIT_LONGITUDE_FIELDS,
    FIT_POINT_SOURCES,
    FIT_SPORT_FIELDS,
    FIT_SPORT_SOURCES,
    FIT_TIMESTAMP_FIELDS,
    first_present,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_FIT_NAME = "FIT Activity"

SEMICIRCLES_TO_DEGREES = 180.0 / 2**31

FitMessage = Dict[str, Any]
FitMessages = Dict[str, List[FitMessage]]
FitReaderFunc = Callable[[bytes, threading.Event], FitMessages]


class _DecodeCancelled(Exception):
    """Internal signal used to unwind the worker after a timeout."""


@dataclass(slots=True)
class DecodedFit:
    """Decoded FIT payload grouped by message name."""

    messages: FitMessages = field(default_factory=dict)

    def get(self, name: str) -> List[FitMessage]:
        return self.messages.get(name, [])


def _field_value(field_data: Any) -> Any:
    value = field_data.value
    if value is not None and getattr(field_data, "units", None) == "semicircles":
        return value * SEMICIRCLES_TO_DEGREES
    return value


def read_fit_messages(data: bytes, cancel: threading.Event) -> FitMessages:
    """Stream every data message of ``data`` into per-name lists.

    Checks ``cancel`` between frames so an abandoned decode stops promptly.
    """

    check_crc = fitdecode.CrcCheck.RAISE if FIT_STRICT_CRC else fitdecode.CrcCheck.WARN
    messages: FitMessages = {}
    with fitdecode.FitReader(io.BytesIO(data), check_crc=check_crc) as reader:
        for frame in reader:
            if cancel.is_set():
                raise _DecodeCancelled()
            if not isinstance(frame, fitdecode.FitDataMessage):
                continue
            values = {
                field_data.name: _field_value(field_data)
                for field_data in frame.fields
                if field_data.name
            }
            messages.setdefault(frame.name, []).append(values)
    return messages


def decode_fit(
    data: bytes,
    timeout: float = FIT_DECODE_TIMEOUT_SECONDS,
    reader: Optional[FitReaderFunc] = None,
) -> DecodedFit:
    """Decode ``data`` within ``timeout`` seconds.

    Raises:
        ParseTimeoutError: The decode did not finish before the deadline.
        DecodeError: ``fitdecode`` rejected the payload.
    """

    read = reader or read_fit_messages
    cancel = threading.Event()
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="fit-decode")
    future = executor.submit(read, data, cancel)
    try:
        messages = future.result(timeout=timeout)
    except FutureTimeoutError as exc:
        cancel.set()
        future.cancel()
        LOGGER.warning("FIT decode exceeded %.1fs deadline", timeout)
        raise ParseTimeoutError(
            f"FIT parsing timed out after {timeout:g} seconds"
        ) from exc
    except ActivityProcessingError:
        raise
    except _DecodeCancelled as exc:  # pragma: no cover - only after a timeout
        raise ParseTimeoutError("FIT parsing was cancelled") from exc
    except (fitdecode.FitError, ValueError, TypeError, KeyError, EOFError) as exc:
        raise DecodeError(f"FIT parsing error: {exc}") from exc
    except Exception as exc:
        # fitdecode asserts on some malformed definition messages.
        raise DecodeError(f"FIT parsing error: {exc!r}") from exc
    finally:
        executor.shutdown(wait=False)
    return DecodedFit(messages=messages)


def _to_float(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _to_timestamp_ms(value: Any) -> Optional[int]:
    if isinstance(value, datetime):
        return to_epoch_ms(value)
    return None


def _message_point(message: Mapping[str, Any]) -> Optional[TrackPoint]:
    """Build a point from a decoded message, or ``None`` when it has no position."""

    latitude = _to_float(first_present(message, FIT_LATITUDE_FIELDS))
    longitude = _to_float(first_present(message, FIT_LONGITUDE_FIELDS))
    if latitude is None or longitude is None:
        return None
    return TrackPoint(
        latitude=latitude,
        longitude=longitude,
        elevation=_to_float(first_present(message, FIT_ELEVATION_FIELDS)),
        timestamp_ms=_to_timestamp_ms(first_present(message, FIT_TIMESTAMP_FIELDS)),
    )


def _activity_name(decoded: DecodedFit) -> str:
    for source in FIT_SPORT_SOURCES:
        for message in decoded.get(source):
            sport = normalize_activity_type(first_present(message, FIT_SPORT_FIELDS))
            if sport:
                return f"{sport} Activity"
    return DEFAULT_FIT_NAME


def extract_track(decoded: DecodedFit) -> ParsedTrack:
    """Turn decoded messages into a track, searching sources in priority order."""

    positioned: List[TrackPoint] = []
    source_name = None
    for source in FIT_POINT_SOURCES:
        candidates = [_message_point(message) for message in decoded.get(source)]
        positioned = [point for point in candidates if point is not None]
        if positioned:
            source_name = source
            break
    if not positioned:
        raise NoTrackDataError("No records found in FIT file.")

    points = [
        point
        for point in positioned
        if is_valid_coordinate(point.latitude, point.longitude)
    ]
    dropped = len(positioned) - len(points)
    if dropped:
        LOGGER.debug("FIT: dropped %d out-of-range %s points", dropped, source_name)
    if not points:
        raise NoValidPointsError("No valid track points found in FIT file.")
    return ParsedTrack(name=_activity_name(decoded), points=points)


def parse_fit(
    data: bytes,
    timeout: float = FIT_DECODE_TIMEOUT_SECONDS,
    reader: Optional[FitReaderFunc] = None,
) -> ParsedTrack:
    """Decode a FIT payload and extract its track."""

    decoded = decode_fit(data, timeout=timeout, reader=reader)
    track = extract_track(decoded)
    LOGGER.debug("FIT: extracted %d points", len(track.points))
    return track


__all__ = [
    "DEFAULT_FIT_NAME",
    "DecodedFit",
    "SEMICIRCLES_TO_DEGREES",
    "decode_fit",
    "extract_track",
    "parse_fit",
    "read_fit_messages",
]
