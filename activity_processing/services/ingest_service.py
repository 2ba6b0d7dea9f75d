"""Ingest service: the seam between upload handling and the processing core.

Applies the payload preconditions the core assumes (non-empty, below the
size limit), runs the pipeline and reports a terminal outcome. Persistence
is left to the optional callbacks so callers own status transitions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import time
from typing import Any, Callable, Dict, Optional

from ..activity_types import infer_activity_type
from ..config import FIT_DECODE_TIMEOUT_SECONDS, MAX_FILE_SIZE_BYTES
from ..errors import ActivityProcessingError, ErrorKind, InvalidPayloadError
from ..models import ProcessedActivityData, ProcessingOptions
from ..parsers import Payload, normalize_extension
from ..pipeline import process_activity_file

CompletedCallback = Callable[[str, ProcessedActivityData], None]
FailedCallback = Callable[[str, str, ErrorKind], None]


@dataclass(slots=True)
class IngestOutcome:
    """Terminal result of one ingest attempt."""

    success: bool
    data: Optional[ProcessedActivityData] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    points_count: int = 0
    activity_type: Optional[str] = None
    elapsed_ms: float = 0.0

    @property
    def status(self) -> str:
        return "completed" if self.success else "failed"

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"success": self.success, "status": self.status}
        if self.success and self.data is not None:
            payload["data"] = self.data.to_dict()
            payload["pointsCount"] = self.points_count
            payload["activityType"] = self.activity_type
        else:
            payload["error"] = self.error
            payload["errorKind"] = self.error_kind.value if self.error_kind else None
        return payload


@dataclass(slots=True)
class IngestServiceConfig:
    max_file_size_bytes: int = MAX_FILE_SIZE_BYTES
    fit_timeout_seconds: float = FIT_DECODE_TIMEOUT_SECONDS
    options: ProcessingOptions = field(default_factory=ProcessingOptions)
    on_completed: Optional[CompletedCallback] = None
    on_failed: Optional[FailedCallback] = None
    logger: logging.Logger | None = None


class IngestService:
    def __init__(self, config: IngestServiceConfig | None = None):
        self.config = config or IngestServiceConfig()
        self._log = self.config.logger or logging.getLogger(self.__class__.__name__)

    def validate_payload(self, data: Payload, extension: str) -> None:
        """Reject empty or oversized uploads before any parsing happens."""

        size = len(data.encode("utf-8")) if isinstance(data, str) else len(data)
        ext = normalize_extension(extension)
        if size == 0:
            raise InvalidPayloadError(f"Empty {ext.upper()} file provided.")
        limit = self.config.max_file_size_bytes
        if size > limit:
            raise InvalidPayloadError(
                f"File too large. Max size is {limit / 1024 / 1024:.1f}MB."
            )

    def ingest(self, activity_id: str, data: Payload, extension: str) -> IngestOutcome:
        """Process one uploaded file and report a completed or failed outcome."""

        started = time.perf_counter()
        self._log.info(
            "Processing activity %s, ext: %s", activity_id, normalize_extension(extension)
        )
        try:
            self.validate_payload(data, extension)
            result = process_activity_file(
                data,
                extension,
                self.config.options,
                fit_timeout=self.config.fit_timeout_seconds,
            )
        except ActivityProcessingError as exc:
            elapsed = (time.perf_counter() - started) * 1000
            self._log.error(
                "Processing failed for activity %s (%s): %s",
                activity_id,
                exc.kind.value,
                exc,
            )
            if self.config.on_failed is not None:
                self.config.on_failed(activity_id, str(exc), exc.kind)
            return IngestOutcome(
                success=False,
                error=str(exc),
                error_kind=exc.kind,
                elapsed_ms=elapsed,
            )

        elapsed = (time.perf_counter() - started) * 1000
        self._log.info(
            "Parsed activity %s in %.0fms. Found %d points.",
            activity_id,
            elapsed,
            len(result.points),
        )
        if self.config.on_completed is not None:
            self.config.on_completed(activity_id, result)
        return IngestOutcome(
            success=True,
            data=result,
            points_count=len(result.points),
            activity_type=infer_activity_type(result.stats),
            elapsed_ms=elapsed,
        )
