"""Service layer for ingesting uploaded activity files."""

from .ingest_service import (
    IngestOutcome,
    IngestService,
    IngestServiceConfig,
)

__all__ = ["IngestOutcome", "IngestService", "IngestServiceConfig"]
