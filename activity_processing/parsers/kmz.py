"""KMZ archive unwrapping."""

from __future__ import annotations

import io
import logging
import zipfile
import zlib
from typing import Optional

from ..errors import (
    ActivityProcessingError,
    DecodeError,
    EmptyKmlEntryError,
    MissingKmlEntryError,
)
from ..models import ParsedTrack
from .xml_tracks import load_document, parse_kml_document

LOGGER = logging.getLogger(__name__)


def _find_kml_member(archive: zipfile.ZipFile) -> Optional[zipfile.ZipInfo]:
    """Return the first ``.kml`` member in archive order."""

    for info in archive.infolist():
        if info.is_dir():
            continue
        if info.filename.lower().endswith(".kml"):
            return info
    return None


def extract_kml(data: bytes) -> bytes:
    """Return the raw bytes of the KML document packed in a KMZ archive.

    Raises:
        DecodeError: ``data`` is not a readable zip archive, or the member is
            encrypted or uses an unsupported compression method.
        MissingKmlEntryError: The archive holds no ``.kml`` member.
        EmptyKmlEntryError: The member is blank after trimming.
    """

    try:
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            member = _find_kml_member(archive)
            if member is None:
                raise MissingKmlEntryError(
                    "No .kml file found inside the KMZ archive."
                )
            content = archive.read(member)
    except ActivityProcessingError:
        raise
    except (
        zipfile.BadZipFile,
        zipfile.LargeZipFile,
        zlib.error,
        EOFError,
        NotImplementedError,
        RuntimeError,
        OSError,
    ) as exc:
        raise DecodeError(f"KMZ parsing failed: {exc}") from exc

    text = content.decode("utf-8-sig", errors="replace")
    if not text.strip():
        raise EmptyKmlEntryError(
            f"KML file '{member.filename}' in archive is empty."
        )
    LOGGER.debug("KMZ: using member %s (%d bytes)", member.filename, len(content))
    return content


def parse_kmz(data: bytes) -> ParsedTrack:
    """Unwrap a KMZ archive and parse its KML document."""

    root = load_document(extract_kml(data), "KML")
    return parse_kml_document(root)


__all__ = ["extract_kml", "parse_kmz"]
