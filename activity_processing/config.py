"""Central configuration for the activity processing core.

All values are constants imported by the rest of the package. Adjust as needed
for your environment. Overrides are read from environment variables
(optionally via a local `.env`).
"""

from __future__ import annotations

import importlib
import os


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


# Load .env variables when python-dotenv is available.
_load_dotenv = None
try:
    _dotenv_mod = importlib.import_module("dotenv")
    _load_dotenv = getattr(_dotenv_mod, "load_dotenv", None)
except Exception:
    _load_dotenv = None

if callable(_load_dotenv):
    # Load .env from the current directory or any parent folder.
    _load_dotenv()


# ---------------------------------------------------------------------------
# Input formats
# ---------------------------------------------------------------------------
# Extensions the parser registry accepts (lower-case, no leading dot).
SUPPORTED_EXTENSIONS = ("gpx", "tcx", "kml", "fit", "kmz")

# Upload size guard applied by the ingest service, not by the core itself.
MAX_FILE_SIZE_BYTES = _env_int("MAX_FILE_SIZE_BYTES", 50 * 1024 * 1024)

# Hard wall-clock deadline (seconds) for decoding a single FIT payload.
FIT_DECODE_TIMEOUT_SECONDS = _env_float("FIT_DECODE_TIMEOUT_SECONDS", 30.0)

# Fail FIT decoding on CRC mismatches instead of warning and carrying on.
FIT_STRICT_CRC = _env_bool("FIT_STRICT_CRC", False)


# ---------------------------------------------------------------------------
# Geodesy
# ---------------------------------------------------------------------------
# Mean Earth radius (metres) for the spherical haversine model.
EARTH_RADIUS_M = 6371000.0


# ---------------------------------------------------------------------------
# Simplification
# ---------------------------------------------------------------------------
# Run Douglas-Peucker on the output geometry by default.
SIMPLIFY_GEOMETRY = _env_bool("SIMPLIFY_GEOMETRY", True)

# Planar tolerance in degrees (~11 m at the equator).
DEFAULT_SIMPLIFICATION_TOLERANCE = _env_float(
    "DEFAULT_SIMPLIFICATION_TOLERANCE", 0.0001
)

# Cap on simplified point count before uniform sampling kicks in.
DEFAULT_MAX_POINTS = _env_int("DEFAULT_MAX_POINTS", 1000)

# Dropped points that follow a recording gap longer than this are restored.
PRESERVE_TIME_GAP_SECONDS = _env_float("PRESERVE_TIME_GAP_SECONDS", 60.0)

# Coarser settings used by the quick preview path.
PREVIEW_SIMPLIFICATION_TOLERANCE = _env_float(
    "PREVIEW_SIMPLIFICATION_TOLERANCE", 0.0005
)
PREVIEW_MAX_POINTS = _env_int("PREVIEW_MAX_POINTS", 500)


# ---------------------------------------------------------------------------
# Activity type heuristic
# ---------------------------------------------------------------------------
# Average speed thresholds in km/h.
CYCLING_MIN_AVG_SPEED_KMH = 20.0
RUNNING_MIN_AVG_SPEED_KMH = 8.0

# Metres of climbing per kilometre above which a slow activity counts as a hike.
HIKING_MIN_GAIN_PER_KM = 50.0
