"""Central configuration for the travel report engine.

All values are constants imported by the rest of the package. Adjust as needed
for your environment. Every value can be overridden through environment
variables (optionally via a local `.env`).
"""

from __future__ import annotations

from dataclasses import dataclass
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


_MINUTE_MS = 60 * 1000


# ---------------------------------------------------------------------------
# Segmentation thresholds (pass 1)
# ---------------------------------------------------------------------------
# Samples within this radius of a cluster's first sample count as stationary.
STATIONARY_RADIUS_M = _env_float("STATIONARY_RADIUS_M", 50.0)

# Minimum span of a stationary cluster. Five minutes matches the historical
# behaviour of the report (see DESIGN.md).
MIN_STATIONARY_DURATION_MS = _env_int(
    "MIN_STATIONARY_DURATION_MS", 5 * _MINUTE_MS
)

# Any delta between consecutive samples above this becomes a data gap.
MAX_ACCEPTABLE_GAP_MS = _env_int("MAX_ACCEPTABLE_GAP_MS", 15 * _MINUTE_MS)


# ---------------------------------------------------------------------------
# Gap bridging thresholds (pass 2)
# ---------------------------------------------------------------------------
# Two stationary anchors closer than this are merged across a gap.
STATIONARY_BRIDGE_RADIUS_M = _env_float("STATIONARY_BRIDGE_RADIUS_M", 100.0)

# Largest jump between travel segments still treated as continuous travel.
TRAVEL_BRIDGE_MAX_TELEPORT_DISTANCE_M = _env_float(
    "TRAVEL_BRIDGE_MAX_TELEPORT_DISTANCE_M", 2000.0
)

# Longest gap eligible for travel bridging.
TRAVEL_BRIDGE_MAX_GAP_DURATION_MS = _env_int(
    "TRAVEL_BRIDGE_MAX_GAP_DURATION_MS", 30 * _MINUTE_MS
)


@dataclass(frozen=True, slots=True)
class ReportThresholds:
    """Policy knobs used by the segmenter and the gap bridger."""

    stationary_radius_m: float = STATIONARY_RADIUS_M
    min_stationary_duration_ms: int = MIN_STATIONARY_DURATION_MS
    max_acceptable_gap_ms: int = MAX_ACCEPTABLE_GAP_MS
    stationary_bridge_radius_m: float = STATIONARY_BRIDGE_RADIUS_M
    travel_bridge_max_teleport_distance_m: float = (
        TRAVEL_BRIDGE_MAX_TELEPORT_DISTANCE_M
    )
    travel_bridge_max_gap_duration_ms: int = TRAVEL_BRIDGE_MAX_GAP_DURATION_MS


DEFAULT_THRESHOLDS = ReportThresholds()


# ---------------------------------------------------------------------------
# Reverse geocoding
# ---------------------------------------------------------------------------
# OpenStreetMap Nominatim reverse endpoint. Respect their usage policy: one
# request per second and a descriptive User-Agent.
GEOCODER_BASE_URL = os.getenv(
    "GEOCODER_BASE_URL", "https://nominatim.openstreetmap.org/reverse"
)
GEOCODER_USER_AGENT = os.getenv(
    "GEOCODER_USER_AGENT", "travel-report/0.1.0 (reverse-geocode)"
)
GEOCODER_LANGUAGE = os.getenv("GEOCODER_LANGUAGE", "en")
GEOCODER_ZOOM = _env_int("GEOCODER_ZOOM", 18)

# Request timeout in seconds. A timeout degrades to a placeholder address.
GEOCODER_TIMEOUT = _env_float("GEOCODER_TIMEOUT", 10.0)

# Minimum spacing between two live requests (seconds).
GEOCODER_MIN_INTERVAL_SECONDS = _env_float("GEOCODER_MIN_INTERVAL_SECONDS", 1.0)

# Caps total in-flight geocoding requests across concurrent report runs.
GEOCODER_MAX_CONCURRENT = _env_int("GEOCODER_MAX_CONCURRENT", 1)

# Pause applied after the service answers HTTP 429.
GEOCODER_THROTTLE_SECONDS = _env_float("GEOCODER_THROTTLE_SECONDS", 30.0)

# Lookup cache. Precision 4 groups coordinates within roughly 11 m.
GEOCODER_CACHE_SIZE = _env_int("GEOCODER_CACHE_SIZE", 4000)
GEOCODER_CACHE_TTL_SECONDS = _env_int("GEOCODER_CACHE_TTL_SECONDS", 24 * 3600)
GEOCODER_CACHE_PRECISION = _env_int("GEOCODER_CACHE_PRECISION", 4)

# When enabled, no live lookups are made; addresses become "lat, lon" text.
GEOCODER_OFFLINE_MODE = _env_bool("GEOCODER_OFFLINE_MODE", False)

# HTTP session pool sizes.
HTTP_POOL_CONNECTIONS = 10
HTTP_POOL_MAXSIZE = 10


# ---------------------------------------------------------------------------
# Performance tuning
# ---------------------------------------------------------------------------
# Maximum number of entity reports generated in parallel.
REPORT_MAX_PARALLELISM = _env_int("REPORT_MAX_PARALLELISM", 4)


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------
OUTPUT_FILE = os.getenv("TRAVEL_REPORT_OUTPUT_FILE", "travel_report")

# Append _YYYYMMDD_HHMMSS to the output name when True.
OUTPUT_FILE_TIMESTAMP_ENABLED = _env_bool("OUTPUT_FILE_TIMESTAMP_ENABLED", True)

# Timezone used when rendering timestamps in tabular output.
REPORT_TIMEZONE = os.getenv("TRAVEL_REPORT_TIMEZONE", "UTC")

REPORT_COLUMN_ORDER = [
    "Type",
    "Start",
    "End",
    "Duration (min)",
    "Duration (h:mm:ss)",
    "Location",
    "From",
    "To",
    "Distance (mi)",
    "Avg Speed (mph)",
    "Latitude",
    "Longitude",
    "Samples",
]

# Automatically size columns after writing each sheet (openpyxl only).
EXCEL_AUTOSIZE_COLUMNS = True
EXCEL_AUTOSIZE_MAX_WIDTH = 60  # characters
EXCEL_AUTOSIZE_MIN_WIDTH = 6  # characters
EXCEL_AUTOSIZE_PADDING = 2  # extra characters added to the detected max
EXCEL_AUTOSIZE_MAX_ROWS = 5000  # skip autosize for very large sheets
