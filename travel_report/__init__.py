"""Travel report engine: location samples to stationary/travel/no-data timelines."""

from .bridging import bridge_gaps
from .config import DEFAULT_THRESHOLDS, ReportThresholds
from .errors import GeocodingError, LocationInputError
from .geo import distance_meters
from .models import (
    CityRegion,
    DataGap,
    EntryKind,
    LocationSample,
    ReportEntry,
    Stationary,
    Travel,
)
from .segmenter import segment_samples
from .services import TravelReportService, generate_report

__all__ = [
    "CityRegion",
    "DEFAULT_THRESHOLDS",
    "DataGap",
    "EntryKind",
    "GeocodingError",
    "LocationInputError",
    "LocationSample",
    "ReportEntry",
    "ReportThresholds",
    "Stationary",
    "Travel",
    "TravelReportService",
    "bridge_gaps",
    "distance_meters",
    "generate_report",
    "segment_samples",
]
