"""Dataclasses describing location samples and travel report entries."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional, Tuple, Union

LatLon = Tuple[float, float]


@dataclass(frozen=True, slots=True)
class LocationSample:
    """One raw (time, position) observation for an entity."""

    entity_id: str
    latitude: float
    longitude: float
    timestamp_ms: int
    speed_mps: Optional[float] = None
    bearing_deg: Optional[float] = None
    battery_level: Optional[int] = None
    app_status: Optional[str] = None

    @property
    def point(self) -> LatLon:
        return self.latitude, self.longitude


@dataclass(frozen=True, slots=True)
class CityRegion:
    """Coarse place description; either part may be unknown."""

    city: Optional[str] = None
    region: Optional[str] = None

    def label(self) -> str:
        parts = [part for part in (self.city, self.region) if part]
        return ", ".join(parts)


class EntryKind(str, Enum):
    STATIONARY = "stationary"
    TRAVEL = "travel"
    DATA_GAP = "data_gap"


@dataclass(frozen=True, slots=True)
class Stationary:
    """A period spent near one place (the anchor)."""

    kind: ClassVar[EntryKind] = EntryKind.STATIONARY

    start_time_ms: int
    end_time_ms: int
    latitude: float
    longitude: float
    address: str
    sample_count: int = 0

    @property
    def duration_ms(self) -> int:
        return self.end_time_ms - self.start_time_ms

    @property
    def anchor(self) -> LatLon:
        return self.latitude, self.longitude


@dataclass(frozen=True, slots=True)
class Travel:
    """A period of movement between two places."""

    kind: ClassVar[EntryKind] = EntryKind.TRAVEL

    start_time_ms: int
    end_time_ms: int
    start_latitude: float
    start_longitude: float
    end_latitude: float
    end_longitude: float
    distance_miles: float
    average_mph: float
    start_place: CityRegion = CityRegion()
    end_place: CityRegion = CityRegion()
    sample_count: int = 0

    @property
    def duration_ms(self) -> int:
        return self.end_time_ms - self.start_time_ms

    @property
    def start_point(self) -> LatLon:
        return self.start_latitude, self.start_longitude

    @property
    def end_point(self) -> LatLon:
        return self.end_latitude, self.end_longitude


@dataclass(frozen=True, slots=True)
class DataGap:
    """A period without usable samples."""

    kind: ClassVar[EntryKind] = EntryKind.DATA_GAP

    start_time_ms: int
    end_time_ms: int

    @property
    def duration_ms(self) -> int:
        return self.end_time_ms - self.start_time_ms


ReportEntry = Union[Stationary, Travel, DataGap]


__all__ = [
    "CityRegion",
    "DataGap",
    "EntryKind",
    "LatLon",
    "LocationSample",
    "ReportEntry",
    "Stationary",
    "Travel",
]
