"""Pass 2: merge data gaps that split one stay or one journey."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from .config import DEFAULT_THRESHOLDS, ReportThresholds
from .geo import DistanceFn, distance_meters
from .geocoding.base import ResilientGeocoder, ReverseGeocoder, ensure_resilient
from .models import DataGap, ReportEntry, Stationary, Travel
from .units import average_mph

_LOG = logging.getLogger(__name__)


class EntryListBuilder:
    """Append-only entry list whose last element may be swapped out."""

    def __init__(self) -> None:
        self._entries: List[ReportEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def append(self, entry: ReportEntry) -> None:
        self._entries.append(entry)

    def last(self) -> Optional[ReportEntry]:
        return self._entries[-1] if self._entries else None

    def replace_last(self, entry: ReportEntry) -> None:
        if not self._entries:
            raise IndexError("replace_last() on an empty builder")
        self._entries[-1] = entry

    def build(self) -> List[ReportEntry]:
        return list(self._entries)


class GapBridger:
    """Collapse (stay, gap, stay) and (travel, gap, travel) triples."""

    def __init__(
        self,
        *,
        distance_fn: DistanceFn = distance_meters,
        geocoder: ReverseGeocoder | ResilientGeocoder | None = None,
        thresholds: ReportThresholds = DEFAULT_THRESHOLDS,
    ) -> None:
        self._distance_fn = distance_fn
        self._geocoder = ensure_resilient(geocoder)
        self._thresholds = thresholds

    def bridge(self, entries: Sequence[ReportEntry]) -> List[ReportEntry]:
        builder = EntryListBuilder()
        merges = 0
        index = 0
        while index < len(entries):
            entry = entries[index]
            if not isinstance(entry, DataGap):
                builder.append(entry)
                index += 1
                continue

            previous = builder.last()
            following = entries[index + 1] if index + 1 < len(entries) else None
            merged: Optional[ReportEntry] = None
            if previous is not None and following is not None:
                merged = self._merge(previous, entry, following)
            if merged is None:
                builder.append(entry)
                index += 1
                continue

            builder.replace_last(merged)
            merges += 1
            index += 2

        if merges:
            _LOG.debug("Bridged %d data gaps", merges)
        return builder.build()

    def _merge(
        self, previous: ReportEntry, gap: DataGap, following: ReportEntry
    ) -> Optional[ReportEntry]:
        if isinstance(previous, Stationary) and isinstance(following, Stationary):
            return self._merge_stationary(previous, following)
        if isinstance(previous, Travel) and isinstance(following, Travel):
            return self._merge_travel(previous, gap, following)
        return None

    def _merge_stationary(
        self, previous: Stationary, following: Stationary
    ) -> Optional[Stationary]:
        separation = self._distance_fn(
            previous.latitude,
            previous.longitude,
            following.latitude,
            following.longitude,
        )
        if separation > self._thresholds.stationary_bridge_radius_m:
            return None
        # Plain midpoint of the two anchors, not weighted by sample counts.
        latitude = (previous.latitude + following.latitude) / 2.0
        longitude = (previous.longitude + following.longitude) / 2.0
        return Stationary(
            start_time_ms=previous.start_time_ms,
            end_time_ms=following.end_time_ms,
            latitude=latitude,
            longitude=longitude,
            address=self._geocoder.address_of(latitude, longitude),
            sample_count=previous.sample_count + following.sample_count,
        )

    def _merge_travel(
        self, previous: Travel, gap: DataGap, following: Travel
    ) -> Optional[Travel]:
        jump = self._distance_fn(
            previous.end_latitude,
            previous.end_longitude,
            following.start_latitude,
            following.start_longitude,
        )
        if jump > self._thresholds.travel_bridge_max_teleport_distance_m:
            return None
        if gap.duration_ms > self._thresholds.travel_bridge_max_gap_duration_ms:
            return None
        distance_miles = previous.distance_miles + following.distance_miles
        duration_ms = following.end_time_ms - previous.start_time_ms
        return Travel(
            start_time_ms=previous.start_time_ms,
            end_time_ms=following.end_time_ms,
            start_latitude=previous.start_latitude,
            start_longitude=previous.start_longitude,
            end_latitude=following.end_latitude,
            end_longitude=following.end_longitude,
            distance_miles=distance_miles,
            average_mph=average_mph(distance_miles, duration_ms),
            start_place=previous.start_place,
            end_place=following.end_place,
            sample_count=previous.sample_count + following.sample_count,
        )


def bridge_gaps(
    entries: Sequence[ReportEntry],
    *,
    distance_fn: DistanceFn = distance_meters,
    geocoder: ReverseGeocoder | ResilientGeocoder | None = None,
    thresholds: ReportThresholds = DEFAULT_THRESHOLDS,
) -> List[ReportEntry]:
    """Run pass 2 over pass-1 ``entries`` and return a new list."""

    bridger = GapBridger(
        distance_fn=distance_fn, geocoder=geocoder, thresholds=thresholds
    )
    return bridger.bridge(entries)


__all__ = ["EntryListBuilder", "GapBridger", "bridge_gaps"]
