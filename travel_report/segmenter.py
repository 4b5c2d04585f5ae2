"""Pass 1: split an entity's sample timeline into report entries.

The segmenter walks samples in timestamp order. At every cursor position it
first records a data gap if the previous sample is too far back in time, then
tries to grow a stationary cluster around the cursor sample and, failing that,
a travel run up to the next gap. Travel runs that neither moved nor lasted
long enough are dropped.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

import numpy as np

from .config import DEFAULT_THRESHOLDS, ReportThresholds
from .geo import DistanceFn, distance_meters, path_length_m, sample_distance
from .geocoding.base import ResilientGeocoder, ReverseGeocoder, ensure_resilient
from .models import DataGap, LocationSample, ReportEntry, Stationary, Travel
from .units import meters_to_miles, mps_to_mph

_LOG = logging.getLogger(__name__)


def sort_samples(samples: Iterable[LocationSample]) -> List[LocationSample]:
    """Return samples ordered by timestamp; ties keep their input order."""

    return sorted(samples, key=lambda sample: sample.timestamp_ms)


class Segmenter:
    """Stationary/travel/gap segmentation over one entity's samples."""

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

    def segment(self, samples: Iterable[LocationSample]) -> List[ReportEntry]:
        ordered = sort_samples(samples)
        entries: List[ReportEntry] = []
        index = 0
        while index < len(ordered):
            if index > 0 and self._is_gap(ordered[index - 1], ordered[index]):
                entries.append(
                    DataGap(
                        start_time_ms=ordered[index - 1].timestamp_ms,
                        end_time_ms=ordered[index].timestamp_ms,
                    )
                )

            end = self._stationary_end(ordered, index)
            if self._qualifies_as_stationary(ordered, index, end):
                entries.append(self._build_stationary(ordered[index : end + 1]))
                index = end + 1
                continue

            end = self._travel_end(ordered, index)
            travel = self._build_travel(ordered[index : end + 1])
            if travel is not None:
                entries.append(travel)
            index = end + 1

        _LOG.debug(
            "Segmented %d samples into %d entries", len(ordered), len(entries)
        )
        return entries

    def _is_gap(self, previous: LocationSample, current: LocationSample) -> bool:
        delta = current.timestamp_ms - previous.timestamp_ms
        return delta > self._thresholds.max_acceptable_gap_ms

    def _stationary_end(self, ordered: Sequence[LocationSample], start: int) -> int:
        """Index of the last sample that stays near ``ordered[start]``."""

        anchor = ordered[start]
        end = start
        while end + 1 < len(ordered):
            candidate = ordered[end + 1]
            if self._is_gap(ordered[end], candidate):
                break
            drift = sample_distance(anchor, candidate, self._distance_fn)
            if drift > self._thresholds.stationary_radius_m:
                break
            end += 1
        return end

    def _qualifies_as_stationary(
        self, ordered: Sequence[LocationSample], start: int, end: int
    ) -> bool:
        if end <= start:
            return False
        span = ordered[end].timestamp_ms - ordered[start].timestamp_ms
        return span >= self._thresholds.min_stationary_duration_ms

    def _travel_end(self, ordered: Sequence[LocationSample], start: int) -> int:
        """Index of the last sample before the next data gap."""

        end = start
        while end + 1 < len(ordered) and not self._is_gap(
            ordered[end], ordered[end + 1]
        ):
            end += 1
        return end

    def _build_stationary(self, cluster: Sequence[LocationSample]) -> Stationary:
        latitude = float(np.mean([sample.latitude for sample in cluster]))
        longitude = float(np.mean([sample.longitude for sample in cluster]))
        return Stationary(
            start_time_ms=cluster[0].timestamp_ms,
            end_time_ms=cluster[-1].timestamp_ms,
            latitude=latitude,
            longitude=longitude,
            address=self._geocoder.address_of(latitude, longitude),
            sample_count=len(cluster),
        )

    def _build_travel(self, run: Sequence[LocationSample]) -> Optional[Travel]:
        first, last = run[0], run[-1]
        distance_m = path_length_m(run, self._distance_fn)
        duration_ms = last.timestamp_ms - first.timestamp_ms
        if (
            distance_m <= self._thresholds.stationary_radius_m
            and duration_ms < self._thresholds.min_stationary_duration_ms
        ):
            _LOG.debug(
                "Dropping trivial run of %d samples (%.1f m over %d ms)",
                len(run),
                distance_m,
                duration_ms,
            )
            return None

        mps = distance_m / (duration_ms / 1000.0) if duration_ms > 0 else 0.0
        return Travel(
            start_time_ms=first.timestamp_ms,
            end_time_ms=last.timestamp_ms,
            start_latitude=first.latitude,
            start_longitude=first.longitude,
            end_latitude=last.latitude,
            end_longitude=last.longitude,
            distance_miles=meters_to_miles(distance_m),
            average_mph=mps_to_mph(mps),
            start_place=self._geocoder.city_region_of(first.latitude, first.longitude),
            end_place=self._geocoder.city_region_of(last.latitude, last.longitude),
            sample_count=len(run),
        )


def segment_samples(
    samples: Iterable[LocationSample],
    *,
    distance_fn: DistanceFn = distance_meters,
    geocoder: ReverseGeocoder | ResilientGeocoder | None = None,
    thresholds: ReportThresholds = DEFAULT_THRESHOLDS,
) -> List[ReportEntry]:
    """Run pass 1 over ``samples``; an empty input yields an empty list."""

    segmenter = Segmenter(
        distance_fn=distance_fn, geocoder=geocoder, thresholds=thresholds
    )
    return segmenter.segment(samples)


__all__ = ["Segmenter", "segment_samples", "sort_samples"]
