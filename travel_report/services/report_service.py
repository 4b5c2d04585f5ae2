"""Travel report service.

Runs the two-pass pipeline (segmentation, then gap bridging) for one entity
and fans independent entities out over a small thread pool. The passes
themselves hold no state between runs, so parallel runs only share the
geocoder, which is thread safe.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
import logging
from typing import Dict, Iterable, List, Mapping

from ..bridging import GapBridger
from ..config import DEFAULT_THRESHOLDS, REPORT_MAX_PARALLELISM, ReportThresholds
from ..geo import DistanceFn, distance_meters
from ..geocoding.base import ResilientGeocoder, ReverseGeocoder, ensure_resilient
from ..models import LocationSample, ReportEntry
from ..segmenter import Segmenter

EntityReports = Dict[str, List[ReportEntry]]


@dataclass(slots=True)
class ReportServiceConfig:
    distance_fn: DistanceFn = distance_meters
    geocoder: ReverseGeocoder | ResilientGeocoder | None = None
    thresholds: ReportThresholds = DEFAULT_THRESHOLDS
    max_parallelism: int = REPORT_MAX_PARALLELISM
    logger: logging.Logger | None = None


class TravelReportService:
    def __init__(self, config: ReportServiceConfig | None = None):
        self.config = config or ReportServiceConfig()
        self._log = self.config.logger or logging.getLogger(self.__class__.__name__)
        geocoder = ensure_resilient(self.config.geocoder)
        self._segmenter = Segmenter(
            distance_fn=self.config.distance_fn,
            geocoder=geocoder,
            thresholds=self.config.thresholds,
        )
        self._bridger = GapBridger(
            distance_fn=self.config.distance_fn,
            geocoder=geocoder,
            thresholds=self.config.thresholds,
        )

    def generate(self, samples: Iterable[LocationSample]) -> List[ReportEntry]:
        """Return the final report for one entity's samples."""

        sample_list = list(samples)
        if not sample_list:
            return []
        provisional = self._segmenter.segment(sample_list)
        final = self._bridger.bridge(provisional)
        self._log.info(
            "Generated report from %d samples: %d provisional -> %d final entries",
            len(sample_list),
            len(provisional),
            len(final),
        )
        return final

    def generate_many(
        self, samples_by_entity: Mapping[str, Iterable[LocationSample]]
    ) -> EntityReports:
        """Generate one report per entity; a failing entity gets an empty report."""

        if not samples_by_entity:
            return {}
        reports: EntityReports = {}
        max_workers = max(1, min(self.config.max_parallelism, len(samples_by_entity)))
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            future_map = {
                executor.submit(self.generate, samples): entity_id
                for entity_id, samples in samples_by_entity.items()
            }
            for future in as_completed(future_map):
                entity_id = future_map[future]
                try:
                    reports[entity_id] = future.result()
                except Exception as exc:
                    self._log.error(
                        "Report generation failed for entity=%s: %s",
                        entity_id,
                        exc,
                        exc_info=True,
                    )
                    reports[entity_id] = []
        # Keep caller order regardless of completion order.
        return {entity_id: reports[entity_id] for entity_id in samples_by_entity}


def generate_report(
    samples: Iterable[LocationSample],
    *,
    distance_fn: DistanceFn = distance_meters,
    geocoder: ReverseGeocoder | ResilientGeocoder | None = None,
    thresholds: ReportThresholds = DEFAULT_THRESHOLDS,
) -> List[ReportEntry]:
    """Convenience wrapper running both passes with the given collaborators."""

    service = TravelReportService(
        ReportServiceConfig(
            distance_fn=distance_fn, geocoder=geocoder, thresholds=thresholds
        )
    )
    return service.generate(samples)


__all__ = [
    "EntityReports",
    "ReportServiceConfig",
    "TravelReportService",
    "generate_report",
]
