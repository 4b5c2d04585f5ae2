"""Global pytest fixtures & helpers.

Adds project root to path and provides sample factories plus a fake reverse
geocoder so the segmentation and bridging passes can run without network.
"""
from __future__ import annotations

import math
import os
import sys
from typing import List, Optional

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from travel_report.geocoding.base import GeocodeResult
from travel_report.models import LocationSample

MINUTE_MS = 60 * 1000
BASE_TS = 1_700_000_000_000
ORIGIN = (40.000, -75.000)


# --- Factory helpers -------------------------------------------------
def north_of(lat: float, meters: float) -> float:
    """Latitude ``meters`` due north (exact for the haversine distance)."""
    return lat + math.degrees(meters / 6_371_000.0)


def make_sample(minute: float, lat: float = ORIGIN[0], lon: float = ORIGIN[1], entity: str = "e1") -> LocationSample:
    return LocationSample(
        entity_id=entity,
        latitude=lat,
        longitude=lon,
        timestamp_ms=BASE_TS + int(round(minute * MINUTE_MS)),
    )


def stationary_run(start_minute: float, count: int, lat: float = ORIGIN[0], lon: float = ORIGIN[1], step_minutes: float = 1.0, jitter_m: float = 3.0, entity: str = "e1") -> List[LocationSample]:
    """``count`` samples one step apart, wobbling a few metres around a point."""
    samples = []
    for i in range(count):
        wobble = jitter_m if i % 2 else -jitter_m
        samples.append(make_sample(start_minute + i * step_minutes, north_of(lat, wobble), lon, entity=entity))
    return samples


def travel_run(start_minute: float, count: int, start_lat: float = ORIGIN[0], lon: float = ORIGIN[1], step_m: float = 800.0, step_minutes: float = 1.0) -> List[LocationSample]:
    """``count`` samples heading due north ``step_m`` per step."""
    return [
        make_sample(start_minute + i * step_minutes, north_of(start_lat, i * step_m), lon)
        for i in range(count)
    ]


def ts(minute: float) -> int:
    return BASE_TS + int(round(minute * MINUTE_MS))


class FakeGeocoder:
    """Deterministic backend recording every lookup."""

    def __init__(self, error: Optional[Exception] = None, city: str = "Springfield", region: str = "PA") -> None:
        self.error = error
        self.city = city
        self.region = region
        self.calls: List[tuple[float, float]] = []

    def reverse(self, lat: float, lon: float) -> Optional[GeocodeResult]:
        self.calls.append((lat, lon))
        if self.error is not None:
            raise self.error
        return GeocodeResult(
            address=f"Near {lat:.5f}, {lon:.5f}",
            city=self.city,
            region=self.region,
        )


# --- Fixtures --------------------------------------------------------
@pytest.fixture
def fake_geocoder():
    return FakeGeocoder()
