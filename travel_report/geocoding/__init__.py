"""Reverse geocoding backends and the failure-tolerant resolver."""

from __future__ import annotations

from ..config import GEOCODER_OFFLINE_MODE
from .base import (
    GeocodeResult,
    ResilientGeocoder,
    ReverseGeocoder,
    coord_key,
    ensure_resilient,
)
from .nominatim import NominatimGeocoder
from .offline import CoordinateGeocoder
from .rate_limiter import RateLimiter


def build_geocoder(offline: bool | None = None) -> ResilientGeocoder:
    """Return the configured backend wrapped in a :class:`ResilientGeocoder`."""

    if offline is None:
        offline = GEOCODER_OFFLINE_MODE
    backend: ReverseGeocoder
    if offline:
        backend = CoordinateGeocoder()
    else:
        backend = NominatimGeocoder()
    return ResilientGeocoder(backend)


__all__ = [
    "CoordinateGeocoder",
    "GeocodeResult",
    "NominatimGeocoder",
    "RateLimiter",
    "ResilientGeocoder",
    "ReverseGeocoder",
    "build_geocoder",
    "coord_key",
    "ensure_resilient",
]
