"""Reverse geocoding contracts and the failure-tolerant resolver.

Backends implement :class:`ReverseGeocoder` and are free to raise any
:class:`~travel_report.errors.GeocodingError`. The report engine only talks to
:class:`ResilientGeocoder`, which never lets an exception escape: addresses
degrade to a descriptive placeholder and city/region degrade to ``None``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import math
from typing import Any, Dict, Optional, Protocol

from ..errors import (
    AddressNotFoundError,
    GeocoderNetworkError,
    GeocoderUnavailableError,
    InvalidCoordinatesError,
)
from ..models import CityRegion

ADDRESS_UNAVAILABLE = "Address lookup failed (Geocoder not available)"
ADDRESS_NETWORK_ERROR = "Address lookup failed (Network/IO error)"
ADDRESS_INVALID_COORDINATES = "Invalid location (Coordinates error)"
ADDRESS_NOT_FOUND = "Address not found"
ADDRESS_UNKNOWN_ERROR = "Address lookup failed (Unknown error)"

_LOG = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GeocodeResult:
    """A minimal reverse geocoding result."""

    address: Optional[str]
    city: Optional[str] = None
    region: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def city_region(self) -> CityRegion:
        return CityRegion(city=self.city, region=self.region)


class ReverseGeocoder(Protocol):
    def reverse(self, lat: float, lon: float) -> Optional[GeocodeResult]: ...


def coord_key(lat: float, lon: float, precision: int) -> str:
    """Build a stable cache key by rounding coordinates.

    Precision 4 is roughly 11 m of latitude.
    """

    return f"{round(lat, precision):.{precision}f},{round(lon, precision):.{precision}f}"


def validate_coordinates(lat: float, lon: float) -> None:
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise InvalidCoordinatesError(f"Non-finite coordinates: {lat}, {lon}")
    if not -90.0 <= lat <= 90.0 or not -180.0 <= lon <= 180.0:
        raise InvalidCoordinatesError(f"Coordinates out of range: {lat}, {lon}")


class ResilientGeocoder:
    """Expose ``address_of`` / ``city_region_of`` over a backend, never raising."""

    def __init__(
        self,
        backend: ReverseGeocoder | None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._backend = backend
        self._log = logger or _LOG

    @property
    def backend(self) -> ReverseGeocoder | None:
        return self._backend

    def address_of(self, lat: float, lon: float) -> str:
        try:
            result = self._lookup(lat, lon)
        except GeocoderUnavailableError as exc:
            self._log.error("Geocoder is not available: %s", exc)
            return ADDRESS_UNAVAILABLE
        except InvalidCoordinatesError as exc:
            self._log.error("Invalid coordinates for geocoding %s, %s: %s", lat, lon, exc)
            return ADDRESS_INVALID_COORDINATES
        except (GeocoderNetworkError, OSError) as exc:
            self._log.warning("Geocoding failed for %s, %s: %s", lat, lon, exc)
            return ADDRESS_NETWORK_ERROR
        except AddressNotFoundError:
            return ADDRESS_NOT_FOUND
        except Exception as exc:
            self._log.error(
                "Unexpected geocoding error for %s, %s: %s",
                lat,
                lon,
                exc,
                exc_info=True,
            )
            return ADDRESS_UNKNOWN_ERROR
        if result is None or not result.address:
            return ADDRESS_NOT_FOUND
        return result.address

    def city_region_of(self, lat: float, lon: float) -> CityRegion:
        try:
            result = self._lookup(lat, lon)
        except Exception as exc:
            self._log.warning(
                "City/region lookup failed for %s, %s: %s", lat, lon, exc
            )
            return CityRegion()
        if result is None:
            return CityRegion()
        return result.city_region

    def _lookup(self, lat: float, lon: float) -> Optional[GeocodeResult]:
        if self._backend is None:
            raise GeocoderUnavailableError("No reverse geocoder configured")
        validate_coordinates(lat, lon)
        return self._backend.reverse(lat, lon)


def ensure_resilient(
    geocoder: ReverseGeocoder | ResilientGeocoder | None,
) -> ResilientGeocoder:
    if isinstance(geocoder, ResilientGeocoder):
        return geocoder
    return ResilientGeocoder(geocoder)


__all__ = [
    "ADDRESS_INVALID_COORDINATES",
    "ADDRESS_NETWORK_ERROR",
    "ADDRESS_NOT_FOUND",
    "ADDRESS_UNAVAILABLE",
    "ADDRESS_UNKNOWN_ERROR",
    "GeocodeResult",
    "ResilientGeocoder",
    "ReverseGeocoder",
    "coord_key",
    "ensure_resilient",
    "validate_coordinates",
]
