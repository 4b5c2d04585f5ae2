"""Central error types used across the application."""

from __future__ import annotations


class LocationInputError(RuntimeError):
    """Raised when a location file is missing required columns or is unreadable."""


class GeocodingError(RuntimeError):
    """Base error for reverse geocoding failures."""


class GeocoderUnavailableError(GeocodingError):
    """Raised when no geocoding backend is configured or reachable."""


class GeocoderNetworkError(GeocodingError):
    """Raised on network, IO, timeout or HTTP status failures."""


class InvalidCoordinatesError(GeocodingError, ValueError):
    """Raised when latitude/longitude are out of range or not finite."""


class AddressNotFoundError(GeocodingError):
    """Raised when the backend answered but had no address for the point."""


__all__ = [
    "LocationInputError",
    "GeocodingError",
    "GeocoderUnavailableError",
    "GeocoderNetworkError",
    "InvalidCoordinatesError",
    "AddressNotFoundError",
]
