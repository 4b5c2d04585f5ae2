"""Offline geocoder that labels places by their rounded coordinates."""

from __future__ import annotations

from typing import Optional

from .base import GeocodeResult, validate_coordinates


class CoordinateGeocoder:
    """Return ``"lat, lon"`` as the address; city and region stay unknown."""

    def __init__(self, precision: int = 5) -> None:
        self._precision = precision

    def reverse(self, lat: float, lon: float) -> Optional[GeocodeResult]:
        validate_coordinates(lat, lon)
        lat_r = round(lat, self._precision)
        lon_r = round(lon, self._precision)
        return GeocodeResult(address=f"{lat_r}, {lon_r}")


__all__ = ["CoordinateGeocoder"]
