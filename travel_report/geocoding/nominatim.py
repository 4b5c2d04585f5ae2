"""Reverse geocoder backed by the OpenStreetMap Nominatim API."""

from __future__ import annotations

import logging
from threading import RLock
from typing import Any, Mapping, Optional

import requests
from cachetools import TTLCache

from ..config import (
    GEOCODER_BASE_URL,
    GEOCODER_CACHE_PRECISION,
    GEOCODER_CACHE_SIZE,
    GEOCODER_CACHE_TTL_SECONDS,
    GEOCODER_LANGUAGE,
    GEOCODER_TIMEOUT,
    GEOCODER_ZOOM,
)
from ..errors import AddressNotFoundError, GeocoderNetworkError
from .base import GeocodeResult, coord_key, validate_coordinates
from .rate_limiter import RateLimiter
from .session import create_session

LOGGER = logging.getLogger(__name__)

# Address keys checked, in order, for the city component.
_CITY_KEYS = ("city", "town", "village", "municipality", "hamlet", "suburb")
_REGION_KEYS = ("state", "region", "county")


def _first_present(address: Mapping[str, Any], keys: tuple[str, ...]) -> str | None:
    for key in keys:
        value = address.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def parse_reverse_payload(payload: Any) -> GeocodeResult:
    """Convert a Nominatim ``jsonv2`` reverse payload into a result.

    Raises:
        AddressNotFoundError: If the payload reports an error or has no
            display name.
    """

    if not isinstance(payload, Mapping):
        raise AddressNotFoundError("Unexpected reverse geocode payload")
    if payload.get("error"):
        raise AddressNotFoundError(str(payload["error"]))
    display_name = payload.get("display_name")
    if not isinstance(display_name, str) or not display_name.strip():
        raise AddressNotFoundError("Reverse geocode payload has no display_name")
    address = payload.get("address")
    if not isinstance(address, Mapping):
        address = {}
    return GeocodeResult(
        address=display_name.strip(),
        city=_first_present(address, _CITY_KEYS),
        region=_first_present(address, _REGION_KEYS),
        raw=dict(payload),
    )


class NominatimGeocoder:
    """Rate limited, cached Nominatim reverse geocoder."""

    def __init__(
        self,
        *,
        base_url: str = GEOCODER_BASE_URL,
        language: str = GEOCODER_LANGUAGE,
        zoom: int = GEOCODER_ZOOM,
        timeout: float = GEOCODER_TIMEOUT,
        session: requests.Session | None = None,
        limiter: RateLimiter | None = None,
        cache_size: int = GEOCODER_CACHE_SIZE,
        cache_ttl_seconds: int = GEOCODER_CACHE_TTL_SECONDS,
        precision: int = GEOCODER_CACHE_PRECISION,
    ) -> None:
        self._base_url = base_url
        self._language = language
        self._zoom = zoom
        self._timeout = timeout
        self._session = session if session is not None else create_session()
        self._limiter = limiter if limiter is not None else RateLimiter()
        self._precision = precision
        self._cache: TTLCache[str, GeocodeResult] = TTLCache(
            maxsize=max(1, cache_size), ttl=cache_ttl_seconds
        )
        self._cache_lock = RLock()

    def reverse(self, lat: float, lon: float) -> Optional[GeocodeResult]:
        validate_coordinates(lat, lon)
        key = coord_key(lat, lon, self._precision)
        with self._cache_lock:
            cached = self._cache.get(key)
        if cached is not None:
            return cached

        payload = self._fetch(lat, lon)
        result = parse_reverse_payload(payload)
        with self._cache_lock:
            self._cache[key] = result
        return result

    def _fetch(self, lat: float, lon: float) -> Any:
        params = {
            "format": "jsonv2",
            "lat": f"{lat:.8f}",
            "lon": f"{lon:.8f}",
            "zoom": str(self._zoom),
            "addressdetails": "1",
            "accept-language": self._language,
        }
        headers: Mapping[str, object] | None = None
        status_code: int | None = None
        self._limiter.before_request()
        try:
            LOGGER.debug("GET %s params=%s", self._base_url, params)
            response = self._session.get(
                self._base_url, params=params, timeout=self._timeout
            )
            headers = response.headers
            status_code = response.status_code
            response.raise_for_status()
            return response.json()
        except requests.exceptions.Timeout as exc:
            raise GeocoderNetworkError(
                f"Reverse geocode timed out after {self._timeout}s"
            ) from exc
        except requests.exceptions.RequestException as exc:
            raise GeocoderNetworkError(f"Reverse geocode request failed: {exc}") from exc
        except ValueError as exc:
            raise GeocoderNetworkError("Reverse geocode returned invalid JSON") from exc
        finally:
            self._limiter.after_response(headers, status_code)

    def cache_size(self) -> int:
        with self._cache_lock:
            return len(self._cache)


__all__ = ["NominatimGeocoder", "parse_reverse_payload"]
