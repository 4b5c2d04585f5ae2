import json
import logging

import pytest
import requests

from conftest import FakeGeocoder
from travel_report.errors import (
    AddressNotFoundError,
    GeocoderNetworkError,
    GeocoderUnavailableError,
    InvalidCoordinatesError,
)
from travel_report.geocoding import (
    CoordinateGeocoder,
    NominatimGeocoder,
    ResilientGeocoder,
    build_geocoder,
    coord_key,
)
from travel_report.geocoding.base import (
    ADDRESS_INVALID_COORDINATES,
    ADDRESS_NETWORK_ERROR,
    ADDRESS_NOT_FOUND,
    ADDRESS_UNAVAILABLE,
    ADDRESS_UNKNOWN_ERROR,
    GeocodeResult,
)
from travel_report.geocoding.nominatim import parse_reverse_payload
from travel_report.models import CityRegion


class FakeResp:
    """Minimal fake response matching needed parts of requests.Response."""

    def __init__(self, status_code=200, data=None, headers=None, bad_json=False):
        self.status_code = status_code
        self._data = data if data is not None else {}
        self.headers = headers or {}
        self._bad_json = bad_json

    def json(self):
        if self._bad_json:
            raise ValueError("No JSON object could be decoded")
        return self._data

    @property
    def text(self):
        return json.dumps(self._data)

    def raise_for_status(self):
        if 400 <= self.status_code:
            raise requests.exceptions.HTTPError(response=self)


class FakeSession:
    def __init__(self, responses):
        self._responses = list(responses)
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, dict(params or {}), timeout))
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class RecordingLimiter:
    def __init__(self):
        self.before = 0
        self.after = []

    def before_request(self):
        self.before += 1

    def after_response(self, headers, status_code):
        self.after.append((headers, status_code))


PAYLOAD = {
    "display_name": "1 Main Street, Springfield, Delaware County, Pennsylvania, USA",
    "address": {
        "house_number": "1",
        "road": "Main Street",
        "town": "Springfield",
        "county": "Delaware County",
        "state": "Pennsylvania",
    },
}


def _nominatim(responses, **kwargs):
    session = FakeSession(responses)
    limiter = RecordingLimiter()
    geocoder = NominatimGeocoder(
        base_url="https://geo.example/reverse",
        session=session,
        limiter=limiter,
        **kwargs,
    )
    return geocoder, session, limiter


# --- ResilientGeocoder ---------------------------------------------------
@pytest.mark.parametrize(
    "error, expected",
    [
        (GeocoderUnavailableError("down"), ADDRESS_UNAVAILABLE),
        (GeocoderNetworkError("timeout"), ADDRESS_NETWORK_ERROR),
        (OSError("socket closed"), ADDRESS_NETWORK_ERROR),
        (InvalidCoordinatesError("bad"), ADDRESS_INVALID_COORDINATES),
        (AddressNotFoundError("nothing"), ADDRESS_NOT_FOUND),
        (KeyError("boom"), ADDRESS_UNKNOWN_ERROR),
    ],
)
def test_address_failures_become_placeholders(error, expected):
    resolver = ResilientGeocoder(FakeGeocoder(error=error))

    assert resolver.address_of(40.0, -75.0) == expected


def test_missing_backend_reports_unavailable(caplog):
    resolver = ResilientGeocoder(None)

    with caplog.at_level(logging.ERROR):
        assert resolver.address_of(40.0, -75.0) == ADDRESS_UNAVAILABLE
    assert resolver.city_region_of(40.0, -75.0) == CityRegion()
    assert any("not available" in rec.getMessage() for rec in caplog.records)


@pytest.mark.parametrize("lat, lon", [(91.0, 0.0), (0.0, -181.0), (float("nan"), 0.0)])
def test_invalid_coordinates_never_reach_backend(lat, lon):
    backend = FakeGeocoder()
    resolver = ResilientGeocoder(backend)

    assert resolver.address_of(lat, lon) == ADDRESS_INVALID_COORDINATES
    assert resolver.city_region_of(lat, lon) == CityRegion()
    assert backend.calls == []


def test_empty_result_is_address_not_found():
    class EmptyBackend:
        def reverse(self, lat, lon):
            return GeocodeResult(address="")

    class NoneBackend:
        def reverse(self, lat, lon):
            return None

    assert ResilientGeocoder(EmptyBackend()).address_of(1.0, 1.0) == ADDRESS_NOT_FOUND
    assert ResilientGeocoder(NoneBackend()).address_of(1.0, 1.0) == ADDRESS_NOT_FOUND
    assert ResilientGeocoder(NoneBackend()).city_region_of(1.0, 1.0) == CityRegion()


def test_city_region_success_and_failure():
    ok = ResilientGeocoder(FakeGeocoder(city="Trenton", region="NJ"))
    failing = ResilientGeocoder(FakeGeocoder(error=GeocoderNetworkError("x")))

    assert ok.city_region_of(40.2, -74.7) == CityRegion("Trenton", "NJ")
    assert ok.city_region_of(40.2, -74.7).label() == "Trenton, NJ"
    assert failing.city_region_of(40.2, -74.7) == CityRegion()


# --- Nominatim -----------------------------------------------------------
def test_parse_reverse_payload_extracts_city_and_region():
    result = parse_reverse_payload(PAYLOAD)

    assert result.address.startswith("1 Main Street")
    assert result.city == "Springfield"
    assert result.region == "Pennsylvania"
    assert result.city_region == CityRegion("Springfield", "Pennsylvania")


def test_parse_reverse_payload_errors():
    with pytest.raises(AddressNotFoundError):
        parse_reverse_payload({"error": "Unable to geocode"})
    with pytest.raises(AddressNotFoundError):
        parse_reverse_payload({"address": {}})
    with pytest.raises(AddressNotFoundError):
        parse_reverse_payload(["not", "a", "mapping"])


def test_nominatim_reverse_sends_params_and_caches():
    geocoder, session, limiter = _nominatim([FakeResp(200, PAYLOAD)])

    first = geocoder.reverse(40.000001, -75.000001)
    # Rounds to the same cache key, so no second request is made.
    second = geocoder.reverse(40.000002, -75.000002)

    assert first == second
    assert len(session.calls) == 1
    url, params, timeout = session.calls[0]
    assert url == "https://geo.example/reverse"
    assert params["format"] == "jsonv2"
    assert params["addressdetails"] == "1"
    assert params["accept-language"] == "en"
    assert timeout == geocoder._timeout
    assert limiter.before == 1
    assert limiter.after == [({}, 200)]
    assert geocoder.cache_size() == 1


def test_nominatim_http_error_becomes_network_error():
    geocoder, _, limiter = _nominatim([FakeResp(500, {"error": "server"})])

    with pytest.raises(GeocoderNetworkError):
        geocoder.reverse(40.0, -75.0)
    assert limiter.after[0][1] == 500
    assert geocoder.cache_size() == 0


def test_nominatim_timeout_becomes_network_error():
    geocoder, _, limiter = _nominatim([requests.exceptions.Timeout("slow")])

    with pytest.raises(GeocoderNetworkError, match="timed out"):
        geocoder.reverse(40.0, -75.0)
    # The slot is released even though no response arrived.
    assert limiter.after == [(None, None)]


def test_nominatim_invalid_json_becomes_network_error():
    geocoder, _, _ = _nominatim([FakeResp(200, bad_json=True)])

    with pytest.raises(GeocoderNetworkError):
        geocoder.reverse(40.0, -75.0)


def test_nominatim_429_is_reported_to_limiter():
    headers = {"Retry-After": "5"}
    geocoder, _, limiter = _nominatim([FakeResp(429, {}, headers=headers)])

    with pytest.raises(GeocoderNetworkError):
        geocoder.reverse(40.0, -75.0)
    assert limiter.after == [(headers, 429)]


def test_nominatim_error_payload_is_not_cached():
    geocoder, session, _ = _nominatim(
        [FakeResp(200, {"error": "Unable to geocode"}), FakeResp(200, PAYLOAD)]
    )

    with pytest.raises(AddressNotFoundError):
        geocoder.reverse(10.0, 10.0)
    assert geocoder.reverse(10.0, 10.0).city == "Springfield"
    assert len(session.calls) == 2


def test_nominatim_behind_resilient_resolver():
    geocoder, _, _ = _nominatim([requests.exceptions.ConnectionError("refused")])

    assert ResilientGeocoder(geocoder).address_of(40.0, -75.0) == ADDRESS_NETWORK_ERROR


# --- Offline + factory ---------------------------------------------------
def test_coordinate_geocoder_labels_by_position():
    result = CoordinateGeocoder(precision=3).reverse(40.123456, -75.654321)

    assert result.address == "40.123, -75.654"
    assert result.city is None and result.region is None


def test_build_geocoder_offline_wraps_coordinate_backend():
    resolver = build_geocoder(offline=True)

    assert isinstance(resolver, ResilientGeocoder)
    assert isinstance(resolver.backend, CoordinateGeocoder)
    assert resolver.address_of(1.5, 2.5) == "1.5, 2.5"


def test_build_geocoder_online_uses_nominatim():
    resolver = build_geocoder(offline=False)

    assert isinstance(resolver.backend, NominatimGeocoder)


def test_coord_key_rounds_to_precision():
    assert coord_key(40.123456, -75.987654, 4) == "40.1235,-75.9877"
    assert coord_key(1, 2, 2) == "1.00,2.00"
