"""
Tests for address building and the Nominatim geocoder.
"""

from __future__ import annotations

import httpx

from vetfinder.application.ports.geocoder import GeocodeResult
from vetfinder.application.utils.address import build_address_for_geocoding
from vetfinder.infrastructure.geocoding.nominatim import NominatimGeocoder


def _geocoder(handler) -> NominatimGeocoder:
    return NominatimGeocoder(
        base_url="https://nominatim.test",
        user_agent="VetFinderTests/1.0",
        client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


def test_build_address_joins_non_empty_parts():
    address = build_address_for_geocoding(
        street=" Strada Lalelelor ",
        street_number="12",
        building="A3",
        apartment="7",
        city="Cluj-Napoca",
        county="Cluj",
        postal_code="400001",
    )
    assert address == "Strada Lalelelor 12, Bloc A3, Ap. 7, Cluj-Napoca, Cluj, 400001, Romania"


def test_build_address_skips_missing_parts():
    assert build_address_for_geocoding(city="Iași", country="") == "Iași"
    assert build_address_for_geocoding() == "Romania"


def test_geocode_first_result():
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        seen["agent"] = request.headers.get("User-Agent")
        return httpx.Response(200, json=[{"lat": "46.77", "lon": "23.59"}, {"lat": "0", "lon": "0"}])

    result = _geocoder(handler).geocode("Strada Lalelelor 12, Cluj-Napoca, Romania")

    assert result == GeocodeResult(latitude=46.77, longitude=23.59)
    assert seen["path"] == "/search"
    assert seen["params"] == {
        "format": "json",
        "limit": "1",
        "addressdetails": "1",
        "q": "Strada Lalelelor 12, Cluj-Napoca, Romania",
    }
    assert seen["agent"] == "VetFinderTests/1.0"


def test_geocode_failures_return_none():
    def empty(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[])

    def server_error(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="busy")

    def not_numbers(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[{"lat": "abc", "lon": "inf"}])

    def infinite(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[{"lat": "inf", "lon": "1"}])

    def unreachable(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("down", request=request)

    for handler in (empty, server_error, not_numbers, infinite, unreachable):
        assert _geocoder(handler).geocode("Cluj-Napoca") is None


def test_blank_address_is_not_sent():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=[])

    assert _geocoder(handler).geocode("   ") is None
    assert calls == []
