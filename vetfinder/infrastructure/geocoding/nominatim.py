from __future__ import annotations

import logging
import math

import httpx

from vetfinder.application.ports.geocoder import GeocodeResult, GeocoderPort
from vetfinder.application.utils.cancellation import Cancellation, check
from vetfinder.core.config import settings


class NominatimGeocoder(GeocoderPort):
    """OpenStreetMap Nominatim search. Any failure is reported as "not found"."""

    def __init__(
        self,
        base_url: str | None = None,
        user_agent: str | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._base_url = (base_url or settings.NOMINATIM_BASE_URL).rstrip("/")
        self._user_agent = user_agent or settings.NOMINATIM_USER_AGENT
        self._client = client or httpx.Client(timeout=10.0)
        self._logger = logging.getLogger(__name__)

    def geocode(self, address: str, cancellation: Cancellation | None = None) -> GeocodeResult | None:
        query = (address or "").strip()
        if not query:
            return None
        check(cancellation)

        params = {"format": "json", "limit": 1, "addressdetails": 1, "q": query}
        headers = {"Accept": "application/json", "User-Agent": self._user_agent}
        try:
            response = self._client.get(f"{self._base_url}/search", params=params, headers=headers)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            self._logger.warning("Geocoding request failed", extra={"reason": str(e)})
            return None

        if not isinstance(data, list) or not data or not isinstance(data[0], dict):
            return None

        try:
            lat = float(data[0].get("lat"))
            lon = float(data[0].get("lon"))
        except (TypeError, ValueError):
            return None
        if not math.isfinite(lat) or not math.isfinite(lon):
            return None
        return GeocodeResult(latitude=lat, longitude=lon)
