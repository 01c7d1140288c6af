from __future__ import annotations

import logging

from vetfinder.application.ports.geocoder import GeocodeResult, GeocoderPort
from vetfinder.application.utils.cancellation import Cancellation, check
from vetfinder.domain.geo import find_county

# Rough county seat coordinates; enough for local runs.
_COUNTY_CENTERS: dict[str, tuple[float, float]] = {
    "B": (44.4268, 26.1025),
    "CJ": (46.7712, 23.6236),
    "IS": (47.1585, 27.6014),
    "TM": (45.7489, 21.2087),
    "CT": (44.1598, 28.6348),
    "BV": (45.6427, 25.5887),
}


class MockGeocoder(GeocoderPort):
    def __init__(self, known: dict[str, GeocodeResult] | None = None) -> None:
        self._known = dict(known or {})
        self.queries: list[str] = []
        self._logger = logging.getLogger(__name__)

    def geocode(self, address: str, cancellation: Cancellation | None = None) -> GeocodeResult | None:
        check(cancellation)
        query = (address or "").strip()
        self.queries.append(query)
        if not query:
            return None
        if query in self._known:
            return self._known[query]

        for part in query.split(","):
            county = find_county(part)
            center = _COUNTY_CENTERS.get(county.code) if county else None
            if center:
                return GeocodeResult(latitude=center[0], longitude=center[1])

        self._logger.info("Mock geocoder has no match", extra={"reason": query})
        return None
