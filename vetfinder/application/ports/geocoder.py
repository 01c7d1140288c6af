from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from vetfinder.application.utils.cancellation import Cancellation


@dataclass(frozen=True)
class GeocodeResult:
    latitude: float
    longitude: float


class GeocoderPort(ABC):
    @abstractmethod
    def geocode(self, address: str, cancellation: Cancellation | None = None) -> GeocodeResult | None:
        """Resolve a free-text address. Returns None when nothing is found."""
        raise NotImplementedError
