from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ServicePricingDraft:
    service_name: str = ""
    specialization_id: int | None = None  # None for custom entries
    category_id: int | None = None
    description: str = ""
    price_min: float | None = None
    price_max: float | None = None
    duration_minutes: int | None = 30
    is_custom: bool = False

    @property
    def has_name(self) -> bool:
        return bool(self.service_name and self.service_name.strip())
