from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from vetfinder.domain.entities.company import CompanyDraft, DaySchedule
from vetfinder.domain.romanian import normalize_cui, normalize_romanian_phone


class DayScheduleDTO(BaseModel):
    open: str = ""
    close: str = ""
    closed: bool = False


class CreateServiceDTO(BaseModel):
    category: str
    service_name: str
    description: str | None = None
    specialization_id: int | None = None
    category_id: int | None = None
    price_min: float
    price_max: float
    duration_minutes: int | None = None
    is_custom: bool = False


class CreateCompanyDTO(BaseModel):
    """Body of POST /companies; Romanian address fields keep the backend's camelCase names."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    email: str
    phone: str
    cui: str | None = None
    description: str | None = None

    street: str
    street_number: str = Field(alias="streetNumber")
    building: str | None = None
    apartment: str | None = None
    city: str
    county: str
    postal_code: str = Field(alias="postalCode")
    latitude: float | None = None
    longitude: float | None = None
    website: str | None = None
    opening_hours: dict[str, DayScheduleDTO] = Field(default_factory=dict)

    clinic_type: str = Field(alias="clinicType")
    category_ids: list[int] = Field(default_factory=list)
    specialization_ids: list[int] = Field(default_factory=list)
    facilities: list[str] = Field(default_factory=list)
    payment_methods: list[str] = Field(default_factory=list)
    num_veterinarians: int | None = None
    years_in_business: int | None = None

    photos: list[str] = Field(default_factory=list)

    @staticmethod
    def from_draft(draft: CompanyDraft) -> "CreateCompanyDTO":
        step1, step2, step3, step4 = draft.step1, draft.step2, draft.step3, draft.step4
        hours: dict[str, DaySchedule] = step2.opening_hours or {}
        return CreateCompanyDTO(
            name=(step1.name or "").strip(),
            email=(step1.email or "").strip(),
            phone=normalize_romanian_phone(step1.phone),
            cui=normalize_cui(step1.cui) or None,
            # The full description from step 4 wins over the short one from step 1.
            description=step4.description or step1.description,
            street=step2.street or "",
            street_number=step2.street_number or "",
            building=step2.building or None,
            apartment=step2.apartment or None,
            city=step2.city or "",
            county=step2.county or "",
            postal_code=(step2.postal_code or "").replace(" ", ""),
            latitude=step2.latitude,
            longitude=step2.longitude,
            website=step2.website or None,
            opening_hours={
                day: DayScheduleDTO(open=s.open, close=s.close, closed=s.closed) for day, s in hours.items()
            },
            clinic_type=str(getattr(step3.clinic_type, "value", step3.clinic_type) or ""),
            category_ids=list(step3.selected_categories),
            specialization_ids=list(step3.selected_specializations),
            facilities=list(step3.facilities),
            payment_methods=list(step3.payment_methods),
            num_veterinarians=step3.num_veterinarians,
            years_in_business=step3.years_in_business,
            photos=list(step4.photos),
        )

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
