from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from vetfinder.domain.entities.service_pricing import ServicePricingDraft


class ClinicType(str, Enum):
    general_practice = "general_practice"
    emergency_care = "emergency_care"
    specialized_care = "specialized_care"
    mobile_vet = "mobile_vet"
    emergency_24_7 = "emergency_24_7"


class Facility(str, Enum):
    emergency_24_7 = "emergency_24_7"
    in_house_lab = "in_house_lab"
    surgery_room = "surgery_room"
    isolation_ward = "isolation_ward"
    grooming_station = "grooming_station"
    pharmacy = "pharmacy"
    parking = "parking"
    wheelchair_accessible = "wheelchair_accessible"
    pickup_dropoff = "pickup_dropoff"


class PaymentMethod(str, Enum):
    cash = "cash"
    credit_card = "credit_card"
    debit_card = "debit_card"
    mobile_payment = "mobile_payment"
    pet_insurance = "pet_insurance"


class ServiceCategoryType(str, Enum):
    routine_care = "routine_care"
    dental_care = "dental_care"
    diagnostic_services = "diagnostic_services"
    emergency_care = "emergency_care"
    surgical_procedures = "surgical_procedures"
    grooming = "grooming"
    custom = "custom"


WEEKDAYS: tuple[str, ...] = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


@dataclass(frozen=True)
class DaySchedule:
    open: str = ""  # "09:00"
    close: str = ""  # "17:00"
    closed: bool = False

    @staticmethod
    def from_payload(payload: "DaySchedule | dict[str, Any]") -> "DaySchedule":
        if isinstance(payload, DaySchedule):
            return payload
        return DaySchedule(
            open=str(payload.get("open") or ""),
            close=str(payload.get("close") or ""),
            closed=bool(payload.get("closed", False)),
        )


def default_opening_hours() -> dict[str, DaySchedule]:
    hours = {day: DaySchedule("09:00", "17:00") for day in WEEKDAYS}
    hours["saturday"] = DaySchedule("09:00", "13:00")
    hours["sunday"] = DaySchedule("09:00", "17:00", closed=True)
    return hours


def opening_hours_from_payload(payload: dict[str, Any] | None) -> dict[str, DaySchedule] | None:
    if payload is None:
        return None
    return {day: DaySchedule.from_payload(value) for day, value in payload.items() if value is not None}


@dataclass(frozen=True)
class Step1Data:
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    cui: str | None = None
    description: str | None = None
    logo_url: str | None = None


@dataclass(frozen=True)
class Step2Data:
    street: str | None = None
    street_number: str | None = None
    building: str | None = None
    apartment: str | None = None
    city: str | None = None
    county: str | None = None
    postal_code: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    website: str | None = None
    opening_hours: dict[str, DaySchedule] | None = field(default_factory=default_opening_hours)


@dataclass(frozen=True)
class Step3Data:
    clinic_type: str | None = None
    selected_categories: tuple[int, ...] = ()
    selected_specializations: tuple[int, ...] = ()
    facilities: tuple[str, ...] = ()
    payment_methods: tuple[str, ...] = ()
    num_veterinarians: int | None = None
    years_in_business: int | None = None


@dataclass(frozen=True)
class Step4Data:
    description: str | None = None
    services: tuple[ServicePricingDraft, ...] = ()
    photos: tuple[str, ...] = ()


@dataclass
class SubmissionProgress:
    company_id: int | None = None
    company: dict[str, Any] | None = None
    services_created: bool = False
    logo_uploaded: bool = False
    logo_url: str | None = None
    # step 4 photos are uploaded in order; a retry starts at photo_urls[len(photo_urls)]
    photo_urls: list[str] = field(default_factory=list)

    @property
    def photos_uploaded(self) -> int:
        return len(self.photo_urls)


@dataclass
class CompanyDraft:
    """In-progress registration; only the assembled draft is ever submitted."""

    step1: Step1Data = field(default_factory=Step1Data)
    step2: Step2Data = field(default_factory=Step2Data)
    step3: Step3Data = field(default_factory=Step3Data)
    step4: Step4Data = field(default_factory=Step4Data)
    progress: SubmissionProgress = field(default_factory=SubmissionProgress)

    def slice(self, step: int) -> Step1Data | Step2Data | Step3Data | Step4Data:
        return getattr(self, f"step{step}")
