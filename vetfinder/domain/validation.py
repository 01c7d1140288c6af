"""
Field and step validators for the company registration wizard.

Every validator is a pure function. Step validators accept either the step
dataclass or a plain mapping and return a StepValidation whose errors map
field name -> message; results are recomputed from scratch on every call.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from vetfinder.domain.entities.company import WEEKDAYS, ClinicType, DaySchedule
from vetfinder.domain.geo import find_county
from vetfinder.domain.romanian import validate_cui, validate_romanian_phone, validate_romanian_postal_code

EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
URL_REGEX = re.compile(r"^(https?://)?([\da-z.-]+)\.([a-z.]{2,6})([/\w .-]*)*/?$", re.IGNORECASE)
TIME_REGEX = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")
# Sources the server may forward to the backend: remote images or inline image data.
IMAGE_SOURCE_REGEX = re.compile(r"^(https?://\S+|data:image/[\w.+-]+(;[\w.+=-]+)*,\S*)$", re.IGNORECASE)

NAME_MIN_LENGTH = 3
NAME_MAX_LENGTH = 100
SHORT_DESCRIPTION_MAX_LENGTH = 100
FULL_DESCRIPTION_MIN_LENGTH = 50
FULL_DESCRIPTION_MAX_LENGTH = 500
MIN_PHOTOS = 4
MAX_PHOTOS = 10


@dataclass(frozen=True)
class FieldCheck:
    valid: bool
    error: str | None = None


@dataclass(frozen=True)
class StepValidation:
    valid: bool
    errors: dict[str, str] = field(default_factory=dict)

    @staticmethod
    def from_errors(errors: dict[str, str]) -> "StepValidation":
        return StepValidation(valid=not errors, errors=dict(errors))


_OK = FieldCheck(valid=True)


def _get(data: Any, key: str) -> Any:
    if data is None:
        return None
    if isinstance(data, Mapping):
        return data.get(key)
    return getattr(data, key, None)


def _is_whole(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        return len(value) == 0
    return False


# ---- basic field validators -------------------------------------------------


def validate_email(email: str | None) -> bool:
    if not email or not isinstance(email, str):
        return False
    return bool(EMAIL_REGEX.match(email.strip()))


def validate_url(url: str | None) -> bool:
    if not url or not isinstance(url, str):
        return False
    return bool(URL_REGEX.match(url.strip()))


def validate_time(value: str | None) -> bool:
    if not value or not isinstance(value, str):
        return False
    return bool(TIME_REGEX.match(value.strip()))


def is_image_source(value: Any) -> bool:
    """True for http(s) URLs and data:image URIs; local paths are never accepted."""
    return isinstance(value, str) and bool(IMAGE_SOURCE_REGEX.match(value.strip()))


def minute_of_day(value: str) -> int:
    hours, minutes = value.strip().split(":")
    return int(hours) * 60 + int(minutes)


def validate_required(value: Any, field_name: str) -> FieldCheck:
    if _blank(value):
        return FieldCheck(False, f"{field_name} is required")
    return _OK


def validate_min_length(value: str | None, minimum: int, field_name: str) -> FieldCheck:
    if not value or not isinstance(value, str):
        return FieldCheck(False, f"{field_name} must be a valid string")
    if len(value.strip()) < minimum:
        return FieldCheck(False, f"{field_name} must be at least {minimum} characters")
    return _OK


def validate_max_length(value: str | None, maximum: int, field_name: str) -> FieldCheck:
    if not value or not isinstance(value, str):
        return FieldCheck(False, f"{field_name} must be a valid string")
    if len(value.strip()) > maximum:
        return FieldCheck(False, f"{field_name} must not exceed {maximum} characters")
    return _OK


def validate_company_name(name: str | None) -> FieldCheck:
    if not name or not isinstance(name, str) or not name.strip():
        return FieldCheck(False, "Company name is required")
    trimmed = name.strip()
    if len(trimmed) < NAME_MIN_LENGTH:
        return FieldCheck(False, f"Company name must be at least {NAME_MIN_LENGTH} characters")
    if len(trimmed) > NAME_MAX_LENGTH:
        return FieldCheck(False, f"Company name must not exceed {NAME_MAX_LENGTH} characters")
    return _OK


def parse_price(value: Any) -> float | None:
    """Accept numbers or numeric strings ("120", "99,5"); None when unparseable."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", ".")
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    return number if math.isfinite(number) else None


def validate_price_range(price_min: Any, price_max: Any) -> FieldCheck:
    low = parse_price(price_min)
    high = parse_price(price_max)
    if low is None or high is None:
        return FieldCheck(False, "Prices must be valid numbers")
    if low < 0:
        return FieldCheck(False, "Minimum price cannot be negative")
    if high < 0:
        return FieldCheck(False, "Maximum price cannot be negative")
    if high < low:
        return FieldCheck(False, "Maximum price must be greater than or equal to minimum price")
    return _OK


def validate_opening_hours(hours: Mapping[str, Any] | None) -> FieldCheck:
    if not hours or not isinstance(hours, Mapping):
        return FieldCheck(False, "Opening hours are required")

    for day in WEEKDAYS:
        raw = hours.get(day)
        if raw is None:
            continue
        schedule = DaySchedule.from_payload(raw)
        if schedule.closed:
            continue
        if not schedule.open or not schedule.close:
            return FieldCheck(False, f"Please set opening hours for {day} or mark it as closed")
        if not validate_time(schedule.open) or not validate_time(schedule.close):
            return FieldCheck(False, f"Invalid time format for {day}")
        if minute_of_day(schedule.close) <= minute_of_day(schedule.open):
            return FieldCheck(False, f"Closing time must be after opening time for {day}")
    return _OK


def validate_photos(photos: Iterable[str] | None, min_photos: int = MIN_PHOTOS, max_photos: int = MAX_PHOTOS) -> FieldCheck:
    items = list(photos or [])
    if len(items) < min_photos:
        return FieldCheck(False, f"Minimum {min_photos} photos required")
    if len(items) > max_photos:
        return FieldCheck(False, f"Maximum {max_photos} photos allowed")
    for photo in items:
        if not is_image_source(photo):
            return FieldCheck(False, "All photos must be http(s) URLs or data:image URIs")
    return _OK


def validate_service_entry(entry: Any) -> FieldCheck:
    name = _get(entry, "service_name")
    if _blank(name):
        return FieldCheck(False, "Service name is required")

    price_min = _get(entry, "price_min")
    price_max = _get(entry, "price_max")
    has_min = not _blank(price_min)
    has_max = not _blank(price_max)
    if not has_min and not has_max:
        # Price on request; skipped at submission.
        return _OK
    if has_min != has_max:
        return FieldCheck(False, "Set both the minimum and the maximum price")
    return validate_price_range(price_min, price_max)


# ---- step validators -------------------------------------------------------


def validate_step1(data: Any) -> StepValidation:
    errors: dict[str, str] = {}

    name_check = validate_company_name(_get(data, "name"))
    if not name_check.valid:
        errors["name"] = name_check.error or "Invalid company name"

    email = _get(data, "email")
    if _blank(email):
        errors["email"] = "Business email is required"
    elif not validate_email(email):
        errors["email"] = "Invalid email format"

    phone = _get(data, "phone")
    if _blank(phone):
        errors["phone"] = "Telefonul este obligatoriu"
    elif not validate_romanian_phone(phone):
        errors["phone"] = "Format invalid. Folosiți +40 XXX XXX XXX sau 07XX XXX XXX"

    cui = _get(data, "cui")
    if not _blank(cui) and not validate_cui(cui):
        errors["cui"] = "Format CUI invalid"

    description = _get(data, "description")
    if not _blank(description):
        check = validate_max_length(description, SHORT_DESCRIPTION_MAX_LENGTH, "Description")
        if not check.valid:
            errors["description"] = check.error or "Invalid description"

    logo_url = _get(data, "logo_url")
    if not _blank(logo_url) and not is_image_source(logo_url):
        errors["logo_url"] = "Logo must be an http(s) URL or a data:image URI"

    return StepValidation.from_errors(errors)


def validate_step2(data: Any) -> StepValidation:
    errors: dict[str, str] = {}

    if _blank(_get(data, "street")):
        errors["street"] = "Strada este obligatorie"
    if _blank(_get(data, "street_number")):
        errors["street_number"] = "Numărul este obligatoriu"
    if _blank(_get(data, "city")):
        errors["city"] = "Orașul este obligatoriu"

    county = _get(data, "county")
    if _blank(county):
        errors["county"] = "Județul este obligatoriu"
    elif find_county(county) is None:
        errors["county"] = "Județ necunoscut"

    postal_code = _get(data, "postal_code")
    if _blank(postal_code):
        errors["postal_code"] = "Codul poștal este obligatoriu"
    elif not validate_romanian_postal_code(postal_code):
        errors["postal_code"] = "Format invalid. Folosiți 6 cifre (ex: 010101)"

    website = _get(data, "website")
    if not _blank(website) and not validate_url(website):
        errors["website"] = "Invalid website URL"

    hours_check = validate_opening_hours(_get(data, "opening_hours"))
    if not hours_check.valid:
        errors["opening_hours"] = hours_check.error or "Invalid opening hours"

    return StepValidation.from_errors(errors)


def validate_step3(data: Any) -> StepValidation:
    errors: dict[str, str] = {}

    clinic_type = _get(data, "clinic_type")
    if _blank(clinic_type):
        errors["clinic_type"] = "Clinic type is required"
    elif str(getattr(clinic_type, "value", clinic_type)) not in {c.value for c in ClinicType}:
        errors["clinic_type"] = "Unknown clinic type"

    if _blank(_get(data, "selected_specializations")):
        errors["selected_specializations"] = "At least 1 specialization is required"
    if _blank(_get(data, "facilities")):
        errors["facilities"] = "At least 1 facility is required"
    if _blank(_get(data, "payment_methods")):
        errors["payment_methods"] = "At least 1 payment method is required"

    num_vets = _get(data, "num_veterinarians")
    if num_vets is not None and (not _is_whole(num_vets) or num_vets < 1):
        errors["num_veterinarians"] = "Number of veterinarians must be at least 1"

    years = _get(data, "years_in_business")
    if years is not None and (not _is_whole(years) or years < 0):
        errors["years_in_business"] = "Years in business cannot be negative"

    return StepValidation.from_errors(errors)


def validate_step4(data: Any, min_photos: int = MIN_PHOTOS, max_photos: int = MAX_PHOTOS) -> StepValidation:
    errors: dict[str, str] = {}

    description = _get(data, "description")
    for check in (
        validate_required(description, "Description"),
        validate_min_length(description, FULL_DESCRIPTION_MIN_LENGTH, "Description"),
        validate_max_length(description, FULL_DESCRIPTION_MAX_LENGTH, "Description"),
    ):
        if not check.valid:
            errors["description"] = check.error or "Invalid description"
            break

    services = list(_get(data, "services") or [])
    if not services:
        errors["services"] = "At least 1 service is required"
    else:
        for position, entry in enumerate(services, start=1):
            check = validate_service_entry(entry)
            if not check.valid:
                label = _get(entry, "service_name") or f"#{position}"
                errors["services"] = f"{label}: {check.error}"
                break

    photos_check = validate_photos(_get(data, "photos"), min_photos, max_photos)
    if not photos_check.valid:
        errors["photos"] = photos_check.error or "Invalid photos"

    return StepValidation.from_errors(errors)


STEP_VALIDATORS = {
    1: validate_step1,
    2: validate_step2,
    3: validate_step3,
    4: validate_step4,
}


def validate_company_form(
    draft: Any, min_photos: int = MIN_PHOTOS, max_photos: int = MAX_PHOTOS
) -> dict[str, dict[str, str]]:
    """Run all four step validators; returns errors keyed step1..step4 (empty when valid)."""
    errors: dict[str, dict[str, str]] = {}
    for step, validator in STEP_VALIDATORS.items():
        data = _get(draft, f"step{step}") or {}
        result = validate_step4(data, min_photos, max_photos) if step == 4 else validator(data)
        if not result.valid:
            errors[f"step{step}"] = result.errors
    return errors
