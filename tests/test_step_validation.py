"""
Tests for field validators and the four step validators.
"""

from __future__ import annotations

from vetfinder.domain.entities.company import DaySchedule, Step2Data, Step3Data, Step4Data, default_opening_hours
from vetfinder.domain.entities.service_pricing import ServicePricingDraft
from vetfinder.domain.validation import (
    is_image_source,
    parse_price,
    validate_company_form,
    validate_email,
    validate_opening_hours,
    validate_photos,
    validate_price_range,
    validate_service_entry,
    validate_step1,
    validate_step2,
    validate_step3,
    validate_step4,
    validate_time,
    validate_url,
)

LONG_DESCRIPTION = "x" * 60
PHOTOS = [f"https://cdn.example.com/{name}.jpg" for name in "abcd"]


def test_email_url_and_time():
    assert validate_email("vet@clinic.ro") is True
    assert validate_email("vet@clinic") is False
    assert validate_email("vet clinic@x.ro") is False
    assert validate_url("www.clinica-rex.ro") is True
    assert validate_url("https://rex.ro/contact") is True
    assert validate_url("not a url") is False
    assert validate_time("09:00") is True
    assert validate_time("23:59") is True
    assert validate_time("24:00") is False
    assert validate_time("9.30") is False


def test_price_range():
    """A fixed price is expressed with equal bounds."""
    assert validate_price_range(30, 50).valid is True
    assert validate_price_range(30, 30).valid is True
    check = validate_price_range(50, 30)
    assert check.valid is False
    assert check.error == "Maximum price must be greater than or equal to minimum price"
    assert validate_price_range(-1, 10).valid is False
    assert validate_price_range("abc", 10).valid is False
    assert validate_price_range("99,5", "120").valid is True


def test_parse_price():
    assert parse_price("120") == 120.0
    assert parse_price("99,5") == 99.5
    assert parse_price("") is None
    assert parse_price("nan") is None
    assert parse_price(True) is None


def test_opening_hours():
    assert validate_opening_hours(default_opening_hours()).valid is True
    assert validate_opening_hours({}).valid is False

    hours = default_opening_hours()
    hours["monday"] = DaySchedule("17:00", "09:00")
    check = validate_opening_hours(hours)
    assert check.valid is False
    assert "monday" in check.error

    hours = default_opening_hours()
    hours["tuesday"] = DaySchedule("09:00", "")
    assert validate_opening_hours(hours).valid is False

    # Closed days are not checked
    hours = default_opening_hours()
    hours["sunday"] = DaySchedule("", "", closed=True)
    assert validate_opening_hours(hours).valid is True


def test_photos():
    assert validate_photos(PHOTOS).valid is True
    assert validate_photos(PHOTOS[:3]).error == "Minimum 4 photos required"
    assert validate_photos(PHOTOS * 3).error == "Maximum 10 photos allowed"
    assert validate_photos(PHOTOS[:2], min_photos=2, max_photos=2).valid is True


def test_photos_must_be_remote_or_inline_images():
    """Server paths and non-image data never count as photos."""
    assert is_image_source("https://cdn.example.com/a.jpg") is True
    assert is_image_source("data:image/png;base64,aGVsbG8=") is True
    assert is_image_source("/etc/passwd") is False
    assert is_image_source("file:///etc/passwd") is False
    assert is_image_source("data:text/plain;base64,aGVsbG8=") is False
    assert is_image_source(42) is False

    check = validate_photos([*PHOTOS[:3], "/var/lib/vetfinder/sessions.json"])
    assert check.valid is False
    assert check.error == "All photos must be http(s) URLs or data:image URIs"


def test_step1_rejects_local_logo_path():
    base = {"name": "Clinica Rex", "email": "x@y.com", "phone": "0712345678"}
    assert validate_step1({**base, "logo_url": "https://cdn.example.com/logo.png"}).valid is True
    assert set(validate_step1({**base, "logo_url": "/etc/hostname"}).errors) == {"logo_url"}


def test_service_entry():
    assert validate_service_entry(ServicePricingDraft(service_name="Vaccin", price_min=50, price_max=80)).valid
    # No price at all means "price on request"
    assert validate_service_entry(ServicePricingDraft(service_name="Vaccin")).valid
    assert not validate_service_entry(ServicePricingDraft(service_name="Vaccin", price_min=50)).valid
    assert not validate_service_entry(ServicePricingDraft(service_name=" ", price_min=1, price_max=2)).valid


def test_step1_short_name():
    result = validate_step1({"name": "Ab", "email": "x@y.com", "phone": "+40712345678"})
    assert result.valid is False
    assert set(result.errors) == {"name"}


def test_step1_all_missing():
    result = validate_step1({})
    assert set(result.errors) == {"name", "email", "phone"}


def test_step1_optional_fields():
    base = {"name": "Clinica Rex", "email": "x@y.com", "phone": "0712345678"}
    assert validate_step1(base).valid is True
    assert "cui" in validate_step1({**base, "cui": "X1"}).errors
    assert "description" in validate_step1({**base, "description": "d" * 101}).errors


def test_step2_requires_known_county():
    data = Step2Data(street="Str. Lalelelor", street_number="3", city="Cluj-Napoca", county="CJ", postal_code="400001")
    assert validate_step2(data).valid is True

    result = validate_step2(Step2Data(street="Str. Lalelelor", street_number="3", city="X", county="Narnia", postal_code="12"))
    assert set(result.errors) == {"county", "postal_code"}


def test_step2_website_and_hours():
    data = Step2Data(
        street="Str. Lalelelor",
        street_number="3",
        city="Cluj-Napoca",
        county="Cluj",
        postal_code="400001",
        website="not a url",
        opening_hours=None,
    )
    result = validate_step2(data)
    assert set(result.errors) == {"website", "opening_hours"}


def test_step3():
    result = validate_step3(Step3Data())
    assert set(result.errors) == {"clinic_type", "selected_specializations", "facilities", "payment_methods"}

    data = Step3Data(
        clinic_type="mobile_vet",
        selected_categories=(1,),
        selected_specializations=(2,),
        facilities=("parking",),
        payment_methods=("cash",),
        num_veterinarians=0,
        years_in_business=-1,
    )
    result = validate_step3(data)
    assert set(result.errors) == {"num_veterinarians", "years_in_business"}

    assert "clinic_type" in validate_step3({"clinic_type": "spaceship"}).errors


def test_step4():
    services = (ServicePricingDraft(service_name="Vaccin", specialization_id=2, price_min=50, price_max=80),)
    assert validate_step4(Step4Data(description=LONG_DESCRIPTION, services=services, photos=tuple(PHOTOS))).valid

    result = validate_step4(Step4Data(description="short", services=(), photos=()))
    assert set(result.errors) == {"description", "services", "photos"}

    bad = (ServicePricingDraft(service_name="Vaccin", price_min=80, price_max=50),)
    result = validate_step4(Step4Data(description=LONG_DESCRIPTION, services=bad, photos=tuple(PHOTOS)))
    assert result.errors == {"services": "Vaccin: Maximum price must be greater than or equal to minimum price"}


def test_non_string_values_are_errors_not_crashes():
    result = validate_step4({"description": 123, "services": (), "photos": PHOTOS})
    assert result.errors["description"] == "Description must be a valid string"

    result = validate_step1({"name": "Clinica Rex", "email": "x@y.com", "phone": 712345678, "description": 5})
    assert set(result.errors) == {"phone", "description"}

    step2 = {"street": "S", "street_number": "1", "city": "C", "opening_hours": default_opening_hours()}
    result = validate_step2({**step2, "county": 12, "postal_code": 400001})
    assert set(result.errors) == {"county", "postal_code"}

    data = {"clinic_type": "mobile_vet", "selected_specializations": (2,), "facilities": ("parking",)}
    result = validate_step3({**data, "payment_methods": ("cash",), "num_veterinarians": "two"})
    assert set(result.errors) == {"num_veterinarians"}


def test_errors_are_recomputed_each_call():
    data = {"name": "Ab", "email": "x@y.com", "phone": "+40712345678"}
    assert "name" in validate_step1(data).errors
    data["name"] = "Abc"
    assert validate_step1(data).errors == {}


def test_validate_company_form_groups_by_step():
    errors = validate_company_form({})
    assert set(errors) == {"step1", "step2", "step3", "step4"}
    assert errors["step4"]["description"] == "Description is required"


def test_validate_company_form_uses_photo_bounds():
    services = (ServicePricingDraft(service_name="Vaccin", specialization_id=2),)
    step4 = Step4Data(description=LONG_DESCRIPTION, services=services, photos=tuple(PHOTOS[:2]))
    assert "photos" in validate_company_form({"step4": step4}).get("step4", {})
    assert "step4" not in validate_company_form({"step4": step4}, min_photos=2, max_photos=3)
