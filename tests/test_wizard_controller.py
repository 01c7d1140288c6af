"""
Tests for the registration wizard: navigation, selection sync, submission and exit.
"""

from __future__ import annotations

import pytest

from conftest import LONG_DESCRIPTION, PHOTOS, fill_step1, fill_step2, fill_step3
from vetfinder.application.exceptions import NetworkError, RequestCancelled, SubmissionError, WizardStateError
from vetfinder.application.ports.geocoder import GeocodeResult
from vetfinder.application.use_cases.wizard import (
    EXIT_PROMPT_MESSAGE,
    EXIT_PROMPT_TITLE,
    PROFILE_CREATED_MESSAGE,
    SUBMIT_FALLBACK_MESSAGE,
    CompanyWizard,
)
from vetfinder.domain.entities.company import DaySchedule
from vetfinder.infrastructure.geocoding.mock_geocoder import MockGeocoder


def _price_everything(wizard: CompanyWizard) -> None:
    for entry in wizard.draft.step4.services:
        if not entry.is_custom:
            wizard.update_service_price(entry.specialization_id, price_min=50, price_max=80)
    wizard.update_step(4, description=LONG_DESCRIPTION, photos=PHOTOS)


def test_next_with_errors_stays_on_step(wizard):
    """Invalid step 1 keeps the step and exposes errors only for that step."""
    wizard.update_step(1, name="Ab", email="x@y.com", phone="+40712345678")

    assert wizard.next() is False
    assert wizard.current_step == 1
    assert set(wizard.errors) == {"step1"}
    assert set(wizard.errors["step1"]) == {"name"}
    assert wizard.completed_steps == set()


def test_next_advances_and_clears_errors(wizard):
    wizard.next()
    fill_step1(wizard)

    assert wizard.next() is True
    assert wizard.current_step == 2
    assert wizard.errors == {}
    assert wizard.completed_steps == {1}


def test_back_is_free_and_noop_on_first_step(wizard):
    wizard.back()
    assert wizard.current_step == 1

    fill_step1(wizard)
    wizard.next()
    wizard.update_step(2, street="")
    wizard.next()
    assert "step2" in wizard.errors

    wizard.back()
    assert wizard.current_step == 1
    assert wizard.errors == {}


def test_next_on_last_step_is_rejected(wizard_on_step4):
    with pytest.raises(WizardStateError):
        wizard_on_step4.next()


def test_submit_only_on_last_step(wizard):
    with pytest.raises(WizardStateError):
        wizard.submit()


def test_go_to_step(wizard_on_step4):
    wizard = wizard_on_step4
    assert wizard.go_to_step(1) is True
    assert wizard.current_step == 1

    # Forward to a completed step re-validates the steps in between
    wizard.update_step(1, email="broken")
    assert wizard.go_to_step(3) is False
    assert wizard.current_step == 1
    assert "email" in wizard.errors["step1"]

    wizard.update_step(1, email="contact@rex.ro")
    assert wizard.go_to_step(4) is True
    assert wizard.current_step == 4


def test_go_to_unreached_step_is_rejected(wizard):
    with pytest.raises(WizardStateError):
        wizard.go_to_step(3)


def test_update_step_rejects_unknown_and_selection_fields(wizard):
    with pytest.raises(ValueError):
        wizard.update_step(1, colour="red")
    with pytest.raises(ValueError):
        wizard.update_step(3, selected_specializations=(1, 2))
    with pytest.raises(ValueError):
        wizard.update_step(7, name="x")


def test_update_step_coerces_payload_values(wizard):
    wizard.update_step(2, opening_hours={"monday": {"open": "08:00", "close": "16:00"}})
    wizard.update_step(3, facilities=["parking"], payment_methods=["cash", "pet_insurance"])

    assert wizard.draft.step2.opening_hours == {"monday": DaySchedule("08:00", "16:00")}
    assert wizard.draft.step3.facilities == ("parking",)
    assert wizard.draft.step3.payment_methods == ("cash", "pet_insurance")


def test_selection_sync_keeps_invariant(wizard):
    wizard.load_catalog()
    assert wizard.toggle_specialization(2) is True
    assert wizard.draft.step3.selected_categories == (1,)
    assert wizard.draft.step3.selected_specializations == (2,)

    wizard.toggle_all_in_category(2)
    assert wizard.draft.step3.selected_categories == (1, 2)

    wizard.toggle_all_in_category(2)
    wizard.toggle_specialization(2)
    assert wizard.draft.step3.selected_categories == ()
    assert wizard.draft.step3.selected_specializations == ()


def test_toggle_before_catalog_loaded_is_ignored(wizard):
    assert wizard.toggle_specialization(2) is False
    assert wizard.draft.step3.selected_specializations == ()


def test_pricing_follows_selection(wizard_on_step4):
    wizard = wizard_on_step4
    assert [e.specialization_id for e in wizard.draft.step4.services] == [2, 7]

    wizard.update_service_price(2, price_min=50, price_max=80)
    wizard.add_custom_service(service_name="Home visit", price_min="100", price_max="150")
    wizard.toggle_specialization(7)

    services = wizard.draft.step4.services
    assert [e.specialization_id for e in services if not e.is_custom] == [2]
    assert next(e for e in services if e.specialization_id == 2).price_min == 50.0
    assert [e.service_name for e in services if e.is_custom] == ["Home visit"]


def test_submit_with_invalid_step4_stores_errors(wizard_on_step4, api):
    wizard = wizard_on_step4
    wizard.update_step(4, description="too short", photos=PHOTOS[:2])

    assert wizard.submit() is None
    assert set(wizard.errors["step4"]) >= {"description", "photos"}
    assert api.calls == ["get_service_categories"]


def test_submit_sends_company_services_logo_and_photos(wizard_on_step4, api):
    wizard = wizard_on_step4
    wizard.update_step(1, logo_url="data:image/png;base64,aGVsbG8=")
    _price_everything(wizard)

    result = wizard.submit()

    assert result is not None
    assert api.calls[1:] == ["create_company", "bulk_create_services"] + ["upload_company_photo"] * 5
    assert api.uploaded[result.company_id] == ["data:image/png;base64,aGVsbG8=", *PHOTOS]
    assert len(result.photo_urls) == 4
    company = api.companies[result.company_id]
    assert company["phone"] == "+40712345678"
    assert company["cui"] == "RO12345678"
    assert company["description"] == LONG_DESCRIPTION
    assert company["specialization_ids"] == [2, 7]
    assert company["category_ids"] == [1, 2]
    assert company["clinicType"] == "general_practice"
    assert company["postalCode"] == "400114"
    assert len(api.services[result.company_id]) == 2
    assert result.logo_url is not None
    assert wizard.finished is True


def test_successful_submit_discards_draft(wizard_on_step4):
    """Only the result survives a successful submit."""
    wizard = wizard_on_step4
    _price_everything(wizard)

    result = wizard.submit()

    assert wizard.result == result
    assert wizard.draft.step1.name is None
    assert wizard.draft.step4.services == ()
    assert wizard.draft.progress.company_id is None


def test_submit_skips_services_without_prices(wizard_on_step4, api):
    wizard = wizard_on_step4
    wizard.update_step(4, description=LONG_DESCRIPTION, photos=PHOTOS)

    result = wizard.submit()

    assert result.services_created is False
    assert "bulk_create_services" not in api.calls
    # no logo: only the step 4 photos are uploaded
    assert api.calls.count("upload_company_photo") == len(PHOTOS)


def test_photo_upload_resumes_after_failure(wizard_on_step4, api, monkeypatch):
    wizard = wizard_on_step4
    _price_everything(wizard)
    upload = api.upload_company_photo
    attempts = []

    def flaky(company_id, photo, cancellation=None):
        attempts.append(photo)
        if len(attempts) == 3:
            raise NetworkError("timeout")
        return upload(company_id, photo, cancellation)

    monkeypatch.setattr(api, "upload_company_photo", flaky)

    with pytest.raises(SubmissionError) as exc:
        wizard.submit()
    assert exc.value.stage == "photos"
    assert exc.value.company_id == 1
    assert wizard.draft.progress.photos_uploaded == 2

    result = wizard.submit()

    assert api.uploaded[1] == PHOTOS
    assert len(result.photo_urls) == 4
    assert api.calls.count("create_company") == 1


def test_sent_fields_are_locked_until_retry_succeeds(wizard_on_step4, api):
    """Edits after the company exists would never reach the backend."""
    wizard = wizard_on_step4
    _price_everything(wizard)
    api.fail_next["services"] = "Service limit reached"
    with pytest.raises(SubmissionError):
        wizard.submit()

    with pytest.raises(WizardStateError) as exc:
        wizard.update_step(1, name="Clinica Rex Nou")
    assert exc.value.args[0] == PROFILE_CREATED_MESSAGE
    with pytest.raises(WizardStateError):
        wizard.update_step(4, description=LONG_DESCRIPTION + " extra")
    with pytest.raises(WizardStateError):
        wizard.toggle_specialization(3)

    # services were not created yet, so their prices can still change
    wizard.update_service_price(2, price_min=60, price_max=90)
    result = wizard.submit()

    assert api.companies[result.company_id]["name"] == "Clinica Rex"
    vaccination = next(s for s in api.services[result.company_id] if s["specialization_id"] == 2)
    assert vaccination["price_min"] == 60.0


def test_submit_returns_to_first_invalid_step(wizard_on_step4, api):
    wizard = wizard_on_step4
    _price_everything(wizard)
    wizard.back()
    wizard.back()
    wizard.update_step(2, postal_code="12")
    assert wizard.go_to_step(4) is False
    assert wizard.current_step == 2

    # submit() checks every step even if navigation was bypassed
    wizard.current_step = 4
    assert wizard.submit() is None
    assert wizard.current_step == 2
    assert set(wizard.errors) == {"step2"}
    assert "create_company" not in api.calls


def test_non_string_description_is_a_validation_error(wizard_on_step4):
    wizard = wizard_on_step4
    _price_everything(wizard)
    wizard.update_step(4, description=123)

    assert wizard.submit() is None
    assert wizard.errors["step4"]["description"] == "Description must be a valid string"


def test_submit_failure_surfaces_server_message(wizard_on_step4, api):
    wizard = wizard_on_step4
    _price_everything(wizard)
    api.fail_next["company"] = "Email already registered"

    with pytest.raises(SubmissionError) as exc:
        wizard.submit()

    assert exc.value.stage == "company"
    assert exc.value.message == "Email already registered"
    assert wizard.current_step == 4
    assert wizard.draft.step1.name == "Clinica Rex"
    assert wizard.finished is False


def test_network_failure_uses_fallback_message(wizard_on_step4, api, monkeypatch):
    wizard = wizard_on_step4
    _price_everything(wizard)

    def unreachable(dto, cancellation=None):
        raise NetworkError("Connection refused")

    monkeypatch.setattr(api, "create_company", unreachable)

    with pytest.raises(SubmissionError) as exc:
        wizard.submit()
    assert exc.value.message == SUBMIT_FALLBACK_MESSAGE


def test_retry_after_partial_failure_does_not_duplicate_company(wizard_on_step4, api):
    wizard = wizard_on_step4
    _price_everything(wizard)
    api.fail_next["services"] = "Service limit reached"

    with pytest.raises(SubmissionError) as exc:
        wizard.submit()
    assert exc.value.stage == "services"
    assert exc.value.company_id == 1

    result = wizard.submit()

    assert result.company_id == 1
    assert api.calls.count("create_company") == 1
    assert len(api.companies) == 1
    assert len(api.services[1]) == 2


def test_finished_wizard_rejects_changes(wizard_on_step4):
    wizard = wizard_on_step4
    _price_everything(wizard)
    wizard.submit()

    with pytest.raises(WizardStateError):
        wizard.update_step(1, name="Other")
    with pytest.raises(WizardStateError):
        wizard.submit()


def test_exit_prompt_and_confirm(wizard, api):
    fill_step1(wizard)
    prompt = wizard.request_exit()
    assert prompt.title == EXIT_PROMPT_TITLE == "Exit Company Creation?"
    assert prompt.message == EXIT_PROMPT_MESSAGE
    # Asking does not discard anything
    assert wizard.draft.step1.name == "Clinica Rex"

    wizard.confirm_exit()

    assert wizard.discarded is True
    assert wizard.cancellation.cancelled is True
    assert wizard.draft.step1.name is None
    with pytest.raises(WizardStateError):
        wizard.next()


def test_cancelled_token_stops_outbound_calls(wizard, api):
    wizard.cancellation.cancel("test")
    with pytest.raises(RequestCancelled):
        wizard.load_catalog()
    assert api.calls == []


def test_locate_address_success(wizard):
    fill_step1(wizard)
    wizard.next()
    fill_step2(wizard)

    result = wizard.locate_address()

    assert result == GeocodeResult(latitude=46.7712, longitude=23.6236)
    assert wizard.draft.step2.latitude == 46.7712
    assert wizard.draft.step2.longitude == 23.6236


def test_locate_address_not_found_marks_street_and_city(api):
    wizard = CompanyWizard(api=api, geocoder=MockGeocoder(), min_photos=4, max_photos=10)
    wizard.update_step(
        2, street="Nowhere", street_number="1", city="Satul Mic", county="Vrancea", postal_code="600000"
    )

    assert wizard.locate_address() is None
    assert set(wizard.errors["step2"]) == {"street", "city"}
    assert wizard.draft.step2.latitude is None
    assert wizard.draft.step2.longitude is None


def test_locate_address_requires_address_fields(wizard, geocoder):
    wizard.update_step(2, street="Strada Lungă")

    assert wizard.locate_address() is None
    assert "street_number" in wizard.errors["step2"]
    assert geocoder.queries == []


def test_load_catalog_with_unavailable_backend(api, monkeypatch):
    wizard = CompanyWizard(api=api, geocoder=None, min_photos=4, max_photos=10)
    monkeypatch.setattr(api, "get_service_categories", lambda cancellation=None: [])

    catalog = wizard.load_catalog()

    assert catalog.is_loaded is False
    assert wizard.toggle_specialization(2) is False


def test_full_flow_step3_requires_selection(wizard):
    fill_step1(wizard)
    wizard.next()
    fill_step2(wizard)
    wizard.next()
    fill_step3(wizard)

    assert wizard.next() is False
    assert set(wizard.errors["step3"]) == {"selected_specializations"}

