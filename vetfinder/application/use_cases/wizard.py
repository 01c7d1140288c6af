"""
Four-step company registration wizard.

The wizard owns the draft, the current step and the visible validation
errors. Steps advance strictly 1 -> 2 -> 3 -> 4 after validation; moving back
is free. submit() is the only terminal transition.

Once the backend has created the company, the fields it already received
are locked until submit() finishes the remaining calls.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, fields, replace
from typing import Any, Callable

from vetfinder.application.dto.company import CreateCompanyDTO, CreateServiceDTO
from vetfinder.application.exceptions import ApiError, NetworkError, SubmissionError, WizardStateError
from vetfinder.application.ports.company_api import CompanyApiPort
from vetfinder.application.ports.geocoder import GeocodeResult, GeocoderPort
from vetfinder.application.utils.address import build_address_for_geocoding
from vetfinder.application.utils.cancellation import Cancellation
from vetfinder.core.config import settings
from vetfinder.domain import pricing
from vetfinder.domain.entities.company import CompanyDraft, opening_hours_from_payload
from vetfinder.domain.entities.service_catalog import ServiceCatalog
from vetfinder.domain.entities.service_pricing import ServicePricingDraft
from vetfinder.domain.romanian import validate_romanian_postal_code
from vetfinder.domain.selection import CategoryPicker, ServiceSelection
from vetfinder.domain.validation import (
    StepValidation,
    parse_price,
    validate_company_form,
    validate_step1,
    validate_step2,
    validate_step3,
    validate_step4,
)

FIRST_STEP = 1
LAST_STEP = 4

EXIT_PROMPT_TITLE = "Exit Company Creation?"
EXIT_PROMPT_MESSAGE = "Your progress will be lost. Are you sure you want to exit?"
SUBMIT_FALLBACK_MESSAGE = "Failed to create company profile. Please try again."
PROFILE_CREATED_MESSAGE = "The company profile was already created. Submit again to finish the registration."

# Written only through the picker so the category invariant holds.
_SELECTION_FIELDS = frozenset({"selected_categories", "selected_specializations"})
_TUPLE_FIELDS = frozenset({"facilities", "payment_methods", "photos", "services"})


@dataclass(frozen=True)
class ExitPrompt:
    title: str
    message: str


@dataclass(frozen=True)
class SubmitResult:
    company_id: int
    company: dict[str, Any]
    services_created: bool
    logo_url: str | None = None
    photo_urls: tuple[str, ...] = ()


class CompanyWizard:
    def __init__(
        self,
        api: CompanyApiPort,
        geocoder: GeocoderPort | None = None,
        wizard_id: str | None = None,
        min_photos: int | None = None,
        max_photos: int | None = None,
    ) -> None:
        self.wizard_id = wizard_id or uuid.uuid4().hex
        self.current_step = FIRST_STEP
        self.draft = CompanyDraft()
        self.errors: dict[str, dict[str, str]] = {}
        self.completed_steps: set[int] = set()
        self.picker = CategoryPicker(ServiceSelection())
        self.cancellation = Cancellation()
        self.finished = False
        self.discarded = False
        self.result: SubmitResult | None = None

        self._api = api
        self._geocoder = geocoder
        self._min_photos = settings.MIN_PHOTOS if min_photos is None else min_photos
        self._max_photos = settings.MAX_PHOTOS if max_photos is None else max_photos
        self._logger = logging.getLogger(__name__)

    # ---- step data ----

    def update_step(self, step: int, **partial: Any) -> None:
        """Merge fields into one step's data. No validation happens here."""
        self._ensure_editable()
        if step not in range(FIRST_STEP, LAST_STEP + 1):
            raise ValueError(f"Unknown step {step}")

        current = self.draft.slice(step)
        known = {f.name for f in fields(current)}
        blocked = set(partial) & _SELECTION_FIELDS if step == 3 else set()
        if blocked:
            raise ValueError("Specializations are changed through the category picker")
        unknown = set(partial) - known
        if unknown:
            raise ValueError(f"Unknown fields for step {step}: {', '.join(sorted(unknown))}")

        values = {key: _coerce(key, value) for key, value in partial.items()}
        setattr(self.draft, f"step{step}", replace(current, **values))

    # ---- navigation ----

    def next(self) -> bool:
        """Validate the current step and advance. Returns False when the step has errors."""
        self._ensure_open()
        if self.current_step == LAST_STEP:
            raise WizardStateError("The last step is completed with submit()")

        result = self._validate(self.current_step)
        if not result.valid:
            self.errors = {f"step{self.current_step}": result.errors}
            self._logger.info(
                "Step has validation errors",
                extra={"wizard_id": self.wizard_id, "step": self.current_step, "reason": ",".join(result.errors)},
            )
            return False

        self.completed_steps.add(self.current_step)
        self._enter(self.current_step + 1)
        return True

    def back(self) -> None:
        self._ensure_open()
        if self.current_step > FIRST_STEP:
            self._enter(self.current_step - 1)

    def go_to_step(self, step: int) -> bool:
        """
        Jump to an already completed step.

        Jumping forward re-validates every step in between, since earlier
        steps may have been edited after they were completed.
        """
        self._ensure_open()
        if step == self.current_step:
            return True
        if step not in self.completed_steps and not (
            step > self.current_step and step - 1 in self.completed_steps
        ):
            raise WizardStateError(f"Step {step} has not been reached yet")

        for intermediate in range(self.current_step, step):
            result = self._validate(intermediate)
            if not result.valid:
                self._enter(intermediate)
                self.errors = {f"step{intermediate}": result.errors}
                return False
            self.completed_steps.add(intermediate)

        self._enter(step)
        return True

    def _enter(self, step: int) -> None:
        self.current_step = step
        self.errors = {}
        if step == LAST_STEP:
            self._sync_pricing()

    def _validate(self, step: int) -> StepValidation:
        if step == 1:
            return validate_step1(self.draft.step1)
        if step == 2:
            return validate_step2(self.draft.step2)
        if step == 3:
            return validate_step3(self.draft.step3)
        return validate_step4(self.draft.step4, self._min_photos, self._max_photos)

    # ---- categories and specializations ----

    @property
    def catalog(self) -> ServiceCatalog:
        return self.picker.catalog

    def load_catalog(self) -> ServiceCatalog:
        self._ensure_editable()
        items = self._api.get_service_categories(self.cancellation)
        try:
            catalog = ServiceCatalog.from_payload(items)
        except (KeyError, TypeError, ValueError) as e:
            self._logger.warning("Malformed service categories", extra={"wizard_id": self.wizard_id, "reason": str(e)})
            return self.catalog

        if not catalog.is_loaded:
            self._logger.warning("Service categories are empty", extra={"wizard_id": self.wizard_id})
            return self.catalog

        self.picker.selection.use_catalog(catalog)
        self._sync_selection()
        return catalog

    def toggle_specialization(self, specialization_id: int) -> bool:
        self._ensure_editable()
        changed = self.picker.toggle_specialization(specialization_id)
        if changed:
            self._sync_selection()
        return changed

    def toggle_all_in_category(self, category_id: int) -> bool:
        self._ensure_editable()
        changed = self.picker.toggle_all_in_category(category_id)
        if changed:
            self._sync_selection()
        return changed

    def toggle_category_expansion(self, category_id: int) -> None:
        self.picker.toggle_category_expansion(category_id)

    def _sync_selection(self) -> None:
        selection = self.picker.selection
        self.draft.step3 = replace(
            self.draft.step3,
            selected_categories=selection.selected_category_ids,
            selected_specializations=selection.selected_specialization_ids,
        )
        self._sync_pricing()

    def _sync_pricing(self) -> None:
        entries = pricing.reconcile_pricing(
            self.draft.step4.services,
            self.draft.step3.selected_specializations,
            self.catalog,
        )
        if entries is not None:
            self.draft.step4 = replace(self.draft.step4, services=tuple(entries))

    # ---- step 4 services ----

    def add_custom_service(
        self,
        service_name: str = "",
        description: str = "",
        price_min: Any = None,
        price_max: Any = None,
        duration_minutes: int | None = pricing.DEFAULT_DURATION_MINUTES,
    ) -> int:
        """Append a custom service. Returns its position among custom services."""
        self._ensure_editable(services=True)
        entry = ServicePricingDraft(
            service_name=service_name,
            description=description,
            price_min=parse_price(price_min),
            price_max=parse_price(price_max),
            duration_minutes=duration_minutes,
            is_custom=True,
        )
        entries = pricing.add_custom_service(self.draft.step4.services, entry)
        self.draft.step4 = replace(self.draft.step4, services=tuple(entries))
        return len(pricing.custom_entries(entries)) - 1

    def remove_custom_service(self, index: int) -> None:
        self._ensure_editable(services=True)
        entries = pricing.remove_custom_service(self.draft.step4.services, index)
        self.draft.step4 = replace(self.draft.step4, services=tuple(entries))

    def update_custom_service(self, index: int, **changes: Any) -> None:
        self._ensure_editable(services=True)
        entries = pricing.update_custom_service(self.draft.step4.services, index, **changes)
        self.draft.step4 = replace(self.draft.step4, services=tuple(entries))

    def update_service_price(self, specialization_id: int, **changes: Any) -> None:
        self._ensure_editable(services=True)
        entries = pricing.update_specialization_service(self.draft.step4.services, specialization_id, **changes)
        self.draft.step4 = replace(self.draft.step4, services=tuple(entries))

    # ---- geocoding ----

    def locate_address(self) -> GeocodeResult | None:
        """Resolve the step 2 address into coordinates, marking the address invalid when not found."""
        self._ensure_editable()
        step2 = self.draft.step2

        missing: dict[str, str] = {}
        if not _filled(step2.street):
            missing["street"] = "Strada este obligatorie"
        if not _filled(step2.street_number):
            missing["street_number"] = "Numărul este obligatoriu"
        if not _filled(step2.city):
            missing["city"] = "Orașul este obligatoriu"
        if not _filled(step2.county):
            missing["county"] = "Județul este obligatoriu"
        if not _filled(step2.postal_code):
            missing["postal_code"] = "Codul poștal este obligatoriu"
        elif not validate_romanian_postal_code(step2.postal_code):
            missing["postal_code"] = "Format invalid. Folosiți 6 cifre (ex: 010101)"
        if missing:
            self.errors = {"step2": missing}
            return None

        if self._geocoder is None:
            self._logger.warning("Geocoding is disabled", extra={"wizard_id": self.wizard_id})
            return None

        address = build_address_for_geocoding(
            street=step2.street,
            street_number=step2.street_number,
            building=step2.building,
            apartment=step2.apartment,
            city=step2.city,
            county=step2.county,
            postal_code=step2.postal_code,
        )
        result = self._geocoder.geocode(address, self.cancellation)
        if result is None:
            step2_errors = dict(self.errors.get("step2", {}))
            step2_errors["street"] = "Adresa nu a putut fi găsită"
            step2_errors["city"] = "Verificați orașul și județul"
            self.errors = {"step2": step2_errors}
            self._logger.info("Address not found", extra={"wizard_id": self.wizard_id, "step": 2})
            return None

        self.draft.step2 = replace(step2, latitude=result.latitude, longitude=result.longitude)
        self.errors.pop("step2", None)
        return result

    # ---- submit and exit ----

    def submit(self) -> SubmitResult | None:
        """
        Validate the whole draft and send it to the backend.

        The calls run in order: create company, bulk-create services, upload
        the logo, upload each step 4 photo. Completed calls are remembered in
        draft.progress, so calling submit() again after a failure resumes from
        the failed call instead of creating a second company. Returns None when
        the draft has errors; the wizard then shows the first step with errors.
        On success the draft is discarded and only the result is kept.
        """
        self._ensure_open()
        if self.current_step != LAST_STEP:
            raise WizardStateError("Submit is only available on the last step")

        self._sync_pricing()
        errors = validate_company_form(self.draft, self._min_photos, self._max_photos)
        if errors:
            first = min(int(key.removeprefix("step")) for key in errors)
            self._enter(first)
            self.errors = {f"step{first}": errors[f"step{first}"]}
            return None
        self.errors = {}

        progress = self.draft.progress
        if progress.company_id is None:
            dto = CreateCompanyDTO.from_draft(self.draft)
            company = self._call("company", lambda: self._api.create_company(dto, self.cancellation))
            company_id = company.get("id")
            if company_id is None:
                raise SubmissionError("company", SUBMIT_FALLBACK_MESSAGE)
            progress.company_id = int(company_id)
            progress.company = company
            self._logger.info("Company profile created", extra={"wizard_id": self.wizard_id, "company_id": company_id})

        company_id = progress.company_id
        services = [CreateServiceDTO(**p) for p in pricing.to_create_service_payloads(self.draft.step4.services)]
        if services and not progress.services_created:
            self._call(
                "services",
                lambda: self._api.bulk_create_services(company_id, services, self.cancellation),
                company_id,
            )
            progress.services_created = True

        logo = self.draft.step1.logo_url
        if logo and not progress.logo_uploaded:
            progress.logo_url = self._call(
                "logo",
                lambda: self._api.upload_company_photo(company_id, logo, self.cancellation),
                company_id,
            )
            progress.logo_uploaded = True

        photos = list(self.draft.step4.photos)
        for photo in photos[progress.photos_uploaded:]:
            progress.photo_urls.append(
                self._call(
                    "photos",
                    lambda: self._api.upload_company_photo(company_id, photo, self.cancellation),
                    company_id,
                )
            )
        self._logger.info(
            "Photos uploaded",
            extra={"wizard_id": self.wizard_id, "company_id": company_id, "stage": "photos"},
        )

        self.finished = True
        self.picker.disabled = True
        self.completed_steps.add(LAST_STEP)
        self.result = SubmitResult(
            company_id=company_id,
            company=progress.company or {},
            services_created=progress.services_created,
            logo_url=progress.logo_url,
            photo_urls=tuple(progress.photo_urls),
        )
        self.picker.selection.clear()
        self.draft = CompanyDraft()
        self._logger.info(
            "Company registration submitted",
            extra={"wizard_id": self.wizard_id, "company_id": company_id, "status": "finished"},
        )
        return self.result

    def _call(self, stage: str, request: Callable[[], Any], company_id: int | None = None) -> Any:
        try:
            return request()
        except ApiError as e:
            message = SUBMIT_FALLBACK_MESSAGE if isinstance(e, NetworkError) else (e.message or SUBMIT_FALLBACK_MESSAGE)
            self._logger.error(
                "Submission failed",
                extra={"wizard_id": self.wizard_id, "stage": stage, "company_id": company_id, "reason": e.message},
            )
            raise SubmissionError(stage, message, company_id) from e

    def request_exit(self) -> ExitPrompt:
        return ExitPrompt(title=EXIT_PROMPT_TITLE, message=EXIT_PROMPT_MESSAGE)

    def confirm_exit(self) -> None:
        """Discard the draft and cancel anything still in flight."""
        self.cancellation.cancel("wizard discarded")
        self.discarded = True
        self.picker.disabled = True
        self.picker.selection.clear()
        self.draft = CompanyDraft()
        self.errors = {}
        self.completed_steps.clear()
        self._logger.info("Wizard discarded", extra={"wizard_id": self.wizard_id, "step": self.current_step})

    def _ensure_open(self) -> None:
        if self.discarded:
            raise WizardStateError("This registration was discarded")
        if self.finished:
            raise WizardStateError("This registration was already submitted")

    def _ensure_editable(self, services: bool = False) -> None:
        """Reject edits to anything the backend has already received."""
        self._ensure_open()
        progress = self.draft.progress
        if progress.company_id is None or (services and not progress.services_created):
            return
        raise WizardStateError(PROFILE_CREATED_MESSAGE)


def _filled(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _coerce(key: str, value: Any) -> Any:
    if key == "opening_hours":
        return opening_hours_from_payload(value)
    if key == "services":
        return tuple(v if isinstance(v, ServicePricingDraft) else ServicePricingDraft(**v) for v in value or ())
    if key in _TUPLE_FIELDS:
        return tuple(getattr(v, "value", v) for v in value or ())
    if key == "clinic_type":
        return getattr(value, "value", value)
    return value
