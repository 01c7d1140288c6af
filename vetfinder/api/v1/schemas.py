from dataclasses import asdict
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vetfinder.application.use_cases.wizard import CompanyWizard, ExitPrompt, SubmitResult
from vetfinder.domain import pricing
from vetfinder.domain.entities.company import ClinicType, Facility, PaymentMethod
from vetfinder.domain.geo import County
from vetfinder.domain.romanian import format_romanian_phone, format_romanian_postal_code
from vetfinder.domain.validation import is_image_source


class CountySchema(BaseModel):
    code: str
    name: str

    @staticmethod
    def from_entity(county: County) -> "CountySchema":
        return CountySchema(code=county.code, name=county.name)


class LocalitiesSchema(BaseModel):
    county: CountySchema
    localities: list[str]


class DayScheduleSchema(BaseModel):
    open: str = ""
    close: str = ""
    closed: bool = False


class Step1UpdateSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str | None = None
    email: str | None = None
    phone: str | None = None
    cui: str | None = None
    description: str | None = None
    logo_url: str | None = None

    @field_validator("logo_url")
    @classmethod
    def _logo_is_image_source(cls, value: str | None) -> str | None:
        if value and not is_image_source(value):
            raise ValueError("logo_url must be an http(s) URL or a data:image URI")
        return value


class Step2UpdateSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

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
    opening_hours: dict[str, DayScheduleSchema] | None = None


class Step3UpdateSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    clinic_type: ClinicType | None = None
    facilities: list[Facility] | None = None
    payment_methods: list[PaymentMethod] | None = None
    num_veterinarians: int | None = None
    years_in_business: int | None = None


class Step4UpdateSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    description: str | None = None
    photos: list[str] | None = None

    @field_validator("photos")
    @classmethod
    def _photos_are_image_sources(cls, value: list[str] | None) -> list[str] | None:
        for photo in value or []:
            if not is_image_source(photo):
                raise ValueError("photos must be http(s) URLs or data:image URIs")
        return value


STEP_UPDATE_SCHEMAS: dict[int, type[BaseModel]] = {
    1: Step1UpdateSchema,
    2: Step2UpdateSchema,
    3: Step3UpdateSchema,
    4: Step4UpdateSchema,
}


class CustomServiceSchema(BaseModel):
    service_name: str = ""
    description: str = ""
    price_min: float | str | None = None
    price_max: float | str | None = None
    duration_minutes: int | None = 30


class ServiceUpdateSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    service_name: str | None = None
    description: str | None = None
    price_min: float | str | None = None
    price_max: float | str | None = None
    duration_minutes: int | None = None


class ServiceEntrySchema(BaseModel):
    specialization_id: int | None = None
    category_id: int | None = None
    service_name: str
    description: str = ""
    price_min: float | None = None
    price_max: float | None = None
    duration_minutes: int | None = None
    is_custom: bool = False


class ServiceGroupSchema(BaseModel):
    """Step 4 services as shown on screen: one group per category, custom services last."""

    category_id: int | None = None
    category_name: str
    icon: str | None = None
    services: list[ServiceEntrySchema]

    @staticmethod
    def from_wizard(wizard: CompanyWizard) -> list["ServiceGroupSchema"]:
        entries = wizard.draft.step4.services
        by_spec = {e.specialization_id: e for e in entries if not e.is_custom}
        groups = [
            ServiceGroupSchema(
                category_id=group.category_id,
                category_name=group.category_name,
                icon=group.category_icon,
                services=[
                    ServiceEntrySchema(**asdict(by_spec[spec.id])) for spec in group.specializations if spec.id in by_spec
                ],
            )
            for group in pricing.group_by_category(wizard.draft.step3.selected_specializations, wizard.catalog)
        ]
        customs = [ServiceEntrySchema(**asdict(e)) for e in pricing.custom_entries(entries)]
        if customs:
            groups.append(ServiceGroupSchema(category_name="Custom services", services=customs))
        return groups


class SpecializationSchema(BaseModel):
    id: int
    name: str
    description: str | None = None
    suggested_duration_minutes: int
    selected: bool


class CategorySchema(BaseModel):
    id: int
    name: str
    description: str | None = None
    icon: str | None = None
    expanded: bool
    selected_count: int
    all_selected: bool
    partially_selected: bool
    specializations: list[SpecializationSchema]


class CatalogSchema(BaseModel):
    loaded: bool
    categories: list[CategorySchema]

    @staticmethod
    def from_wizard(wizard: CompanyWizard) -> "CatalogSchema":
        picker = wizard.picker
        selection = picker.selection
        expanded = set(picker.expanded_category_ids)
        categories = []
        for entry in picker.catalog.categories:
            categories.append(
                CategorySchema(
                    id=entry.id,
                    name=entry.name,
                    description=entry.category.description,
                    icon=entry.category.icon,
                    expanded=entry.id in expanded,
                    selected_count=selection.selected_count(entry),
                    all_selected=bool(entry.specializations) and selection.is_all_selected(entry),
                    partially_selected=selection.is_partially_selected(entry),
                    specializations=[
                        SpecializationSchema(
                            id=spec.id,
                            name=spec.name,
                            description=spec.description,
                            suggested_duration_minutes=spec.suggested_duration_minutes,
                            selected=selection.is_selected(spec.id),
                        )
                        for spec in entry.specializations
                    ],
                )
            )
        return CatalogSchema(loaded=picker.catalog.is_loaded, categories=categories)


class SubmitResultSchema(BaseModel):
    company_id: int
    company: dict[str, Any] = Field(default_factory=dict)
    services_created: bool
    logo_url: str | None = None
    photo_urls: list[str] = Field(default_factory=list)

    @staticmethod
    def from_result(result: SubmitResult) -> "SubmitResultSchema":
        return SubmitResultSchema(
            company_id=result.company_id,
            company=result.company,
            services_created=result.services_created,
            logo_url=result.logo_url,
            photo_urls=list(result.photo_urls),
        )


class WizardStateSchema(BaseModel):
    wizard_id: str
    session_id: str | None = None
    current_step: int
    completed_steps: list[int]
    errors: dict[str, dict[str, str]] = Field(default_factory=dict)
    draft: dict[str, Any]
    # phone and postal code as the form shows them ("0712 345 678", "400 114")
    display: dict[str, str] = Field(default_factory=dict)
    finished: bool
    result: SubmitResultSchema | None = None

    @staticmethod
    def from_wizard(wizard: CompanyWizard, session_id: str | None = None) -> "WizardStateSchema":
        draft = asdict(wizard.draft)
        phone = wizard.draft.step1.phone
        postal_code = wizard.draft.step2.postal_code
        return WizardStateSchema(
            wizard_id=wizard.wizard_id,
            session_id=session_id,
            current_step=wizard.current_step,
            completed_steps=sorted(wizard.completed_steps),
            errors=wizard.errors,
            draft=draft,
            display={
                "phone": format_romanian_phone(phone) if isinstance(phone, str) else "",
                "postal_code": format_romanian_postal_code(postal_code) if isinstance(postal_code, str) else "",
            },
            finished=wizard.finished,
            result=SubmitResultSchema.from_result(wizard.result) if wizard.result else None,
        )


class ExitPromptSchema(BaseModel):
    title: str
    message: str

    @staticmethod
    def from_prompt(prompt: ExitPrompt) -> "ExitPromptSchema":
        return ExitPromptSchema(title=prompt.title, message=prompt.message)


class LocateResponseSchema(BaseModel):
    found: bool
    latitude: float | None = None
    longitude: float | None = None
    errors: dict[str, dict[str, str]] = Field(default_factory=dict)
