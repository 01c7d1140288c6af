import logging
from typing import Any, Callable

from fastapi import APIRouter, Body, Depends, Header, HTTPException, Query
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from vetfinder.api.v1.schemas import (
    STEP_UPDATE_SCHEMAS,
    CatalogSchema,
    CustomServiceSchema,
    ExitPromptSchema,
    LocateResponseSchema,
    ServiceGroupSchema,
    ServiceUpdateSchema,
    WizardStateSchema,
)
from vetfinder.application.exceptions import RequestCancelled, SubmissionError, WizardStateError
from vetfinder.application.ports.session_store import SessionStorePort
from vetfinder.application.use_cases.wizard import CompanyWizard
from vetfinder.core.config import settings
from vetfinder.infrastructure.store.draft_registry import WizardRegistry
from vetfinder.wiring.dependencies import get_session_store, get_wizard_factory, get_wizard_registry

router = APIRouter(prefix="/wizards")
logger = logging.getLogger(__name__)


def get_wizard(
    wizard_id: str,
    registry: WizardRegistry = Depends(get_wizard_registry),
) -> CompanyWizard:
    wizard = registry.get(wizard_id)
    if wizard is None:
        raise HTTPException(status_code=404, detail="Wizard not found")
    return wizard


def _state(wizard: CompanyWizard) -> WizardStateSchema:
    return WizardStateSchema.from_wizard(wizard)


def _unprocessable(wizard: CompanyWizard) -> HTTPException:
    return HTTPException(status_code=422, detail={"current_step": wizard.current_step, "errors": wizard.errors})


def _conflict(e: Exception) -> HTTPException:
    return HTTPException(status_code=409, detail=str(e))


@router.post("", response_model=WizardStateSchema, status_code=201)
def create_wizard(
    x_session_id: str | None = Header(None),
    registry: WizardRegistry = Depends(get_wizard_registry),
    sessions: SessionStorePort = Depends(get_session_store),
    factory: Callable[[], CompanyWizard] = Depends(get_wizard_factory),
):
    expired = sessions.purge_expired(settings.SESSION_MAX_AGE_SECONDS)
    idle = registry.purge_expired(settings.SESSION_MAX_AGE_SECONDS)
    if expired or idle:
        logger.info("Purged idle registrations", extra={"reason": f"{len(expired)} sessions, {len(idle)} wizards"})

    session = sessions.get_or_create(x_session_id)
    if session.conversation_id and registry.get(session.conversation_id) is not None:
        # One open registration per session; reuse it.
        wizard = registry.get(session.conversation_id)
    else:
        wizard = registry.add(factory())
        sessions.bind(session.session_id, wizard.wizard_id)
        logger.info("Wizard started", extra={"wizard_id": wizard.wizard_id})
    return WizardStateSchema.from_wizard(wizard, session_id=session.session_id)


@router.get("/{wizard_id}", response_model=WizardStateSchema)
def get_state(wizard: CompanyWizard = Depends(get_wizard)):
    return _state(wizard)


@router.patch("/{wizard_id}/steps/{step}", response_model=WizardStateSchema)
def update_step(
    step: int,
    body: dict[str, Any] = Body(...),
    wizard: CompanyWizard = Depends(get_wizard),
):
    schema = STEP_UPDATE_SCHEMAS.get(step)
    if schema is None:
        raise HTTPException(status_code=404, detail=f"Unknown step {step}")
    try:
        partial = schema.model_validate(body).model_dump(exclude_unset=True)
    except ValidationError as e:
        raise RequestValidationError(e.errors())
    try:
        wizard.update_step(step, **partial)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except WizardStateError as e:
        raise _conflict(e)
    return _state(wizard)


@router.post("/{wizard_id}/next", response_model=WizardStateSchema)
def next_step(wizard: CompanyWizard = Depends(get_wizard)):
    try:
        advanced = wizard.next()
    except WizardStateError as e:
        raise _conflict(e)
    if not advanced:
        raise _unprocessable(wizard)
    return _state(wizard)


@router.post("/{wizard_id}/back", response_model=WizardStateSchema)
def previous_step(wizard: CompanyWizard = Depends(get_wizard)):
    try:
        wizard.back()
    except WizardStateError as e:
        raise _conflict(e)
    return _state(wizard)


@router.post("/{wizard_id}/goto/{step}", response_model=WizardStateSchema)
def go_to_step(step: int, wizard: CompanyWizard = Depends(get_wizard)):
    try:
        moved = wizard.go_to_step(step)
    except WizardStateError as e:
        raise _conflict(e)
    if not moved:
        raise _unprocessable(wizard)
    return _state(wizard)


@router.post("/{wizard_id}/locate", response_model=LocateResponseSchema)
def locate_address(wizard: CompanyWizard = Depends(get_wizard)):
    try:
        result = wizard.locate_address()
    except (WizardStateError, RequestCancelled) as e:
        raise _conflict(e)
    if result is None:
        return LocateResponseSchema(found=False, errors=wizard.errors)
    return LocateResponseSchema(found=True, latitude=result.latitude, longitude=result.longitude)


@router.post("/{wizard_id}/submit", response_model=WizardStateSchema)
def submit(wizard: CompanyWizard = Depends(get_wizard)):
    try:
        result = wizard.submit()
    except (WizardStateError, RequestCancelled) as e:
        raise _conflict(e)
    except SubmissionError as e:
        raise HTTPException(
            status_code=502,
            detail={"stage": e.stage, "message": e.message, "company_id": e.company_id},
        )
    if result is None:
        raise _unprocessable(wizard)
    return _state(wizard)


@router.delete("/{wizard_id}")
def exit_wizard(
    confirm: bool = Query(False),
    wizard: CompanyWizard = Depends(get_wizard),
    registry: WizardRegistry = Depends(get_wizard_registry),
):
    if not confirm:
        prompt = ExitPromptSchema.from_prompt(wizard.request_exit())
        raise HTTPException(status_code=409, detail=prompt.model_dump())
    wizard.confirm_exit()
    registry.remove(wizard.wizard_id)
    return {"status": "discarded", "wizard_id": wizard.wizard_id}


# ---- categories and specializations ----


@router.get("/{wizard_id}/catalog", response_model=CatalogSchema)
def get_catalog(wizard: CompanyWizard = Depends(get_wizard)):
    return CatalogSchema.from_wizard(wizard)


@router.post("/{wizard_id}/catalog", response_model=CatalogSchema)
def load_catalog(wizard: CompanyWizard = Depends(get_wizard)):
    try:
        wizard.load_catalog()
    except (WizardStateError, RequestCancelled) as e:
        raise _conflict(e)
    return CatalogSchema.from_wizard(wizard)


@router.post("/{wizard_id}/selection/specializations/{spec_id}", response_model=CatalogSchema)
def toggle_specialization(spec_id: int, wizard: CompanyWizard = Depends(get_wizard)):
    try:
        changed = wizard.toggle_specialization(spec_id)
    except WizardStateError as e:
        raise _conflict(e)
    if not changed:
        raise HTTPException(status_code=404, detail=f"Unknown specialization {spec_id}")
    return CatalogSchema.from_wizard(wizard)


@router.post("/{wizard_id}/selection/categories/{category_id}", response_model=CatalogSchema)
def toggle_all_in_category(category_id: int, wizard: CompanyWizard = Depends(get_wizard)):
    try:
        changed = wizard.toggle_all_in_category(category_id)
    except WizardStateError as e:
        raise _conflict(e)
    if not changed:
        raise HTTPException(status_code=404, detail=f"Unknown category {category_id}")
    return CatalogSchema.from_wizard(wizard)


@router.post("/{wizard_id}/expansion/{category_id}", response_model=CatalogSchema)
def toggle_category_expansion(category_id: int, wizard: CompanyWizard = Depends(get_wizard)):
    wizard.toggle_category_expansion(category_id)
    return CatalogSchema.from_wizard(wizard)


# ---- step 4 services ----


@router.get("/{wizard_id}/services", response_model=list[ServiceGroupSchema])
def list_services(wizard: CompanyWizard = Depends(get_wizard)):
    return ServiceGroupSchema.from_wizard(wizard)


@router.post("/{wizard_id}/services/custom", response_model=WizardStateSchema, status_code=201)
def add_custom_service(req: CustomServiceSchema, wizard: CompanyWizard = Depends(get_wizard)):
    try:
        wizard.add_custom_service(**req.model_dump())
    except WizardStateError as e:
        raise _conflict(e)
    return _state(wizard)


@router.patch("/{wizard_id}/services/custom/{index}", response_model=WizardStateSchema)
def update_custom_service(index: int, req: ServiceUpdateSchema, wizard: CompanyWizard = Depends(get_wizard)):
    try:
        wizard.update_custom_service(index, **req.model_dump(exclude_unset=True))
    except IndexError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except WizardStateError as e:
        raise _conflict(e)
    return _state(wizard)


@router.delete("/{wizard_id}/services/custom/{index}", response_model=WizardStateSchema)
def remove_custom_service(index: int, wizard: CompanyWizard = Depends(get_wizard)):
    try:
        wizard.remove_custom_service(index)
    except IndexError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except WizardStateError as e:
        raise _conflict(e)
    return _state(wizard)


@router.patch("/{wizard_id}/services/{spec_id}", response_model=WizardStateSchema)
def update_service_price(spec_id: int, req: ServiceUpdateSchema, wizard: CompanyWizard = Depends(get_wizard)):
    try:
        wizard.update_service_price(spec_id, **req.model_dump(exclude_unset=True))
    except KeyError:
        raise HTTPException(status_code=404, detail=f"No service for specialization {spec_id}")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except WizardStateError as e:
        raise _conflict(e)
    return _state(wizard)
