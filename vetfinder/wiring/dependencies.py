from functools import lru_cache
from typing import Callable
import logging

from vetfinder.core.config import settings
from vetfinder.application.ports.company_api import CompanyApiPort
from vetfinder.application.ports.geocoder import GeocoderPort
from vetfinder.application.ports.session_store import SessionStorePort
from vetfinder.application.use_cases.wizard import CompanyWizard
from vetfinder.infrastructure.geocoding.mock_geocoder import MockGeocoder
from vetfinder.infrastructure.geocoding.nominatim import NominatimGeocoder
from vetfinder.infrastructure.store.draft_registry import WizardRegistry
from vetfinder.infrastructure.store.json_store import JsonSessionStore
from vetfinder.infrastructure.store.memory_store import MemorySessionStore
from vetfinder.infrastructure.vetfinder_api.api_client import VetFinderApiClient
from vetfinder.infrastructure.vetfinder_api.mock_api import MockCompanyApi


_session_store: MemorySessionStore | JsonSessionStore | None = None
_registry: WizardRegistry | None = None


def _is_local() -> bool:
    return settings.ENV.lower() in {"dev", "local"}


@lru_cache
def get_company_api() -> CompanyApiPort:
    logger = logging.getLogger(__name__)
    if not settings.VETFINDER_API_URL:
        if _is_local():
            logger.info("Using MockCompanyApi (VETFINDER_API_URL missing, ENV=dev/local)")
            return MockCompanyApi()
        raise ValueError("VETFINDER_API_URL is required outside dev/local.")
    return VetFinderApiClient()


@lru_cache
def get_geocoder() -> GeocoderPort | None:
    if not settings.GEOCODING_ENABLED:
        return None
    if settings.ENV.lower() == "local":
        return MockGeocoder()
    return NominatimGeocoder()


def get_session_store() -> SessionStorePort:
    global _session_store
    if _session_store is None:
        if _is_local():
            _session_store = JsonSessionStore(settings.SESSION_STORE_PATH)
        else:
            _session_store = MemorySessionStore()
    return _session_store


def get_wizard_registry() -> WizardRegistry:
    global _registry
    if _registry is None:
        _registry = WizardRegistry()
    return _registry


def new_wizard(wizard_id: str | None = None) -> CompanyWizard:
    return CompanyWizard(
        api=get_company_api(),
        geocoder=get_geocoder(),
        wizard_id=wizard_id,
        min_photos=settings.MIN_PHOTOS,
        max_photos=settings.MAX_PHOTOS,
    )


def get_wizard_factory() -> Callable[[], CompanyWizard]:
    return new_wizard
