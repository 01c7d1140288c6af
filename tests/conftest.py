from __future__ import annotations

import pytest

from vetfinder.application.use_cases.wizard import CompanyWizard
from vetfinder.domain.entities.service_catalog import ServiceCatalog
from vetfinder.infrastructure.geocoding.mock_geocoder import MockGeocoder
from vetfinder.infrastructure.vetfinder_api.mock_api import MockCompanyApi, seed_service_categories

LONG_DESCRIPTION = (
    "Clinică veterinară modernă din Cluj-Napoca, cu medici dedicați animalelor de companie."
)
PHOTOS = [f"https://cdn.example.com/clinic/{i}.jpg" for i in range(1, 5)]


@pytest.fixture
def catalog() -> ServiceCatalog:
    # 6 categories; specialization ids 1-6 are Routine Care, 7-10 Dental Care, 11-16 Diagnostics
    return ServiceCatalog.from_payload(seed_service_categories())


@pytest.fixture
def api() -> MockCompanyApi:
    return MockCompanyApi()


@pytest.fixture
def geocoder() -> MockGeocoder:
    return MockGeocoder()


@pytest.fixture
def wizard(api: MockCompanyApi, geocoder: MockGeocoder) -> CompanyWizard:
    return CompanyWizard(api=api, geocoder=geocoder, wizard_id="wiz-1", min_photos=4, max_photos=10)


def fill_step1(wizard: CompanyWizard) -> None:
    wizard.update_step(1, name="Clinica Rex", email="contact@rex.ro", phone="0712 345 678", cui="12345678")


def fill_step2(wizard: CompanyWizard) -> None:
    wizard.update_step(
        2,
        street="Strada Memorandumului",
        street_number="21",
        city="Cluj-Napoca",
        county="Cluj",
        postal_code="400114",
    )


def fill_step3(wizard: CompanyWizard) -> None:
    wizard.update_step(
        3,
        clinic_type="general_practice",
        facilities=["parking"],
        payment_methods=["cash"],
        num_veterinarians=2,
    )


@pytest.fixture
def wizard_on_step4(wizard: CompanyWizard) -> CompanyWizard:
    """Wizard with steps 1-3 completed and Vaccination (2) plus Dental Checkup (7) selected."""
    fill_step1(wizard)
    assert wizard.next()
    fill_step2(wizard)
    assert wizard.next()
    wizard.load_catalog()
    wizard.toggle_specialization(2)
    wizard.toggle_specialization(7)
    fill_step3(wizard)
    assert wizard.next()
    assert wizard.current_step == 4
    return wizard
