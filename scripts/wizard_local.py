#!/usr/bin/env python3
"""
Local walkthrough of the registration wizard (no HTTP, no backend).

Usage:
  python3 scripts/wizard_local.py

What it does:
- Fills the four steps with sample clinic data
- Picks a few specializations and prices them
- Submits against MockCompanyApi and prints each call it received
"""

from __future__ import annotations

from dotenv import load_dotenv

from vetfinder.application.exceptions import SubmissionError
from vetfinder.application.use_cases.wizard import CompanyWizard
from vetfinder.infrastructure.geocoding.mock_geocoder import MockGeocoder
from vetfinder.infrastructure.vetfinder_api.mock_api import MockCompanyApi


def _print_step(wizard: CompanyWizard) -> None:
    print(f"step={wizard.current_step} completed={sorted(wizard.completed_steps)}")
    for step, errors in wizard.errors.items():
        for field_name, message in errors.items():
            print(f"  {step}.{field_name}: {message}")


def main() -> None:
    load_dotenv()
    api = MockCompanyApi()
    wizard = CompanyWizard(api=api, geocoder=MockGeocoder())

    print("\nVetFinder onboarding walkthrough")
    print("-" * 60)

    wizard.update_step(1, name="Clinica Veterinară Rex", email="contact@rex.ro", phone="0712 345 678")
    wizard.next()
    _print_step(wizard)

    wizard.update_step(
        2,
        street="Strada Memorandumului",
        street_number="21",
        city="Cluj-Napoca",
        county="Cluj",
        postal_code="400114",
    )
    located = wizard.locate_address()
    print(f"coordinates: {located}")
    wizard.next()
    _print_step(wizard)

    wizard.load_catalog()
    for spec_id in (1, 2, 11):
        wizard.toggle_specialization(spec_id)
    wizard.update_step(
        3,
        clinic_type="general_practice",
        facilities=["surgery_room", "parking"],
        payment_methods=["cash", "credit_card"],
    )
    wizard.next()
    _print_step(wizard)

    for entry in wizard.draft.step4.services:
        wizard.update_service_price(entry.specialization_id, price_min=100, price_max=150)
    wizard.add_custom_service(service_name="Consultație la domiciliu", price_min="200", price_max="250")
    wizard.update_step(
        4,
        description="Clinică veterinară cu experiență în medicina animalelor de companie din Cluj-Napoca.",
        photos=[f"https://cdn.example.com/rex/{i}.jpg" for i in range(1, 5)],
    )

    try:
        result = wizard.submit()
    except SubmissionError as e:
        print(f"submit failed at {e.stage}: {e.message}")
        return

    _print_step(wizard)
    print(f"result: {result}")
    print(f"backend calls: {api.calls}")


if __name__ == "__main__":
    main()
