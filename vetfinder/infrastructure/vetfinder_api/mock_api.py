from __future__ import annotations

import logging
from typing import Any

from vetfinder.application.dto.company import CreateCompanyDTO, CreateServiceDTO
from vetfinder.application.exceptions import ApiError
from vetfinder.application.ports.company_api import CompanyApiPort
from vetfinder.application.utils.cancellation import Cancellation, check

# Seed data of the service_categories / category_specializations tables.
_SEED_CATEGORIES: list[tuple[str, str, str, list[tuple[str, str, int]]]] = [
    ("Routine Care", "Regular checkups and preventive care", "medical", [
        ("General Checkup", "Complete physical examination", 30),
        ("Vaccination", "Vaccine administration", 15),
        ("Flea/Tick Prevention", "Monthly prevention treatment", 10),
        ("Deworming", "Parasite treatment", 10),
        ("Nail Trimming", "Nail care service", 15),
        ("Microchipping", "Permanent identification", 20),
    ]),
    ("Dental Care", "Oral health and dental procedures", "fitness", [
        ("Dental Checkup", "Oral health examination", 30),
        ("Teeth Cleaning", "Professional dental cleaning", 90),
        ("Tooth Extraction", "Surgical tooth removal", 120),
        ("Dental X-Ray", "Dental radiographs", 30),
    ]),
    ("Diagnostic Services", "Lab work, imaging, and diagnostics", "flask", [
        ("Blood Test (Basic)", "Complete blood count", 30),
        ("Blood Test (Comprehensive)", "Full panel analysis", 30),
        ("X-Ray", "Radiographic imaging", 45),
        ("Ultrasound", "Ultrasound imaging", 60),
        ("Urinalysis", "Urine analysis", 20),
        ("Fecal Exam", "Stool sample analysis", 15),
    ]),
    ("Emergency Care", "Urgent and emergency services", "warning", [
        ("Emergency Consultation", "Immediate assessment", 30),
        ("Emergency Surgery", "Urgent surgical intervention", 180),
        ("Overnight Hospitalization", "Inpatient monitoring", 1440),
        ("Wound Treatment", "Emergency wound care", 45),
        ("Poison Treatment", "Toxin exposure treatment", 120),
    ]),
    ("Surgical Procedures", "Surgical operations and interventions", "cut", [
        ("Spay (Cat)", "Feline spay surgery", 60),
        ("Spay (Dog)", "Canine spay surgery", 90),
        ("Neuter (Cat)", "Feline neuter surgery", 45),
        ("Neuter (Dog)", "Canine neuter surgery", 60),
        ("Soft Tissue Surgery", "Non-orthopedic procedures", 120),
        ("Orthopedic Surgery", "Bone and joint surgery", 180),
        ("Tumor Removal", "Mass excision surgery", 120),
    ]),
    ("Grooming", "Pet grooming and hygiene services", "sparkles", [
        ("Bath & Brush", "Basic bathing service", 60),
        ("Full Grooming", "Complete grooming package", 120),
        ("Haircut/Trim", "Coat trimming and styling", 60),
        ("Ear Cleaning", "Ear care service", 15),
        ("Anal Gland Expression", "Gland expression service", 15),
    ]),
]


def seed_service_categories() -> list[dict[str, Any]]:
    """Categories with specializations in the GET /service-categories?with=specializations shape."""
    items: list[dict[str, Any]] = []
    spec_id = 0
    for category_id, (name, description, icon, specs) in enumerate(_SEED_CATEGORIES, start=1):
        specializations = []
        for order, (spec_name, spec_description, duration) in enumerate(specs, start=1):
            spec_id += 1
            specializations.append(
                {
                    "id": spec_id,
                    "category_id": category_id,
                    "name": spec_name,
                    "description": spec_description,
                    "suggested_duration_minutes": duration,
                    "display_order": order,
                }
            )
        items.append(
            {
                "id": category_id,
                "name": name,
                "description": description,
                "icon": icon,
                "display_order": category_id,
                "specializations": specializations,
            }
        )
    return items


class MockCompanyApi(CompanyApiPort):
    """In-process stand-in for the VetFinder backend; records every call."""

    def __init__(self, categories: list[dict[str, Any]] | None = None) -> None:
        self._categories = seed_service_categories() if categories is None else categories
        self.companies: dict[int, dict[str, Any]] = {}
        self.services: dict[int, list[dict[str, Any]]] = {}
        self.photos: dict[int, list[str]] = {}
        # company id -> photo sources in upload order (logo first)
        self.uploaded: dict[int, list[str]] = {}
        self.calls: list[str] = []
        # "company", "services" or "upload" -> message; the next such call raises ApiError once
        self.fail_next: dict[str, str] = {}
        self._logger = logging.getLogger(__name__)

    def _maybe_fail(self, stage: str) -> None:
        message = self.fail_next.pop(stage, None)
        if message is not None:
            raise ApiError(message, status_code=400)

    def create_company(self, dto: CreateCompanyDTO, cancellation: Cancellation | None = None) -> dict[str, Any]:
        check(cancellation)
        self.calls.append("create_company")
        self._maybe_fail("company")
        company_id = len(self.companies) + 1
        company = {"id": company_id, **dto.to_payload()}
        self.companies[company_id] = company
        self._logger.info("Mock company created", extra={"company_id": company_id})
        return dict(company)

    def bulk_create_services(
        self,
        company_id: int,
        services: list[CreateServiceDTO],
        cancellation: Cancellation | None = None,
    ) -> list[dict[str, Any]]:
        check(cancellation)
        self.calls.append("bulk_create_services")
        self._maybe_fail("services")
        if company_id not in self.companies:
            raise ApiError("Company not found", status_code=404)
        stored = self.services.setdefault(company_id, [])
        created = []
        for service in services:
            item = {"id": len(stored) + 1, "company_id": company_id, **service.model_dump(mode="json")}
            stored.append(item)
            created.append(item)
        return created

    def upload_company_photo(self, company_id: int, photo: str, cancellation: Cancellation | None = None) -> str:
        check(cancellation)
        self.calls.append("upload_company_photo")
        self._maybe_fail("upload")
        if company_id not in self.companies:
            raise ApiError("Company not found", status_code=404)
        photos = self.photos.setdefault(company_id, [])
        url = f"https://cdn.vetfinder.local/companies/{company_id}/photo-{len(photos) + 1}.jpg"
        photos.append(url)
        self.uploaded.setdefault(company_id, []).append(photo)
        return url

    def get_service_categories(self, cancellation: Cancellation | None = None) -> list[dict[str, Any]]:
        check(cancellation)
        self.calls.append("get_service_categories")
        return [dict(item) for item in self._categories]

    def get_service_templates(self, cancellation: Cancellation | None = None) -> list[dict[str, Any]]:
        check(cancellation)
        self.calls.append("get_service_templates")
        templates = []
        for category in self._categories:
            for spec in category.get("specializations") or []:
                templates.append(
                    {
                        "category": category["name"],
                        "service_name": spec["name"],
                        "description": spec.get("description"),
                        "duration_minutes": spec.get("suggested_duration_minutes"),
                    }
                )
        return templates
