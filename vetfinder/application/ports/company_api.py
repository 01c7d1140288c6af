from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from vetfinder.application.dto.company import CreateCompanyDTO, CreateServiceDTO
from vetfinder.application.utils.cancellation import Cancellation


class CompanyApiPort(ABC):
    @abstractmethod
    def create_company(self, dto: CreateCompanyDTO, cancellation: Cancellation | None = None) -> dict[str, Any]:
        """Create the company profile. Returns the created company (with its id)."""
        raise NotImplementedError

    @abstractmethod
    def bulk_create_services(
        self,
        company_id: int,
        services: list[CreateServiceDTO],
        cancellation: Cancellation | None = None,
    ) -> list[dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    def upload_company_photo(self, company_id: int, photo: str, cancellation: Cancellation | None = None) -> str:
        """Upload a photo (local path, data: URI or remote URL). Returns the stored photo URL."""
        raise NotImplementedError

    @abstractmethod
    def get_service_categories(self, cancellation: Cancellation | None = None) -> list[dict[str, Any]]:
        """Categories with their specializations; empty list when unavailable."""
        raise NotImplementedError

    @abstractmethod
    def get_service_templates(self, cancellation: Cancellation | None = None) -> list[dict[str, Any]]:
        raise NotImplementedError
