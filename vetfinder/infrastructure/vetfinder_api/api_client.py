from __future__ import annotations

import base64
import binascii
import json
import logging
import mimetypes
from typing import Any

import httpx

from vetfinder.application.dto.company import CreateCompanyDTO, CreateServiceDTO
from vetfinder.application.exceptions import ApiError, NetworkError
from vetfinder.application.ports.company_api import CompanyApiPort
from vetfinder.application.utils.cancellation import Cancellation, check
from vetfinder.core.config import settings


def extract_error_message(data: Any, default: str = "Request failed") -> str:
    """Pull a readable message out of the backend's various error shapes."""
    if not isinstance(data, dict):
        return default
    message = data.get("message")
    if isinstance(message, str) and message:
        return message
    error = data.get("error")
    if isinstance(error, dict) and isinstance(error.get("message"), str) and error["message"]:
        return error["message"]
    if isinstance(error, str) and error:
        return error
    if error:
        try:
            return json.dumps(error)
        except (TypeError, ValueError):
            return "An error occurred"
    return default


class VetFinderApiClient(CompanyApiPort):
    def __init__(
        self,
        base_url: str | None = None,
        access_token: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._base_url = (base_url or settings.VETFINDER_API_URL or "").rstrip("/")
        self._access_token = access_token if access_token is not None else settings.VETFINDER_API_TOKEN
        self._client = client or httpx.Client(timeout=timeout or settings.HTTP_TIMEOUT_SECONDS)
        self._logger = logging.getLogger(__name__)

        if not self._base_url:
            raise ValueError("VETFINDER_API_URL is required for the VetFinder API client")

    def _headers(self, json_body: bool = True) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if json_body:
            headers["Content-Type"] = "application/json"
        if self._access_token:
            headers["Authorization"] = f"Bearer {self._access_token}"
        return headers

    def _request(
        self,
        method: str,
        path: str,
        cancellation: Cancellation | None = None,
        json_body: Any = None,
        params: dict[str, Any] | None = None,
        files: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        check(cancellation)
        url = f"{self._base_url}{path}"
        try:
            resp = self._client.request(
                method,
                url,
                json=json_body,
                params=params,
                files=files,
                headers=self._headers(json_body=files is None),
            )
        except httpx.HTTPError as e:
            self._logger.error("API request failed", extra={"path": path, "reason": str(e)})
            raise NetworkError(str(e) or "Network request failed") from e

        try:
            data = resp.json()
        except ValueError:
            data = None

        if resp.status_code >= 400:
            message = extract_error_message(data, default=f"Request failed with status {resp.status_code}")
            self._logger.error(
                "API request rejected",
                extra={"path": path, "status": resp.status_code, "reason": message},
            )
            raise ApiError(message, status_code=resp.status_code)

        if not isinstance(data, dict):
            raise ApiError("Unexpected response from server", status_code=resp.status_code)
        return data

    def create_company(self, dto: CreateCompanyDTO, cancellation: Cancellation | None = None) -> dict[str, Any]:
        data = self._request("POST", "/companies", cancellation, json_body=dto.to_payload())
        company = data.get("data")
        if not data.get("success") or not isinstance(company, dict):
            raise ApiError(data.get("message") or "Company creation failed")
        self._logger.info("Company created", extra={"company_id": company.get("id")})
        return company

    def bulk_create_services(
        self,
        company_id: int,
        services: list[CreateServiceDTO],
        cancellation: Cancellation | None = None,
    ) -> list[dict[str, Any]]:
        payload = {"services": [s.model_dump(mode="json", exclude_none=True) for s in services]}
        data = self._request("POST", f"/companies/{company_id}/services/bulk", cancellation, json_body=payload)
        created = data.get("data")
        if not data.get("success") or not isinstance(created, list):
            raise ApiError(data.get("message") or "Bulk service creation failed")
        return created

    def upload_company_photo(self, company_id: int, photo: str, cancellation: Cancellation | None = None) -> str:
        path = f"/companies/{company_id}/photos"
        if photo.startswith(("http://", "https://")):
            data = self._request("POST", path, cancellation, json_body={"photo_url": photo})
        elif photo.startswith("data:image/"):
            data = self._request("POST", path, cancellation, files={"photo": _photo_file(photo)})
        else:
            self._logger.warning("Rejected photo source", extra={"company_id": company_id, "path": path})
            raise ApiError("Photos must be http(s) URLs or data:image URIs", status_code=400)

        stored = (data.get("data") or {}).get("photo_url") if isinstance(data.get("data"), dict) else None
        if not data.get("success") or not stored:
            raise ApiError(data.get("message") or "Photo upload failed")
        return str(stored)

    def get_service_categories(self, cancellation: Cancellation | None = None) -> list[dict[str, Any]]:
        try:
            data = self._request("GET", "/service-categories", cancellation, params={"with": "specializations"})
        except ApiError as e:
            self._logger.warning("Service categories unavailable", extra={"reason": e.message})
            return []
        items = data.get("data")
        return items if data.get("success") and isinstance(items, list) else []

    def get_service_templates(self, cancellation: Cancellation | None = None) -> list[dict[str, Any]]:
        try:
            data = self._request("GET", "/service-templates", cancellation)
        except ApiError as e:
            self._logger.warning("Service templates unavailable", extra={"reason": e.message})
            return []
        items = data.get("data")
        return items if data.get("success") and isinstance(items, list) else []


def _photo_file(photo: str) -> tuple[str, bytes, str]:
    """Multipart tuple for a data:image URI."""
    header, _, encoded = photo.partition(",")
    mime = header[5:].split(";")[0] or "image/jpeg"
    try:
        content = base64.b64decode(encoded, validate=False)
    except (binascii.Error, ValueError) as e:
        raise ApiError("Invalid photo data") from e
    extension = mimetypes.guess_extension(mime) or ".jpg"
    return f"photo{extension}", content, mime
