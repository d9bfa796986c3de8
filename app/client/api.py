"""Async HTTP client for the applications endpoints."""
import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Non-2xx response or transport failure; ``message`` is the server's ``detail`` when present."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ApplicationsApi:
    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise ApiError(str(exc) or exc.__class__.__name__) from exc
        if response.is_error:
            try:
                body = response.json()
            except ValueError:
                body = None
            message = (body.get("detail") if isinstance(body, dict) else None) or response.text or response.reason_phrase
            raise ApiError(str(message), status_code=response.status_code)
        if response.status_code == httpx.codes.NO_CONTENT:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError("Malformed response body", status_code=response.status_code) from exc

    async def create_application(self, job_id: int, cover_letter: str) -> dict:
        return await self._request("POST", f"/applications/{job_id}", json={"coverLetter": cover_letter})

    async def get_my_applications(self) -> list[dict]:
        return await self._request("GET", "/applications/my")

    async def get_job_applications(self, job_id: int) -> list[dict]:
        return await self._request("GET", f"/applications/job/{job_id}")

    async def update_application_status(self, application_id: int, status: str) -> dict:
        return await self._request("PUT", f"/applications/{application_id}/status", json={"status": status})

    async def get_unseen_count(self) -> int:
        data = await self._request("GET", "/applications/unseen-count")
        count = data.get("count") if isinstance(data, dict) else None
        if isinstance(count, bool) or not isinstance(count, int):
            raise ApiError("Malformed response body")
        return count

    async def get_unseen_applications(self) -> list[dict]:
        return await self._request("GET", "/applications/unseen")

    async def mark_application_seen(self, application_id: int) -> dict:
        return await self._request("PATCH", f"/applications/{application_id}/seen")

    # Employer notifications: new applicants
    async def get_employer_unseen_applications(self) -> list[dict]:
        return await self._request("GET", "/applications/employer/unseen")

    async def mark_employer_seen(self, application_id: int) -> dict:
        return await self._request("PATCH", f"/applications/{application_id}/employer-seen")
