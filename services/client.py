"""
Async HTTP client for the intake API, used by the application wizard to
upload the identity document and submit the application.
"""
from __future__ import annotations

from typing import Any, Optional, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from schemas.application import LoanApplicationResponse, UploadResponse

ModelT = TypeVar("ModelT", bound=BaseModel)


class LoanApiError(Exception):
    """Non-2xx response, transport failure or unreadable body from the intake API."""

    def __init__(self, message: str, field: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.field = field
        self.status_code = status_code


def _error_from_response(response: httpx.Response, fallback: str) -> LoanApiError:
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    return LoanApiError(body.get("message") or fallback, body.get("field"), response.status_code)


def _parse_body(response: httpx.Response, model: type[ModelT], fallback: str) -> ModelT:
    try:
        return model.model_validate(response.json())
    except (ValueError, PydanticValidationError) as e:
        raise LoanApiError(fallback, status_code=response.status_code) from e


class LoanApiClient:
    def __init__(self, base_url: str = "", http: Optional[httpx.AsyncClient] = None):
        self._http = http or httpx.AsyncClient(base_url=base_url)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "LoanApiClient":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    async def upload_file(
        self,
        filename: str,
        content: bytes,
        content_type: str = "application/octet-stream",
    ) -> UploadResponse:
        try:
            res = await self._http.post("/api/upload", files={"file": (filename, content, content_type)})
        except httpx.HTTPError as e:
            raise LoanApiError("Failed to upload file") from e
        if res.is_error:
            raise _error_from_response(res, "Failed to upload file")
        return _parse_body(res, UploadResponse, "Failed to upload file")

    async def submit_application(self, payload: dict[str, Any]) -> LoanApplicationResponse:
        try:
            res = await self._http.post("/api/loans", json=payload)
        except httpx.HTTPError as e:
            raise LoanApiError("Failed to submit application") from e
        if res.is_error:
            raise _error_from_response(res, "Failed to submit application")
        return _parse_body(res, LoanApplicationResponse, "Failed to submit application")
