"""Error taxonomy for the intake API.

Every error carries a human-readable ``message``; validation errors also name
the offending ``field`` (camelCase, as the client sent it). ``main.py`` maps
these onto HTTP responses.
"""
from __future__ import annotations

from typing import Any, Optional, Sequence

# Leading loc segments FastAPI adds to request validation errors
_REQUEST_LOCATIONS = {"body", "query", "path", "header", "cookie"}


class LoanIntakeError(Exception):
    """Base class for all errors raised by the intake flow."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message}


class ValidationError(LoanIntakeError):
    """Client-correctable input error, reported against a single field."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        if self.field:
            out["field"] = self.field
        return out

    @classmethod
    def from_errors(cls, errors: Sequence[dict[str, Any]]) -> "ValidationError":
        """Build from a pydantic/FastAPI error list, keeping only the first failure."""
        if not errors:
            return cls("Invalid request")
        first = errors[0]
        loc = list(first.get("loc", ()))
        if loc and loc[0] in _REQUEST_LOCATIONS:
            loc = loc[1:]
        # A leading int is a character offset (malformed JSON) or list index, not a field
        if not loc or not isinstance(loc[0], str):
            return cls(first.get("msg") or "Invalid value")
        return cls(first.get("msg") or "Invalid value", ".".join(str(p) for p in loc))


class UploadError(LoanIntakeError):
    """The uploaded file was missing or unacceptable."""


class NoFileProvided(UploadError):
    def __init__(self, message: str = "No file uploaded"):
        super().__init__(message)


class PayloadTooLarge(UploadError):
    def __init__(self, max_size_bytes: int):
        super().__init__(f"File exceeds the maximum size of {max_size_bytes // (1024 * 1024)}MB")
        self.max_size_bytes = max_size_bytes


class InternalError(LoanIntakeError):
    """Unexpected storage failure; the message is deliberately opaque."""

    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
