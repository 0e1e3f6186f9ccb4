"""Error envelope schemas shared across API handlers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel

if TYPE_CHECKING:
    from changeset_errors.services.normalizer import NormalizedError


class ErrorDetail(BaseModel):
    """Single field-level validation issue detail."""

    field: str
    issue: str

    @classmethod
    def from_normalized(cls, error: NormalizedError) -> ErrorDetail:
        """Build a detail entry from a normalized `(path, message)` pair."""
        return cls(field=error.path, issue=error.message)


class ErrorObject(BaseModel):
    """Canonical error payload object."""

    code: str
    message: str
    details: list[ErrorDetail] | None = None


class ErrorResponse(BaseModel):
    """Top-level API error response envelope."""

    error: ErrorObject
