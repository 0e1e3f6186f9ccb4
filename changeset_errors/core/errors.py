"""Exceptions raised by changeset error processing and its API envelope."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING
from typing import Any

from fastapi import status

from changeset_errors.schemas.error import ErrorDetail

if TYPE_CHECKING:
    from changeset_errors.services.normalizer import NormalizedError


class ChangesetErrorsError(Exception):
    """Base error for this package."""


class InvalidErrorNodeError(ChangesetErrorsError, TypeError):
    """Raised when an error tree holds a value that is not a message, mapping or list."""

    def __init__(self, node: Any, path: str | None = None) -> None:
        location = f"at `{path}`" if path else "at the root"
        super().__init__(f"Invalid error node {location}: unsupported type {type(node).__name__}")
        self.node = node
        self.path = path


class InvalidRuleError(ChangesetErrorsError, TypeError):
    """Raised when a rule cannot be coerced into a test/on_match pair."""


class APIError(ChangesetErrorsError):
    """Base application exception for explicit API error responses."""

    def __init__(
        self,
        *,
        status_code: int,
        code: str,
        message: str,
        details: Sequence[ErrorDetail] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = list(details) if details else None


class UnexpectedErrorsError(APIError):
    """Raised when normalized errors were left unclaimed by every rule."""

    def __init__(
        self,
        errors: Sequence[NormalizedError],
        *,
        message: str = "Unexpected validation errors",
    ) -> None:
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            code="unexpected_errors",
            message=message,
            details=[ErrorDetail.from_normalized(error) for error in errors],
        )
        self.errors = list(errors)
