"""API error envelope and exception handler registration."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from collections.abc import Mapping
from collections.abc import Sequence
from typing import Any

from fastapi import FastAPI
from fastapi import Request
from fastapi import status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from changeset_errors.core.errors import APIError
from changeset_errors.core.errors import InvalidErrorNodeError
from changeset_errors.schemas.error import ErrorDetail
from changeset_errors.schemas.error import ErrorObject
from changeset_errors.schemas.error import ErrorResponse
from changeset_errors.services.normalizer import join_path
from changeset_errors.services.normalizer import normalize

logger = logging.getLogger(__name__)

_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}


def _build_error_response(
    *,
    status_code: int,
    code: str,
    message: str,
    details: Sequence[ErrorDetail] | None = None,
) -> JSONResponse:
    payload = ErrorResponse(error=ErrorObject(code=code, message=message, details=list(details) if details else None))
    return JSONResponse(status_code=status_code, content=payload.model_dump(exclude_none=True))


def _format_location(location: tuple[Any, ...] | list[Any] | Any) -> str:
    if not isinstance(location, (tuple, list)):
        return str(location)

    parts = list(location)
    if parts and parts[0] in _LOCATION_PREFIXES:
        parts = parts[1:]

    field: str | None = None
    for part in parts:
        field = join_path(field, part)
    if field:
        return field

    if not location:
        return "request"

    return str(location[0])


def validation_issues_to_errors(issues: Iterable[Mapping[str, Any]]) -> dict[str, list[str]]:
    """Fold framework validation issues into a `{field: [messages]}` error mapping.

    Fields keep the order in which they first appear; later issues for a field
    already seen are grouped under it.
    """
    errors: dict[str, list[str]] = {}
    for issue in issues:
        field = _format_location(issue.get("loc", ()))
        errors.setdefault(field, []).append(str(issue.get("msg", "Invalid value")))
    return errors


async def request_validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    """Normalize FastAPI validation errors to the shared error envelope."""

    errors = normalize(validation_issues_to_errors(exc.errors()))
    return _build_error_response(
        status_code=status.HTTP_400_BAD_REQUEST,
        code="validation_error",
        message="Request validation failed",
        details=[ErrorDetail.from_normalized(error) for error in errors],
    )


async def api_error_handler(_: Request, exc: APIError) -> JSONResponse:
    """Return explicit domain errors in the shared envelope."""

    return _build_error_response(
        status_code=exc.status_code,
        code=exc.code,
        message=exc.message,
        details=exc.details,
    )


async def invalid_error_node_handler(_: Request, exc: InvalidErrorNodeError) -> JSONResponse:
    """Report malformed error trees without leaking the offending value."""

    logger.error("Malformed error tree: %s", exc)
    return _build_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code="internal_error",
        message="Internal server error",
    )


def register_error_handlers(app: FastAPI) -> None:
    """Attach changeset error handlers to a FastAPI app instance."""

    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(InvalidErrorNodeError, invalid_error_node_handler)
