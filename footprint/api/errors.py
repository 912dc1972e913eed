"""Validation error codes -> HTTP status."""

from collections.abc import Sequence
from typing import Any, Protocol

from fastapi import HTTPException


class _CodedError(Protocol):
    code: str
    message: str
    field: str | None


STATUS_BY_CODE: dict[str, int] = {
    # Not found
    "payment_not_found": 404,
    "page_not_found": 404,
    "tile_not_found": 404,
    # Payment required
    "payment_incomplete": 402,
    # Conflict
    "slug_mismatch": 409,
    "slug_taken": 409,
    # Validation
    "invalid_slug": 422,
    "too_many_tiles": 422,
    "invalid_input": 422,
    "invalid_signature": 400,
    # Retryable server-side failures
    "allocation_failure": 503,
    "store_write_failure": 503,
    "payment_unavailable": 503,
}


def error_detail(errors: Sequence[_CodedError]) -> list[dict[str, Any]]:
    return [{"code": err.code, "message": err.message, "field": err.field} for err in errors]


def http_error(errors: Sequence[_CodedError]) -> HTTPException:
    """HTTPException for a failed component result; status from the first error."""
    status_code = STATUS_BY_CODE.get(errors[0].code, 400) if errors else 400
    return HTTPException(status_code=status_code, detail=error_detail(errors))
