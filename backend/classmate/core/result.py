"""
Result values returned by the service layer instead of raising across the API boundary.
"""

import logging
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from fastapi.responses import JSONResponse

from classmate.core.exceptions import AppBaseError, CLIENT_SAFE_KINDS

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a value (ok) or an AppBaseError (failed)."""
    value: T | None = None
    error: AppBaseError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T | None = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: AppBaseError) -> "Result[T]":
        return cls(error=error)


def public_error_message(error: AppBaseError, fallback: str) -> str:
    """Message shown to the client: the error's own for safe kinds, else the generic fallback."""
    if error.kind in CLIENT_SAFE_KINDS:
        return error.message
    return fallback


def result_to_response(
    result: Result,
    fallback_error: str,
    payload: dict[str, Any] | None = None,
    success_status: int = 200,
) -> JSONResponse:
    """Map a service Result to the uniform `{success, data?, classId?, error?}` body.

    Failures are logged with full detail; the client only gets a public message.
    """
    if result.ok:
        body: dict[str, Any] = {"success": True}
        if payload:
            body.update(payload)
        return JSONResponse(status_code=success_status, content=body)

    error = result.error
    logger.error(f"❌ {fallback_error} [{error.kind.value}]: {error}")
    return JSONResponse(
        status_code=error.status_code,
        content={"success": False, "error": public_error_message(error, fallback_error)},
    )
