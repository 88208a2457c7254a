"""Mapping of engine outcomes to HTTP error responses."""

from __future__ import annotations

from typing import Any

from fastapi import status
from fastapi.responses import JSONResponse

from accountguard.api.models import APIResponse
from accountguard.security import Outcome

LOCKED_OUT_MESSAGE = (
    "Your account has been locked due to multiple failed login attempts. "
    "Please wait or reset your password."
)

# Status code and error text for each failure outcome
OUTCOME_ERRORS: dict[Outcome, tuple[int, str]] = {
    Outcome.INVALID_CREDENTIALS: (status.HTTP_401_UNAUTHORIZED, "Invalid email or password"),
    Outcome.LOCKED_OUT: (status.HTTP_423_LOCKED, LOCKED_OUT_MESSAGE),
    Outcome.INVALID_OR_EXPIRED_TOKEN: (
        status.HTTP_400_BAD_REQUEST,
        "The password reset token is invalid or has expired",
    ),
    Outcome.CONFLICT: (status.HTTP_409_CONFLICT, "An account with this email already exists"),
    Outcome.NOT_FOUND: (status.HTTP_404_NOT_FOUND, "Account not found"),
    Outcome.SAME_SECRET: (
        status.HTTP_400_BAD_REQUEST,
        "New password must be different from your current password",
    ),
}


def error_response(
    status_code: int,
    error: str,
    data: Any = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build a JSONResponse wrapping an error in APIResponse."""
    return JSONResponse(
        status_code=status_code,
        content=APIResponse[Any](data=data, error=error).model_dump(mode="json"),
        headers=headers,
    )


def outcome_response(
    outcome: Outcome,
    error: str | None = None,
    data: Any = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build the error response for a failure outcome.

    Args:
        outcome: Failure outcome returned by the engine.
        error: Overrides the default error text for the outcome.
        data: Extra payload, e.g. remaining attempts.
        headers: Extra response headers, e.g. Retry-After.
    """
    status_code, default_error = OUTCOME_ERRORS[outcome]
    return error_response(status_code, error or default_error, data=data, headers=headers)
