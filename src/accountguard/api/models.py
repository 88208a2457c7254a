"""Pydantic models for REST API."""

import re
from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

T = TypeVar("T")

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"
_UPPER = re.compile(r"[A-Z]")
_LOWER = re.compile(r"[a-z]")
_DIGIT = re.compile(r"\d")


def _check_password_strength(value: str) -> str:
    if not (_UPPER.search(value) and _LOWER.search(value) and _DIGIT.search(value)):
        raise ValueError(
            "Password must contain at least one uppercase letter, one lowercase letter "
            "and one number"
        )
    return value


class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    data: T | None = None
    error: str | None = None
    details: list[dict[str, Any]] | None = None


# Account models


class AccountResponse(BaseModel):
    """Response model for an account (never includes credentials)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    display_name: str | None
    created_at: datetime
    failed_attempt_count: int
    last_attempt_at: datetime | None
    locked: bool


def account_to_response(account: Any) -> AccountResponse:
    """Convert an AccountView to AccountResponse."""
    return AccountResponse.model_validate(account)


class AuthenticatedResponse(BaseModel):
    """Response model for register/login: the account plus a bearer token."""

    message: str
    account: AccountResponse
    token: str


class MessageResponse(BaseModel):
    """Response model for operations that only confirm."""

    message: str


# Auth request models


class RegisterRequest(BaseModel):
    """Request model for registering an account."""

    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=8, max_length=128)
    display_name: str = Field(..., min_length=2, max_length=50)

    @field_validator("password")
    @classmethod
    def check_password_strength(cls, value: str) -> str:
        return _check_password_strength(value)


class LoginRequest(BaseModel):
    """Request model for logging in."""

    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=1, max_length=128)


class ResetRequestBody(BaseModel):
    """Request model for asking for a password-reset token."""

    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)


class ResetRequestResponse(BaseModel):
    """Response model for a reset request.

    The token fields are only populated when the deployment exposes tokens
    in responses and a token was issued.
    """

    message: str
    reset_token: str | None = None
    expires_at: datetime | None = None


class ResetCompleteRequest(BaseModel):
    """Request model for completing a password reset."""

    email: str = Field(..., max_length=255, pattern=EMAIL_PATTERN)
    token: str = Field(..., min_length=1, max_length=255)
    new_password: str = Field(..., min_length=8, max_length=128)

    @field_validator("new_password")
    @classmethod
    def check_password_strength(cls, value: str) -> str:
        return _check_password_strength(value)


# Profile request models


class ProfileUpdate(BaseModel):
    """Request model for updating a profile (partial update)."""

    display_name: str | None = Field(default=None, min_length=2, max_length=50)
    email: str | None = Field(default=None, max_length=255, pattern=EMAIL_PATTERN)


class ChangePasswordRequest(BaseModel):
    """Request model for changing the password of the current account."""

    current_password: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., min_length=8, max_length=128)

    @field_validator("new_password")
    @classmethod
    def check_password_strength(cls, value: str) -> str:
        return _check_password_strength(value)
