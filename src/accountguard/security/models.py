"""Data models for the Security module."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime  # noqa: TC003 - used at runtime by dataclasses
from enum import StrEnum

from accountguard.account_store import AccountView  # noqa: TC001


class Outcome(StrEnum):
    """Result kinds returned by AccountSecurityEngine operations."""

    AUTHENTICATED = "authenticated"
    INVALID_CREDENTIALS = "invalid_credentials"
    LOCKED_OUT = "locked_out"
    RESET_ISSUED = "reset_issued"
    RESET_COMPLETED = "reset_completed"
    INVALID_OR_EXPIRED_TOKEN = "invalid_or_expired_token"
    CREATED = "created"
    OK = "ok"
    UPDATED = "updated"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    SAME_SECRET = "same_secret"


class AccountState(StrEnum):
    """Lock state of an account."""

    ACTIVE = "active"
    LOCKED = "locked"


@dataclass
class LoginResult:
    """Outcome of a login attempt.

    Attributes:
        outcome: AUTHENTICATED, INVALID_CREDENTIALS or LOCKED_OUT.
        account: The authenticated account, only on success.
        remaining_attempts: Failures left before lockout, on INVALID_CREDENTIALS.
        retry_after_seconds: Seconds until the lock lifts, on LOCKED_OUT.
    """

    outcome: Outcome
    account: AccountView | None = None
    remaining_attempts: int | None = None
    retry_after_seconds: int | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.AUTHENTICATED


@dataclass
class ResetRequestResult:
    """Outcome of a reset request.

    The message is identical whether or not the email is registered. Token
    and expiry are only set when a token was actually issued.
    """

    message: str
    token: str | None = None
    expires_at: datetime | None = None

    @property
    def outcome(self) -> Outcome:
        return Outcome.RESET_ISSUED


@dataclass
class ResetResult:
    """Outcome of completing a password reset."""

    outcome: Outcome
    account: AccountView | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.RESET_COMPLETED


@dataclass
class AccountResult:
    """Outcome of registration, profile and credential operations."""

    outcome: Outcome
    account: AccountView | None = None

    @property
    def ok(self) -> bool:
        return self.outcome in (Outcome.CREATED, Outcome.OK, Outcome.UPDATED)
