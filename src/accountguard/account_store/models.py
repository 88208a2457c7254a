"""SQLAlchemy models for Account Store."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, matching what SQLite stores."""
    return datetime.now(UTC).replace(tzinfo=None)


def normalize_email(email: str) -> str:
    """Canonical form of an email address used for every lookup.

    Emails are matched case-insensitively, so ``Alice@Example.com`` and
    ``alice@example.com`` name the same account.
    """
    return email.strip().lower()


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class Account(Base):
    """Account model - credentials, profile and login security state.

    A record whose ``credential_digest`` is None is a placeholder: it only
    tracks failed login attempts against an email nobody has registered.
    """

    __tablename__ = "accounts"
    # AUTOINCREMENT keeps SQLite from handing out the id of a deleted row again
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    credential_digest: Mapped[str | None] = mapped_column(String(255), nullable=True)
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    failed_attempt_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_attempt_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    locked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    reset_token: Mapped[str | None] = mapped_column(String(255), nullable=True)
    reset_token_expires_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    def __init__(
        self,
        email: str,
        credential_digest: str | None = None,
        display_name: str | None = None,
        created_at: datetime | None = None,
        failed_attempt_count: int = 0,
        last_attempt_at: datetime | None = None,
        locked: bool = False,
        reset_token: str | None = None,
        reset_token_expires_at: datetime | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.email = normalize_email(email)
        self.credential_digest = credential_digest
        self.display_name = display_name
        self.created_at = created_at if created_at is not None else utcnow()
        self.failed_attempt_count = failed_attempt_count
        self.last_attempt_at = last_attempt_at
        self.locked = locked
        self.reset_token = reset_token
        self.reset_token_expires_at = reset_token_expires_at

    @property
    def is_placeholder(self) -> bool:
        """True for attempt-tracking records with no registered credential."""
        return self.credential_digest is None

    def clear_attempts(self) -> None:
        """Reset the failed-attempt counter and lift any lock."""
        self.failed_attempt_count = 0
        self.locked = False

    def clear_reset_token(self) -> None:
        self.reset_token = None
        self.reset_token_expires_at = None

    def to_view(self) -> AccountView:
        """Caller-visible projection without credential or reset secrets."""
        return AccountView(
            id=self.id,
            email=self.email,
            display_name=self.display_name,
            created_at=self.created_at,
            failed_attempt_count=self.failed_attempt_count,
            last_attempt_at=self.last_attempt_at,
            locked=self.locked,
        )

    def __repr__(self) -> str:
        return (
            f"<Account(id={self.id!r}, email={self.email!r}, "
            f"failed_attempt_count={self.failed_attempt_count!r}, locked={self.locked!r})>"
        )


@dataclass
class AccountView:
    """Account data safe to hand back to callers."""

    id: int
    email: str
    display_name: str | None
    created_at: datetime
    failed_attempt_count: int
    last_attempt_at: datetime | None
    locked: bool
