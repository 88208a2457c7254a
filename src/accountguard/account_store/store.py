"""AccountStore - Main API for Account Store operations."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager, nullcontext
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from accountguard.account_store.database import (
    create_sqlite_engine,
    is_memory_path,
    make_session_factory,
)
from accountguard.account_store.exceptions import AccountExistsError, AccountStoreError
from accountguard.account_store.locks import KeyedLock
from accountguard.account_store.models import Account, normalize_email

if TYPE_CHECKING:
    from collections.abc import Iterator
    from contextlib import AbstractContextManager

logger = logging.getLogger(__name__)


class AccountStore:
    """Main API for Account Store operations.

    Records are keyed by normalised email and by integer id. Every method
    runs in its own session, so each call is atomic for the record it
    touches. Callers that read, decide and write back must wrap the
    sequence in ``lock_account`` for the email(s) involved.
    """

    def __init__(self, db_path: str = "accountguard.db") -> None:
        """Initialize Account Store with SQLite database.

        Creates database and tables if they don't exist.

        Args:
            db_path: Path to SQLite database file, or ":memory:"
        """
        self._engine = create_sqlite_engine(db_path)
        self._sessions = make_session_factory(self._engine)
        self._keys = KeyedLock()
        # An in-memory database is a single shared connection
        self._connection_lock: threading.Lock | None = (
            threading.Lock() if is_memory_path(db_path) else None
        )

    def close(self) -> None:
        """Close the database connection."""
        self._engine.dispose()

    @contextmanager
    def lock_account(self, *emails: str) -> Iterator[None]:
        """Serialize read-decide-write sequences on the given account emails.

        Args:
            emails: One or more emails; normalised before locking.
        """
        with self._keys.hold(*(normalize_email(e) for e in emails)):
            yield

    def find_by_email(self, email: str) -> Account | None:
        """Get an account (or placeholder) by email.

        Args:
            email: Email address, matched case-insensitively

        Returns:
            The Account, or None if no record exists
        """
        stmt = select(Account).where(Account.email == normalize_email(email))
        with self._connection(), self._sessions() as session:
            try:
                return session.execute(stmt).scalar_one_or_none()
            except SQLAlchemyError as e:
                raise AccountStoreError(f"Failed to look up account by email: {e}") from e

    def find_by_id(self, account_id: int) -> Account | None:
        """Get an account by ID.

        Returns:
            The Account, or None if no record exists
        """
        with self._connection(), self._sessions() as session:
            try:
                return session.get(Account, account_id)
            except SQLAlchemyError as e:
                raise AccountStoreError(f"Failed to look up account {account_id}: {e}") from e

    def create(
        self,
        email: str,
        credential_digest: str | None,
        display_name: str | None = None,
    ) -> Account:
        """Create a new account.

        Args:
            email: Account email; stored normalised
            credential_digest: Hashed secret, or None for a placeholder record
            display_name: Free-form profile name

        Returns:
            Created Account with its assigned ID

        Raises:
            AccountExistsError: If an account with the same email already exists
        """
        account = Account(
            email=email,
            credential_digest=credential_digest,
            display_name=display_name,
        )
        return self._write(account, add=True)

    def save(self, account: Account) -> Account:
        """Upsert a full account record by ID.

        Saving the same record twice leaves the store unchanged.

        Args:
            account: Account to write; inserted if it has no ID yet

        Returns:
            The stored Account

        Raises:
            AccountExistsError: If the account's email belongs to another record
        """
        return self._write(account, add=False)

    def _write(self, account: Account, add: bool) -> Account:
        with self._connection(), self._sessions() as session:
            try:
                if add:
                    session.add(account)
                    stored = account
                else:
                    stored = session.merge(account)
                session.commit()
                session.refresh(stored)
                return stored
            except IntegrityError as e:
                session.rollback()
                if "UNIQUE constraint failed" in str(e) or "accounts.email" in str(e):
                    raise AccountExistsError(
                        f"Account with email '{account.email}' already exists"
                    ) from e
                raise AccountStoreError(f"Failed to write account: {e}") from e
            except SQLAlchemyError as e:
                session.rollback()
                logger.error("Account write failed for id=%s: %s", account.id, e)
                raise AccountStoreError(f"Failed to write account: {e}") from e

    def _connection(self) -> AbstractContextManager[object]:
        if self._connection_lock is None:
            return nullcontext()
        return self._connection_lock
