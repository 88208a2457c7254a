"""AccountSecurityEngine - Login lockout and password-reset state machine."""

from __future__ import annotations

import logging
import math
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Protocol

from accountguard.account_store import AccountExistsError, normalize_email, utcnow
from accountguard.credentials import generate_reset_token, tokens_match
from accountguard.logging import mask_email
from accountguard.security.exceptions import EngineConfigurationError
from accountguard.security.models import (
    AccountResult,
    AccountState,
    LoginResult,
    Outcome,
    ResetRequestResult,
    ResetResult,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from contextlib import AbstractContextManager

    from accountguard.account_store import Account, AccountView
    from accountguard.credentials import PasswordHasher

logger = logging.getLogger(__name__)

LOCKOUT_THRESHOLD = 3
DEFAULT_LOCKOUT_DURATION = timedelta(minutes=15)
DEFAULT_RESET_TTL = timedelta(hours=1)
GENERIC_RESET_MESSAGE = "If an account with this email exists, a password reset link has been sent."


class AccountRepository(Protocol):
    """Interface for the account record store."""

    def find_by_email(self, email: str) -> Account | None: ...

    def find_by_id(self, account_id: int) -> Account | None: ...

    def create(
        self, email: str, credential_digest: str | None, display_name: str | None = ...
    ) -> Account: ...

    def save(self, account: Account) -> Account: ...

    def lock_account(self, *emails: str) -> AbstractContextManager[None]: ...


class AccountSecurityEngine:
    """Applies the account-security rules to records in an AccountStore.

    The engine holds no per-account state of its own. Lockout and reset-token
    expiry are evaluated lazily, on the next access to the account; nothing
    runs in the background. Each read-decide-write sequence happens under
    the store's per-account lock.

    Every expected condition (wrong password, locked account, bad token,
    duplicate email) comes back as a result value. Only store failures raise.
    """

    def __init__(
        self,
        store: AccountRepository,
        hasher: PasswordHasher,
        lockout_duration: timedelta = DEFAULT_LOCKOUT_DURATION,
        reset_ttl: timedelta = DEFAULT_RESET_TTL,
        clock: Callable[[], datetime] = utcnow,
        token_factory: Callable[[], str] = generate_reset_token,
    ) -> None:
        """Initialize the engine.

        Args:
            store: Account record store.
            hasher: Credential hashing capability.
            lockout_duration: How long an account stays locked after the last
                failed attempt.
            reset_ttl: Lifetime of a password-reset token.
            clock: Returns the current naive UTC time.
            token_factory: Produces reset tokens; must be cryptographically random.

        Raises:
            EngineConfigurationError: If a duration is not positive.
        """
        if lockout_duration <= timedelta(0):
            raise EngineConfigurationError("lockout_duration must be positive")
        if reset_ttl <= timedelta(0):
            raise EngineConfigurationError("reset_ttl must be positive")

        self._store = store
        self._hasher = hasher
        self.lockout_duration = lockout_duration
        self.reset_ttl = reset_ttl
        self._clock = clock
        self._token_factory = token_factory

    # --- Lock state ---

    def account_state(self, account: Account) -> AccountState:
        """Current lock state of an account, taking window expiry into account."""
        if account.locked and not self._window_elapsed(account, self._clock()):
            return AccountState.LOCKED
        return AccountState.ACTIVE

    def _window_elapsed(self, account: Account, now: datetime) -> bool:
        if account.last_attempt_at is None:
            return True
        return now - account.last_attempt_at >= self.lockout_duration

    def _retry_after(self, account: Account, now: datetime) -> int:
        if account.last_attempt_at is None:
            return 0
        remaining = self.lockout_duration - (now - account.last_attempt_at)
        return max(1, math.ceil(remaining.total_seconds()))

    # --- Login ---

    def evaluate_login(self, email: str, secret: str) -> LoginResult:
        """Evaluate a login attempt and record it.

        Lock state is checked before the credential: a locked account is
        rejected without verifying the secret and without counting the
        attempt. Once the window since the last attempt has elapsed, the
        counter is cleared and the attempt is evaluated fresh.

        Unknown emails get a placeholder record so repeated guesses against
        them are counted and locked exactly like a real account.

        Args:
            email: Email the caller is logging in as.
            secret: Supplied password.

        Returns:
            LoginResult with AUTHENTICATED, INVALID_CREDENTIALS (with
            remaining_attempts) or LOCKED_OUT (with retry_after_seconds).
        """
        with self._store.lock_account(email):
            now = self._clock()
            account = self._store.find_by_email(email)

            if account is not None:
                if account.locked and not self._window_elapsed(account, now):
                    logger.info("Login rejected for locked account %s", mask_email(account.email))
                    return LoginResult(
                        outcome=Outcome.LOCKED_OUT,
                        retry_after_seconds=self._retry_after(account, now),
                    )
                if account.failed_attempt_count > 0 and self._window_elapsed(account, now):
                    # Implicit unlock; persisted with the attempt recorded below
                    account.clear_attempts()
            else:
                account = self._store.create(email, credential_digest=None)
                logger.info("Tracking failed logins for unregistered %s", mask_email(account.email))

            if account.is_placeholder:
                # Same bcrypt cost as a registered account; never succeeds
                self._hasher.verify(secret, self._hasher.dummy_digest)
                verified = False
            else:
                verified = self._hasher.verify(secret, account.credential_digest)
            account.last_attempt_at = now

            if verified:
                account.clear_attempts()
                account = self._store.save(account)
                logger.info("Login succeeded for account %s", account.id)
                return LoginResult(outcome=Outcome.AUTHENTICATED, account=account.to_view())

            account.failed_attempt_count += 1
            if account.failed_attempt_count >= LOCKOUT_THRESHOLD:
                account.locked = True
            account = self._store.save(account)

            if account.locked:
                logger.warning(
                    "Account %s locked after %d failed attempts",
                    mask_email(account.email),
                    account.failed_attempt_count,
                )
                return LoginResult(
                    outcome=Outcome.LOCKED_OUT,
                    retry_after_seconds=self._retry_after(account, now),
                )

            return LoginResult(
                outcome=Outcome.INVALID_CREDENTIALS,
                remaining_attempts=LOCKOUT_THRESHOLD - account.failed_attempt_count,
            )

    # --- Password reset ---

    def request_reset(self, email: str) -> ResetRequestResult:
        """Issue a single-use reset token for a registered account.

        Unknown emails (and placeholders) get the same message and cause no
        state change.

        Returns:
            ResetRequestResult; token and expires_at are set only when issued.
        """
        with self._store.lock_account(email):
            account = self._store.find_by_email(email)
            if account is None or account.is_placeholder:
                logger.debug("Reset requested for unregistered %s", mask_email(email))
                return ResetRequestResult(message=GENERIC_RESET_MESSAGE)

            account.reset_token = self._token_factory()
            account.reset_token_expires_at = self._clock() + self.reset_ttl
            account = self._store.save(account)

        logger.info("Reset token issued for account %s", account.id)
        return ResetRequestResult(
            message=GENERIC_RESET_MESSAGE,
            token=account.reset_token,
            expires_at=account.reset_token_expires_at,
        )

    def _reset_token_valid(self, account: Account, token: str) -> bool:
        if account.reset_token_expires_at is None:
            return False
        if not tokens_match(account.reset_token, token):
            return False
        return self._clock() <= account.reset_token_expires_at

    def verify_reset_token(self, email: str, token: str) -> AccountView | None:
        """Check a reset token without consuming it.

        Returns:
            The account if the token matches and has not expired, else None.
        """
        account = self._store.find_by_email(email)
        if account is None or not self._reset_token_valid(account, token):
            return None
        return account.to_view()

    def complete_reset(self, email: str, token: str, new_secret: str) -> ResetResult:
        """Set a new password using a reset token.

        On success the token is consumed, the failed-attempt counter is
        cleared and any lock is lifted, all in one write.

        Returns:
            ResetResult with RESET_COMPLETED or INVALID_OR_EXPIRED_TOKEN.
        """
        with self._store.lock_account(email):
            account = self._store.find_by_email(email)
            if account is None or not self._reset_token_valid(account, token):
                logger.info("Rejected reset token for %s", mask_email(email))
                return ResetResult(outcome=Outcome.INVALID_OR_EXPIRED_TOKEN)

            account.credential_digest = self._hasher.hash(new_secret)
            account.clear_reset_token()
            account.clear_attempts()
            account = self._store.save(account)

        logger.info("Password reset completed for account %s", account.id)
        return ResetResult(outcome=Outcome.RESET_COMPLETED, account=account.to_view())

    # --- Registration, profile and credentials ---

    def register(self, email: str, secret: str, display_name: str | None) -> AccountResult:
        """Create an account.

        A placeholder left behind by failed logins against this email is
        taken over in place (it keeps its id) and its attempt state cleared.

        Returns:
            AccountResult with CREATED or CONFLICT.
        """
        digest = self._hasher.hash(secret)

        with self._store.lock_account(email):
            existing = self._store.find_by_email(email)
            if existing is not None and not existing.is_placeholder:
                return AccountResult(outcome=Outcome.CONFLICT)

            if existing is not None:
                existing.credential_digest = digest
                existing.display_name = display_name
                existing.clear_attempts()
                existing.last_attempt_at = None
                account = self._store.save(existing)
            else:
                try:
                    account = self._store.create(email, digest, display_name)
                except AccountExistsError:
                    return AccountResult(outcome=Outcome.CONFLICT)

        logger.info("Registered account %s", account.id)
        return AccountResult(outcome=Outcome.CREATED, account=account.to_view())

    def get_profile(self, account_id: int) -> AccountResult:
        """Fetch an account's view by id."""
        account = self._store.find_by_id(account_id)
        if account is None or account.is_placeholder:
            return AccountResult(outcome=Outcome.NOT_FOUND)
        return AccountResult(outcome=Outcome.OK, account=account.to_view())

    def update_profile(
        self,
        account_id: int,
        display_name: str | None = None,
        email: str | None = None,
    ) -> AccountResult:
        """Apply the provided profile fields.

        Returns:
            AccountResult with UPDATED, NOT_FOUND, or CONFLICT when the new
            email belongs to another record.
        """
        extra = (email,) if email is not None else ()
        with self._hold_account(account_id, *extra) as account:
            if account is None:
                return AccountResult(outcome=Outcome.NOT_FOUND)

            if email is not None and normalize_email(email) != account.email:
                other = self._store.find_by_email(email)
                if other is not None and other.id != account.id:
                    return AccountResult(outcome=Outcome.CONFLICT)
                account.email = normalize_email(email)
                # Reset tokens were issued to the old address
                account.clear_reset_token()
            if display_name is not None:
                account.display_name = display_name

            try:
                account = self._store.save(account)
            except AccountExistsError:
                return AccountResult(outcome=Outcome.CONFLICT)

        return AccountResult(outcome=Outcome.UPDATED, account=account.to_view())

    def change_credential(
        self, account_id: int, current_secret: str, new_secret: str
    ) -> AccountResult:
        """Replace the password after verifying the current one.

        Returns:
            AccountResult with UPDATED, NOT_FOUND, INVALID_CREDENTIALS when the
            current secret is wrong, or SAME_SECRET when the new secret equals it.
        """
        with self._hold_account(account_id) as account:
            if account is None:
                return AccountResult(outcome=Outcome.NOT_FOUND)
            if not self._hasher.verify(current_secret, account.credential_digest):
                return AccountResult(outcome=Outcome.INVALID_CREDENTIALS)
            if self._hasher.verify(new_secret, account.credential_digest):
                return AccountResult(outcome=Outcome.SAME_SECRET)

            account.credential_digest = self._hasher.hash(new_secret)
            account.clear_reset_token()
            account = self._store.save(account)

        logger.info("Credential changed for account %s", account.id)
        return AccountResult(outcome=Outcome.UPDATED, account=account.to_view())

    @contextmanager
    def _hold_account(self, account_id: int, *extra_emails: str) -> Iterator[Account | None]:
        """Lock a registered account by id and yield a fresh copy of it.

        Yields None for unknown ids and placeholders. If the account's email
        changes while waiting for the lock, the new email is locked instead.
        """
        while True:
            account = self._store.find_by_id(account_id)
            if account is None or account.is_placeholder:
                yield None
                return
            with self._store.lock_account(account.email, *extra_emails):
                current = self._store.find_by_id(account_id)
                if current is not None and current.email == account.email:
                    yield current
                    return
