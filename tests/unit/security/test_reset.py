"""Unit tests for AccountSecurityEngine password reset."""

from datetime import timedelta

import pytest

from accountguard.account_store import AccountStore
from accountguard.security import GENERIC_RESET_MESSAGE, AccountSecurityEngine, Outcome

EMAIL = "alice@example.com"
PASSWORD = "Secret123"
NEW_PASSWORD = "NewSecret456"


@pytest.fixture
def registered(engine: AccountSecurityEngine) -> int:
    result = engine.register(EMAIL, PASSWORD, "Alice")
    assert result.account is not None
    return result.account.id


@pytest.mark.unit
class TestRequestReset:
    """Tests for request_reset."""

    def test_issues_token_for_known_email(
        self, engine: AccountSecurityEngine, store: AccountStore, clock, registered: int
    ) -> None:
        result = engine.request_reset(EMAIL)

        assert result.outcome is Outcome.RESET_ISSUED
        assert result.message == GENERIC_RESET_MESSAGE
        assert result.token
        assert result.expires_at == clock.now + timedelta(hours=1)

        account = store.find_by_email(EMAIL)
        assert account.reset_token == result.token
        assert account.reset_token_expires_at == result.expires_at

    def test_unknown_email_same_message_no_mutation(
        self, engine: AccountSecurityEngine, store: AccountStore, registered: int
    ) -> None:
        known = engine.request_reset(EMAIL)
        unknown = engine.request_reset("nobody@example.com")

        assert unknown.message == known.message
        assert unknown.token is None
        assert unknown.expires_at is None
        assert store.find_by_email("nobody@example.com") is None

    def test_placeholder_gets_no_token(
        self, engine: AccountSecurityEngine, store: AccountStore
    ) -> None:
        engine.evaluate_login("ghost@example.com", "whatever")

        result = engine.request_reset("ghost@example.com")

        assert result.token is None
        assert store.find_by_email("ghost@example.com").reset_token is None

    def test_new_request_replaces_token(
        self, engine: AccountSecurityEngine, registered: int
    ) -> None:
        first = engine.request_reset(EMAIL)
        second = engine.request_reset(EMAIL)

        assert first.token != second.token
        assert engine.verify_reset_token(EMAIL, first.token) is None
        assert engine.verify_reset_token(EMAIL, second.token) is not None

    def test_uses_token_factory(self, store: AccountStore, hasher, clock) -> None:
        engine = AccountSecurityEngine(
            store, hasher, clock=clock, token_factory=lambda: "fixed-token"
        )
        engine.register(EMAIL, PASSWORD, "Alice")

        assert engine.request_reset(EMAIL).token == "fixed-token"


@pytest.mark.unit
class TestVerifyResetToken:
    """Tests for verify_reset_token."""

    def test_valid_token(self, engine: AccountSecurityEngine, registered: int) -> None:
        token = engine.request_reset(EMAIL).token

        view = engine.verify_reset_token(EMAIL, token)

        assert view is not None
        assert view.id == registered

    def test_wrong_token(self, engine: AccountSecurityEngine, registered: int) -> None:
        engine.request_reset(EMAIL)
        assert engine.verify_reset_token(EMAIL, "not-the-token") is None

    def test_token_for_other_email(self, engine: AccountSecurityEngine, registered: int) -> None:
        engine.register("bob@example.com", PASSWORD, "Bob")
        token = engine.request_reset(EMAIL).token

        assert engine.verify_reset_token("bob@example.com", token) is None

    def test_valid_at_exact_expiry(
        self, engine: AccountSecurityEngine, clock, registered: int
    ) -> None:
        token = engine.request_reset(EMAIL).token
        clock.advance(hours=1)

        assert engine.verify_reset_token(EMAIL, token) is not None

    def test_expired(self, engine: AccountSecurityEngine, clock, registered: int) -> None:
        token = engine.request_reset(EMAIL).token
        clock.advance(hours=1, seconds=1)

        assert engine.verify_reset_token(EMAIL, token) is None

    def test_verification_has_no_side_effects(
        self, engine: AccountSecurityEngine, store: AccountStore, registered: int
    ) -> None:
        token = engine.request_reset(EMAIL).token

        engine.verify_reset_token(EMAIL, token)
        engine.verify_reset_token(EMAIL, token)

        assert store.find_by_email(EMAIL).reset_token == token


@pytest.mark.unit
class TestCompleteReset:
    """Tests for complete_reset."""

    def test_sets_new_password(self, engine: AccountSecurityEngine, registered: int) -> None:
        token = engine.request_reset(EMAIL).token

        result = engine.complete_reset(EMAIL, token, NEW_PASSWORD)

        assert result.outcome is Outcome.RESET_COMPLETED
        assert result.ok
        assert engine.evaluate_login(EMAIL, NEW_PASSWORD).outcome is Outcome.AUTHENTICATED

    def test_old_password_stops_working(
        self, engine: AccountSecurityEngine, registered: int
    ) -> None:
        token = engine.request_reset(EMAIL).token
        engine.complete_reset(EMAIL, token, NEW_PASSWORD)

        assert engine.evaluate_login(EMAIL, PASSWORD).outcome is Outcome.INVALID_CREDENTIALS

    def test_token_is_single_use(
        self, engine: AccountSecurityEngine, store: AccountStore, registered: int
    ) -> None:
        token = engine.request_reset(EMAIL).token
        engine.complete_reset(EMAIL, token, NEW_PASSWORD)

        second = engine.complete_reset(EMAIL, token, "Another789")

        assert second.outcome is Outcome.INVALID_OR_EXPIRED_TOKEN
        account = store.find_by_email(EMAIL)
        assert account.reset_token is None
        assert account.reset_token_expires_at is None

    def test_expired_token_rejected(
        self, engine: AccountSecurityEngine, store: AccountStore, clock, registered: int
    ) -> None:
        token = engine.request_reset(EMAIL).token
        digest_before = store.find_by_email(EMAIL).credential_digest
        clock.advance(hours=2)

        result = engine.complete_reset(EMAIL, token, NEW_PASSWORD)

        assert result.outcome is Outcome.INVALID_OR_EXPIRED_TOKEN
        assert store.find_by_email(EMAIL).credential_digest == digest_before

    def test_unknown_email(self, engine: AccountSecurityEngine) -> None:
        result = engine.complete_reset("nobody@example.com", "token", NEW_PASSWORD)

        assert result.outcome is Outcome.INVALID_OR_EXPIRED_TOKEN

    def test_wrong_token_makes_no_change(
        self, engine: AccountSecurityEngine, store: AccountStore, registered: int
    ) -> None:
        token = engine.request_reset(EMAIL).token

        result = engine.complete_reset(EMAIL, "wrong", NEW_PASSWORD)

        assert result.outcome is Outcome.INVALID_OR_EXPIRED_TOKEN
        assert store.find_by_email(EMAIL).reset_token == token

    def test_clears_lock(
        self, engine: AccountSecurityEngine, store: AccountStore, registered: int
    ) -> None:
        """A locked account is unlocked immediately by a completed reset."""
        for _ in range(3):
            engine.evaluate_login(EMAIL, "Wrong1234")
        assert store.find_by_email(EMAIL).locked is True

        token = engine.request_reset(EMAIL).token
        engine.complete_reset(EMAIL, token, NEW_PASSWORD)

        account = store.find_by_email(EMAIL)
        assert account.locked is False
        assert account.failed_attempt_count == 0
        assert engine.evaluate_login(EMAIL, NEW_PASSWORD).outcome is Outcome.AUTHENTICATED
