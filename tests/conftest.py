"""Shared pytest fixtures and configuration."""

from datetime import datetime, timedelta

import pytest

from accountguard.account_store import AccountStore
from accountguard.credentials import BcryptHasher
from accountguard.security import AccountSecurityEngine

# bcrypt's minimum cost keeps hashing fast in tests
TEST_BCRYPT_ROUNDS = 4


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


class FakeClock:
    """Manually advanced naive-UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    """A fake clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def store():
    """Create an in-memory AccountStore."""
    s = AccountStore(":memory:")
    yield s
    s.close()


@pytest.fixture
def hasher() -> BcryptHasher:
    """A bcrypt hasher at minimum cost."""
    return BcryptHasher(rounds=TEST_BCRYPT_ROUNDS)


@pytest.fixture
def engine(store: AccountStore, hasher: BcryptHasher, clock: FakeClock) -> AccountSecurityEngine:
    """An engine with a 15 minute lockout and 1 hour reset TTL on the fake clock."""
    return AccountSecurityEngine(
        store=store,
        hasher=hasher,
        lockout_duration=timedelta(minutes=15),
        reset_ttl=timedelta(hours=1),
        clock=clock,
    )
