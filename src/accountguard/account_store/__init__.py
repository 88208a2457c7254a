"""Account Store - Persistent storage for accounts and their security state."""

from accountguard.account_store.exceptions import (
    AccountExistsError,
    AccountStoreError,
)
from accountguard.account_store.locks import KeyedLock
from accountguard.account_store.models import (
    Account,
    AccountView,
    normalize_email,
    utcnow,
)
from accountguard.account_store.store import AccountStore

__all__ = [
    "Account",
    "AccountExistsError",
    "AccountStore",
    "AccountStoreError",
    "AccountView",
    "KeyedLock",
    "normalize_email",
    "utcnow",
]
