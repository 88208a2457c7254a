"""FastAPI dependencies for dependency injection."""

from __future__ import annotations

from collections.abc import Generator  # noqa: TC003
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from accountguard.account_store import AccountStore
from accountguard.config import Settings
from accountguard.credentials import InvalidTokenError, TokenClaims, TokenIssuer
from accountguard.security import AccountSecurityEngine

# Global AccountStore instance (initialized on app startup)
_account_store: AccountStore | None = None


def init_account_store(db_path: str = "accountguard.db") -> AccountStore:
    """Initialize the global AccountStore instance."""
    global _account_store  # noqa: PLW0603
    _account_store = AccountStore(db_path)
    return _account_store


def close_account_store() -> None:
    """Close the global AccountStore instance."""
    global _account_store  # noqa: PLW0603
    if _account_store is not None:
        _account_store.close()
        _account_store = None


# Global AccountSecurityEngine instance
_engine: AccountSecurityEngine | None = None


def init_engine(engine: AccountSecurityEngine) -> None:
    """Initialize the global AccountSecurityEngine instance."""
    global _engine  # noqa: PLW0603
    _engine = engine


def close_engine() -> None:
    """Close the global AccountSecurityEngine instance."""
    global _engine  # noqa: PLW0603
    _engine = None


def get_engine() -> Generator[AccountSecurityEngine, None, None]:
    """Dependency that provides the AccountSecurityEngine instance."""
    if _engine is None:
        raise RuntimeError("AccountSecurityEngine not initialized. Call init_engine() first.")
    yield _engine


EngineDep = Annotated[AccountSecurityEngine, Depends(get_engine)]

# Global TokenIssuer instance
_token_issuer: TokenIssuer | None = None


def init_token_issuer(issuer: TokenIssuer) -> None:
    """Initialize the global TokenIssuer instance."""
    global _token_issuer  # noqa: PLW0603
    _token_issuer = issuer


def close_token_issuer() -> None:
    """Close the global TokenIssuer instance."""
    global _token_issuer  # noqa: PLW0603
    _token_issuer = None


def get_token_issuer() -> Generator[TokenIssuer, None, None]:
    """Dependency that provides the TokenIssuer instance."""
    if _token_issuer is None:
        raise RuntimeError("TokenIssuer not initialized. Call init_token_issuer() first.")
    yield _token_issuer


TokenIssuerDep = Annotated[TokenIssuer, Depends(get_token_issuer)]

# Settings in effect for the running app
_settings: Settings | None = None


def init_settings(settings: Settings) -> None:
    """Initialize the global Settings instance."""
    global _settings  # noqa: PLW0603
    _settings = settings


def get_settings() -> Settings:
    """Dependency that provides the Settings, falling back to defaults."""
    return _settings if _settings is not None else Settings()


SettingsDep = Annotated[Settings, Depends(get_settings)]

_bearer = HTTPBearer(auto_error=False)


def get_current_claims(
    issuer: TokenIssuerDep,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)],
) -> TokenClaims:
    """Dependency that resolves the bearer token into claims.

    Raises:
        InvalidTokenError: If the header is missing or the token does not verify.
    """
    if credentials is None:
        raise InvalidTokenError("Missing bearer token")
    return issuer.verify(credentials.credentials)


CurrentClaimsDep = Annotated[TokenClaims, Depends(get_current_claims)]
