"""Credentials package - hashing, bearer tokens and reset tokens."""

from accountguard.credentials.exceptions import (
    CredentialsError,
    ExpiredTokenError,
    InvalidTokenError,
)
from accountguard.credentials.hashing import BcryptHasher, PasswordHasher
from accountguard.credentials.reset_tokens import generate_reset_token, tokens_match
from accountguard.credentials.tokens import TokenClaims, TokenIssuer

__all__ = [
    "BcryptHasher",
    "CredentialsError",
    "ExpiredTokenError",
    "InvalidTokenError",
    "PasswordHasher",
    "TokenClaims",
    "TokenIssuer",
    "generate_reset_token",
    "tokens_match",
]
