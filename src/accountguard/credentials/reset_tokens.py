"""Password-reset token generation."""

import hmac
import secrets

RESET_TOKEN_BYTES = 32


def generate_reset_token() -> str:
    """Return an unpredictable URL-safe token from the OS random source."""
    return secrets.token_urlsafe(RESET_TOKEN_BYTES)


def tokens_match(expected: str | None, supplied: str | None) -> bool:
    """Constant-time comparison of a stored and a supplied reset token."""
    if not expected or not supplied:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), supplied.encode("utf-8"))
