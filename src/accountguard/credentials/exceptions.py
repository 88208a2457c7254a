"""Exceptions for the credentials module."""


class CredentialsError(Exception):
    """Base exception for credential errors."""

    pass


class InvalidTokenError(CredentialsError):
    """Bearer token is malformed, tampered with or signed with another key."""

    pass


class ExpiredTokenError(InvalidTokenError):
    """Bearer token was valid but its expiry has passed."""

    pass
