"""Password hashing with bcrypt."""

from __future__ import annotations

import secrets
from typing import Protocol

import bcrypt

DEFAULT_ROUNDS = 12

# bcrypt only reads the first 72 bytes of its input
MAX_SECRET_BYTES = 72


def _encode(secret: str) -> bytes:
    return secret.encode("utf-8")[:MAX_SECRET_BYTES]


class PasswordHasher(Protocol):
    """Interface for the credential hashing capability."""

    def hash(self, secret: str) -> str:
        """Return a digest for the secret."""
        ...

    def verify(self, secret: str, digest: str | None) -> bool:
        """Return True if the secret matches the digest."""
        ...

    @property
    def dummy_digest(self) -> str:
        """A digest at the same cost as real ones, matching no user secret."""
        ...


class BcryptHasher:
    """bcrypt-backed hasher with a configurable cost factor."""

    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        """Initialize the hasher.

        Args:
            rounds: bcrypt log2 cost factor (4-31).
        """
        self.rounds = rounds
        self._dummy_digest: str | None = None

    def hash(self, secret: str) -> str:
        if not isinstance(secret, str) or len(secret) == 0:
            raise ValueError("Secret must be a non-empty string")

        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(_encode(secret), salt).decode("utf-8")

    def verify(self, secret: str, digest: str | None) -> bool:
        if not secret or not digest:
            return False
        try:
            return bcrypt.checkpw(_encode(secret), digest.encode("utf-8"))
        except ValueError:
            # Stored value is not a bcrypt digest
            return False

    @property
    def dummy_digest(self) -> str:
        # Hashed once per hasher, on first use
        if self._dummy_digest is None:
            self._dummy_digest = self.hash(secrets.token_urlsafe(32))
        return self._dummy_digest
