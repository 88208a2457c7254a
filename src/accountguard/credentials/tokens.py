"""Bearer token issuance and verification with PyJWT."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import jwt

from accountguard.credentials.exceptions import ExpiredTokenError, InvalidTokenError

if TYPE_CHECKING:
    from collections.abc import Callable

ALGORITHM = "HS256"
DEFAULT_TTL = timedelta(hours=24)


@dataclass
class TokenClaims:
    """Identity carried by a bearer token."""

    account_id: int
    email: str
    expires_at: datetime


class TokenIssuer:
    """Signs and checks HS256 bearer tokens."""

    def __init__(
        self,
        secret: str,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the issuer.

        Args:
            secret: HMAC signing key.
            ttl: Default lifetime of issued tokens.
            clock: Returns the current aware UTC time. Defaults to the wall clock.
        """
        self._secret = secret
        self.ttl = ttl
        self._clock = clock or (lambda: datetime.now(UTC))

    def issue(self, account_id: int, email: str, ttl: timedelta | None = None) -> str:
        """Issue a token for an account.

        Args:
            account_id: Subject of the token.
            email: Account email, included as a claim.
            ttl: Lifetime override.

        Returns:
            Encoded JWT.
        """
        now = self._clock()
        payload = {
            "sub": str(account_id),
            "email": email,
            "iat": now,
            "exp": now + (ttl if ttl is not None else self.ttl),
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> TokenClaims:
        """Decode and validate a token.

        Returns:
            The token's claims.

        Raises:
            ExpiredTokenError: If the token has expired.
            InvalidTokenError: If the token is malformed or the signature is wrong.
        """
        try:
            data = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"require": ["sub", "exp"], "verify_exp": False, "verify_iat": False},
            )
        except jwt.exceptions.PyJWTError as e:
            raise InvalidTokenError("Not a valid token") from e

        # Expiry is checked against the injected clock, not PyJWT's
        expires_at = datetime.fromtimestamp(data["exp"], tz=UTC)
        if self._clock() >= expires_at:
            raise ExpiredTokenError("Token has expired")

        try:
            account_id = int(data["sub"])
        except (TypeError, ValueError) as e:
            raise InvalidTokenError("Token subject is not an account id") from e

        return TokenClaims(
            account_id=account_id,
            email=str(data.get("email", "")),
            expires_at=expires_at,
        )
