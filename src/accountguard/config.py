"""Configuration loading for the accountguard service."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Mapping

ENV_PREFIX = "ACCOUNTGUARD_"

DEFAULT_DB_PATH = "accountguard.db"
DEFAULT_JWT_SECRET = "dev-only-change-me-accountguard-signing-key"
DEFAULT_TOKEN_TTL_SECONDS = 24 * 60 * 60
DEFAULT_BCRYPT_ROUNDS = 12
DEFAULT_LOCKOUT_SECONDS = 15 * 60
DEFAULT_RESET_TTL_SECONDS = 60 * 60

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when configuration is invalid."""


@dataclass
class Settings:
    """Service settings.

    Durations are stored in seconds so they can be read straight from the
    environment; the ``*_duration`` properties expose them as timedeltas.
    """

    db_path: str = DEFAULT_DB_PATH
    jwt_secret: str = DEFAULT_JWT_SECRET
    token_ttl_seconds: float = DEFAULT_TOKEN_TTL_SECONDS
    bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS
    lockout_seconds: float = DEFAULT_LOCKOUT_SECONDS
    reset_ttl_seconds: float = DEFAULT_RESET_TTL_SECONDS
    expose_reset_token: bool = True

    def __post_init__(self) -> None:
        if not self.jwt_secret:
            raise ConfigError("jwt_secret must not be empty")
        if not 4 <= self.bcrypt_rounds <= 31:
            raise ConfigError(f"bcrypt_rounds must be between 4 and 31, got {self.bcrypt_rounds}")
        for name in ("token_ttl_seconds", "lockout_seconds", "reset_ttl_seconds"):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive")

    @property
    def token_ttl(self) -> timedelta:
        return timedelta(seconds=self.token_ttl_seconds)

    @property
    def lockout_duration(self) -> timedelta:
        return timedelta(seconds=self.lockout_seconds)

    @property
    def reset_ttl(self) -> timedelta:
        return timedelta(seconds=self.reset_ttl_seconds)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from ``ACCOUNTGUARD_*`` environment variables.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Returns:
            Parsed settings, with defaults for anything unset.

        Raises:
            ConfigError: If a variable cannot be parsed or is out of range.
        """
        env = os.environ if environ is None else environ

        def get(name: str) -> str | None:
            value = env.get(ENV_PREFIX + name)
            if value is None or value.strip() == "":
                return None
            return value.strip()

        jwt_secret = get("JWT_SECRET")
        if jwt_secret is None:
            logger.warning(
                "%sJWT_SECRET is not set; using the built-in development secret", ENV_PREFIX
            )
            jwt_secret = DEFAULT_JWT_SECRET

        return cls(
            db_path=get("DB_PATH") or DEFAULT_DB_PATH,
            jwt_secret=jwt_secret,
            token_ttl_seconds=_parse_float(
                "TOKEN_TTL_SECONDS", get("TOKEN_TTL_SECONDS"), DEFAULT_TOKEN_TTL_SECONDS
            ),
            bcrypt_rounds=_parse_int("BCRYPT_ROUNDS", get("BCRYPT_ROUNDS"), DEFAULT_BCRYPT_ROUNDS),
            lockout_seconds=_parse_float(
                "LOCKOUT_SECONDS", get("LOCKOUT_SECONDS"), DEFAULT_LOCKOUT_SECONDS
            ),
            reset_ttl_seconds=_parse_float(
                "RESET_TTL_SECONDS", get("RESET_TTL_SECONDS"), DEFAULT_RESET_TTL_SECONDS
            ),
            expose_reset_token=_parse_bool(
                "EXPOSE_RESET_TOKEN", get("EXPOSE_RESET_TOKEN"), default=True
            ),
        )


def _parse_int(name: str, raw: str | None, default: int) -> int:
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from e


def _parse_float(name: str, raw: str | None, default: float) -> float:
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f"{ENV_PREFIX}{name} must be a number, got {raw!r}") from e


def _parse_bool(name: str, raw: str | None, default: bool) -> bool:
    if raw is None:
        return default
    lowered = raw.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigError(f"{ENV_PREFIX}{name} must be a boolean, got {raw!r}")
