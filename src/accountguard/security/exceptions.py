"""Exceptions for the Security module."""


class SecurityEngineError(Exception):
    """Base exception for security engine errors."""

    pass


class EngineConfigurationError(SecurityEngineError):
    """Engine constructed with an unusable policy value."""

    pass
