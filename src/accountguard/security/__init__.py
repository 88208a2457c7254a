"""Security package - Account lockout and password-reset state machine."""

from accountguard.security.engine import (
    GENERIC_RESET_MESSAGE,
    LOCKOUT_THRESHOLD,
    AccountSecurityEngine,
)
from accountguard.security.exceptions import (
    EngineConfigurationError,
    SecurityEngineError,
)
from accountguard.security.models import (
    AccountResult,
    AccountState,
    LoginResult,
    Outcome,
    ResetRequestResult,
    ResetResult,
)

__all__ = [
    "GENERIC_RESET_MESSAGE",
    "LOCKOUT_THRESHOLD",
    "AccountResult",
    "AccountSecurityEngine",
    "AccountState",
    "EngineConfigurationError",
    "LoginResult",
    "Outcome",
    "ResetRequestResult",
    "ResetResult",
    "SecurityEngineError",
]
