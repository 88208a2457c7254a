"""REST API for accountguard."""

from accountguard.api.app import create_app
from accountguard.api.models import (
    AccountResponse,
    APIResponse,
    AuthenticatedResponse,
)

__all__ = [
    "APIResponse",
    "AccountResponse",
    "AuthenticatedResponse",
    "create_app",
]
