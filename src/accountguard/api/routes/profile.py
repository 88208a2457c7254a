"""Profile and credential endpoints for the authenticated account."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from accountguard.api.dependencies import CurrentClaimsDep, EngineDep
from accountguard.api.errors import outcome_response
from accountguard.api.models import (
    AccountResponse,
    APIResponse,
    ChangePasswordRequest,
    MessageResponse,
    ProfileUpdate,
    account_to_response,
)
from accountguard.security import Outcome

router = APIRouter(prefix="/auth/profile", tags=["profile"])


@router.get("", response_model=APIResponse[AccountResponse])
def get_profile(
    claims: CurrentClaimsDep, engine: EngineDep
) -> APIResponse[AccountResponse] | JSONResponse:
    """Get the current account's profile."""
    result = engine.get_profile(claims.account_id)
    if not result.ok:
        return outcome_response(result.outcome)
    return APIResponse(data=account_to_response(result.account))


@router.patch("", response_model=APIResponse[AccountResponse])
def update_profile(
    body: ProfileUpdate, claims: CurrentClaimsDep, engine: EngineDep
) -> APIResponse[AccountResponse] | JSONResponse:
    """Update the current account's profile (partial update)."""
    result = engine.update_profile(
        claims.account_id,
        display_name=body.display_name,
        email=body.email,
    )
    if not result.ok:
        return outcome_response(result.outcome)
    return APIResponse(data=account_to_response(result.account))


@router.post("/password", response_model=APIResponse[MessageResponse])
def change_password(
    body: ChangePasswordRequest, claims: CurrentClaimsDep, engine: EngineDep
) -> APIResponse[MessageResponse] | JSONResponse:
    """Change the current account's password."""
    result = engine.change_credential(
        claims.account_id, body.current_password, body.new_password
    )
    if result.outcome is Outcome.INVALID_CREDENTIALS:
        return outcome_response(
            result.outcome, error="The current password you provided is incorrect"
        )
    if not result.ok:
        return outcome_response(result.outcome)
    return APIResponse(data=MessageResponse(message="Password changed successfully"))
