"""Registration, login and password-reset endpoints."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from accountguard.api.dependencies import EngineDep, SettingsDep, TokenIssuerDep
from accountguard.api.errors import outcome_response
from accountguard.api.models import (
    APIResponse,
    AuthenticatedResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    ResetCompleteRequest,
    ResetRequestBody,
    ResetRequestResponse,
    account_to_response,
)
from accountguard.security import Outcome

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=APIResponse[AuthenticatedResponse],
    status_code=status.HTTP_201_CREATED,
)
def register(
    body: RegisterRequest, engine: EngineDep, issuer: TokenIssuerDep
) -> APIResponse[AuthenticatedResponse] | JSONResponse:
    """Register a new account and issue a bearer token."""
    result = engine.register(body.email, body.password, body.display_name)
    if not result.ok or result.account is None:
        return outcome_response(result.outcome)

    token = issuer.issue(result.account.id, result.account.email)
    return APIResponse(
        data=AuthenticatedResponse(
            message="Account registered successfully",
            account=account_to_response(result.account),
            token=token,
        )
    )


@router.post("/login", response_model=APIResponse[AuthenticatedResponse])
def login(
    body: LoginRequest, engine: EngineDep, issuer: TokenIssuerDep
) -> APIResponse[AuthenticatedResponse] | JSONResponse:
    """Log in with email and password."""
    result = engine.evaluate_login(body.email, body.password)

    if result.outcome is Outcome.LOCKED_OUT:
        retry_after = result.retry_after_seconds or 0
        return outcome_response(
            Outcome.LOCKED_OUT,
            data={"retry_after_seconds": retry_after},
            headers={"Retry-After": str(retry_after)},
        )
    if not result.ok or result.account is None:
        remaining = result.remaining_attempts
        return outcome_response(
            Outcome.INVALID_CREDENTIALS,
            error=f"Invalid email or password. {remaining} attempts remaining.",
            data={"remaining_attempts": remaining},
        )

    token = issuer.issue(result.account.id, result.account.email)
    return APIResponse(
        data=AuthenticatedResponse(
            message="Login successful",
            account=account_to_response(result.account),
            token=token,
        )
    )


@router.post("/password-reset/request", response_model=APIResponse[ResetRequestResponse])
def request_password_reset(
    body: ResetRequestBody, engine: EngineDep, settings: SettingsDep
) -> APIResponse[ResetRequestResponse]:
    """Request a password-reset token.

    The response is the same whether or not the email is registered. The
    token itself is only included when the deployment exposes it.
    """
    result = engine.request_reset(body.email)
    response = ResetRequestResponse(message=result.message)
    if settings.expose_reset_token and result.token is not None:
        response.reset_token = result.token
        response.expires_at = result.expires_at
    return APIResponse(data=response)


@router.post("/password-reset/complete", response_model=APIResponse[MessageResponse])
def complete_password_reset(
    body: ResetCompleteRequest, engine: EngineDep
) -> APIResponse[MessageResponse] | JSONResponse:
    """Set a new password using a reset token."""
    result = engine.complete_reset(body.email, body.token, body.new_password)
    if not result.ok:
        return outcome_response(result.outcome)
    return APIResponse(
        data=MessageResponse(
            message="Password reset successfully. You can now log in with your new password."
        )
    )
