"""FastAPI application setup."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from accountguard import __version__
from accountguard.account_store import AccountStoreError, utcnow
from accountguard.api.dependencies import (
    close_account_store,
    close_engine,
    close_token_issuer,
    init_account_store,
    init_engine,
    init_settings,
    init_token_issuer,
)
from accountguard.api.models import APIResponse
from accountguard.api.routes import auth, profile
from accountguard.config import Settings
from accountguard.credentials import BcryptHasher, InvalidTokenError, TokenIssuer
from accountguard.logging import get_logger, sanitize_for_log
from accountguard.security import AccountSecurityEngine

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Callable
    from datetime import datetime

logger = get_logger("api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings: Settings = app.state.settings
    clock: Callable[[], datetime] = app.state.clock

    # Startup
    store = init_account_store(settings.db_path)
    engine = AccountSecurityEngine(
        store=store,
        hasher=BcryptHasher(rounds=settings.bcrypt_rounds),
        lockout_duration=settings.lockout_duration,
        reset_ttl=settings.reset_ttl,
        clock=clock,
    )
    init_engine(engine)
    init_token_issuer(TokenIssuer(settings.jwt_secret, ttl=settings.token_ttl))
    init_settings(settings)
    logger.info(
        "accountguard started (db=%s, lockout=%ss, reset_ttl=%ss)",
        settings.db_path,
        settings.lockout_seconds,
        settings.reset_ttl_seconds,
    )

    yield
    # Shutdown
    close_token_issuer()
    close_engine()
    close_account_store()


def create_app(
    settings: Settings | None = None,
    clock: Callable[[], datetime] | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Service settings. Read from the environment when omitted.
        clock: Naive-UTC clock for the security engine; the wall clock by default.
    """
    app = FastAPI(
        title="accountguard API",
        description="Authentication service with account lockout and password recovery",
        version=__version__,
        lifespan=lifespan,
    )

    # Store config for lifespan manager
    app.state.settings = settings if settings is not None else Settings.from_env()
    app.state.clock = clock if clock is not None else utcnow

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        details = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ())[1:]),
                "message": err.get("msg", ""),
            }
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=APIResponse[None](
                data=None, error="Validation failed", details=details
            ).model_dump(),
        )

    @app.exception_handler(InvalidTokenError)
    async def invalid_token_handler(_request: Request, exc: InvalidTokenError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=APIResponse[None](data=None, error=str(exc)).model_dump(),
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(AccountStoreError)
    async def account_store_error_handler(
        _request: Request, exc: AccountStoreError
    ) -> JSONResponse:
        logger.error("Account store failure: %s", sanitize_for_log(str(exc)))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=APIResponse[None](data=None, error="Internal server error").model_dump(),
        )

    @app.get("/health", tags=["health"])
    def health() -> dict[str, str]:
        return {"status": "ok"}

    # Include routers
    app.include_router(auth.router, prefix="/api/v1")
    app.include_router(profile.router, prefix="/api/v1")

    return app
