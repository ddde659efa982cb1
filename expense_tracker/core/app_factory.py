from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings
from .container import ApplicationContainer
from .logging import configure_logging
from ..application.services.account_service import AccountService
from ..application.services.analytics_service import AnalyticsService
from ..application.services.auth_service import AuthPolicy, AuthService
from ..application.services.category_service import CategoryService
from ..application.services.transaction_service import TransactionService
from ..domain.errors import ExpenseTrackerError, ValidationError
from ..domain.models import OAuthProvider
from ..infrastructure.persistence.sqlite import SQLitePersistence
from ..presentation.api.routers import analytics as analytics_router
from ..presentation.api.routers import auth as auth_router
from ..presentation.api.routers import categories as categories_router
from ..presentation.api.routers import transactions as transactions_router
from ..presentation.api.routers import users as users_router
from ..services.email_service import EmailService
from ..services.oauth_providers import FacebookOAuthClient, GoogleOAuthClient
from ..services.passwords import PasswordHasher
from ..services.token_issuer import TokenIssuer

logger = logging.getLogger(__name__)

_HTTP_ERROR_KINDS = {
    status.HTTP_401_UNAUTHORIZED: "Unauthorized",
    status.HTTP_403_FORBIDDEN: "Forbidden",
    status.HTTP_404_NOT_FOUND: "NotFound",
}


def create_application(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()

    app = FastAPI(title="ExpenseTracker API", lifespan=_create_lifespan(settings))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router.router)
    app.include_router(users_router.router)
    app.include_router(transactions_router.router)
    app.include_router(categories_router.router)
    app.include_router(analytics_router.router)
    _register_exception_handlers(app, settings)

    @app.get("/health", tags=["Health"])
    def health() -> Dict[str, Any]:
        return {"status": "ok", "environment": settings.app_env}

    return app


def build_container(settings: Settings) -> ApplicationContainer:
    """Wire the services for one application instance."""
    hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    persistence = SQLitePersistence(settings.database_path, password_hasher=hasher)
    token_issuer = TokenIssuer(
        access_secret=settings.jwt_secret,
        refresh_secret=settings.jwt_refresh_secret,
        access_expires=settings.access_token_ttl,
        refresh_expires=settings.refresh_token_ttl,
        algorithm=settings.jwt_algorithm,
    )
    email_service = EmailService(
        smtp_host=settings.smtp_host,
        smtp_port=settings.smtp_port,
        smtp_username=settings.smtp_username,
        smtp_password=settings.smtp_password,
        from_email=settings.smtp_from_email,
        from_name=settings.smtp_from_name,
        frontend_url=settings.frontend_url,
        timeout_seconds=settings.http_timeout_seconds,
        verification_expires=settings.email_verification_ttl,
        reset_expires=settings.password_reset_ttl,
    )
    if not email_service.enabled:
        logger.warning("SMTP is not configured; account emails will only be logged.")

    callback_base = settings.oauth_callback_base_url.rstrip("/")
    oauth_clients = {
        OAuthProvider.GOOGLE: GoogleOAuthClient(
            settings.google_client_id,
            settings.google_client_secret,
            redirect_uri=f"{callback_base}/auth/google/callback",
            timeout_seconds=settings.http_timeout_seconds,
        ),
        OAuthProvider.FACEBOOK: FacebookOAuthClient(
            settings.facebook_app_id,
            settings.facebook_app_secret,
            redirect_uri=f"{callback_base}/auth/facebook/callback",
            timeout_seconds=settings.http_timeout_seconds,
        ),
    }

    policy = AuthPolicy(
        password_min_length=settings.password_min_length,
        max_login_attempts=settings.max_login_attempts,
        lock_time=settings.lock_time,
        email_verification_ttl=settings.email_verification_ttl,
        password_reset_ttl=settings.password_reset_ttl,
    )
    auth_service = AuthService(
        persistence,
        token_issuer,
        email_service,
        password_hasher=hasher,
        policy=policy,
    )
    account_service = AccountService(persistence, auth_service, password_hasher=hasher)
    transaction_service = TransactionService(persistence, persistence)
    category_service = CategoryService(persistence, persistence)
    analytics_service = AnalyticsService(persistence)

    return ApplicationContainer(
        settings=settings,
        persistence=persistence,
        token_issuer=token_issuer,
        email_service=email_service,
        oauth_clients=oauth_clients,
        auth_service=auth_service,
        account_service=account_service,
        transaction_service=transaction_service,
        category_service=category_service,
        analytics_service=analytics_service,
    )


def _create_lifespan(settings: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging()
        container = build_container(settings)
        app.state.container = container  # type: ignore[attr-defined]
        container.category_service.initialize_defaults()
        enabled = [provider.value for provider, client in container.oauth_clients.items() if client.enabled]
        logger.info("ExpenseTracker API started (env=%s, oauth=%s)", settings.app_env, enabled or "none")

        try:
            yield
        finally:
            container.persistence.close()

    return lifespan


def _register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(ExpenseTrackerError)
    async def domain_error_handler(request: Request, exc: ExpenseTrackerError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.warning("%s %s failed upstream: %s", request.method, request.url.path, exc.message)
        else:
            logger.info("%s %s rejected: %s", request.method, request.url.path, exc.kind)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors: List[Dict[str, Any]] = []
        for error in exc.errors():
            location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
            errors.append({"field": ".".join(location) or "body", "message": error.get("msg", "Invalid value")})
        error = ValidationError(errors=errors)
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        content = {
            "status": "error",
            "kind": _HTTP_ERROR_KINDS.get(exc.status_code, "HTTPError"),
            "message": str(exc.detail),
        }
        return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled error for %s %s", request.method, request.url.path, exc_info=exc)
        content: Dict[str, Any] = {
            "status": "error",
            "kind": "InternalError",
            "message": "Something went wrong",
        }
        if settings.is_development:
            content["detail"] = str(exc)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)
