"""
totp_vault.api.app

FastAPI app factory for the TOTP Vault service.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Fail fast on missing configuration (allow-list group, vault location).
- Own shared infrastructure (store handle, audit HTTP client) and dispose it
  on shutdown.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from totp_vault import __version__
from totp_vault.api.routers.health import router as health_router
from totp_vault.api.routers.secrets import router as secrets_router
from totp_vault.audit.dispatcher import AuditDispatcher
from totp_vault.audit.sink import AuditSink, LogAnalyticsSink, LogOnlySink
from totp_vault.auth.authz import Authorizer
from totp_vault.observability.logging import configure_logging, get_logger
from totp_vault.observability.middleware import RequestContextMiddleware, SecurityHeadersMiddleware
from totp_vault.services.secret_service import SecretService
from totp_vault.settings import Settings
from totp_vault.vault.client import KeyVaultSecretStore, SecretStore

log = get_logger(__name__)


async def _http_exception_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Framework-level errors (405, unknown routes) use the same {"error": ...} shape.
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def create_app(
    *,
    settings: Settings,
    store: SecretStore | None = None,
    audit_sink: AuditSink | None = None,
) -> FastAPI:
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    # Both raise ConfigurationError: the service must not start half-configured.
    authorizer = Authorizer(settings.allowed_group_id)
    if store is None:
        store = KeyVaultSecretStore(settings)

    audit_http: httpx.AsyncClient | None = None
    if audit_sink is None:
        if settings.audit_sink_enabled:
            audit_http = httpx.AsyncClient(timeout=settings.audit_timeout_seconds)
            audit_sink = LogAnalyticsSink(settings=settings, http=audit_http)
        else:
            log.warning("audit_sink_not_configured", fallback="local-log")
            audit_sink = LogOnlySink()

    dispatcher = AuditDispatcher(audit_sink)
    service = SecretService(
        store=store,
        authorizer=authorizer,
        name_prefix=settings.secret_name_prefix,
        min_secret_length=settings.min_secret_length,
    )

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        try:
            yield
        finally:
            await dispatcher.drain(timeout=settings.audit_drain_timeout_seconds)
            if audit_http is not None:
                await audit_http.aclose()
            await store.aclose()
            log.info("shutdown")

    app = FastAPI(
        title="TOTP Vault",
        version=__version__,
        docs_url=None if settings.env == "prod" else "/docs",
        openapi_url=None if settings.env == "prod" else "/openapi.json",
        lifespan=lifespan,
    )
    app.state.secret_service = service
    app.state.audit_dispatcher = dispatcher

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestContextMiddleware)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.include_router(health_router, tags=["health"])
    app.include_router(secrets_router)

    return app


# --- Module Notes -----------------------------------------------------------
# Tests inject `store` and `audit_sink`; production builds both from Settings.
