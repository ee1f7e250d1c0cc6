"""
totp_vault.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Encapsulate app.state access patterns (secret service, audit dispatcher).
"""

from __future__ import annotations

from fastapi import Request

from totp_vault.audit.dispatcher import AuditDispatcher
from totp_vault.services.secret_service import SecretService


def secret_service_dep(request: Request) -> SecretService:
    # Built once in `totp_vault.api.app.create_app`; shares the single store handle.
    return request.app.state.secret_service  # type: ignore[attr-defined]


def audit_dispatcher_dep(request: Request) -> AuditDispatcher:
    return request.app.state.audit_dispatcher  # type: ignore[attr-defined]


# --- Module Notes -----------------------------------------------------------
# Tests reach the same objects through `app.state` to observe audit delivery.
