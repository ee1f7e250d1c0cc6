"""
totp_vault.api.routers.health

Liveness endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    # Liveness only: no vault round-trip, so health checks never consume vault quota.
    return {"status": "ok"}
