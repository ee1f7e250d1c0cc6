"""
totp_vault.auth.principal

Identity assertion parsing.

Responsibilities:
- Decode the base64 JSON client principal header set by the hosting platform.
- Resolve the username and group claims through a swappable `ClaimTable`.
"""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass
from typing import Any

from totp_vault.auth.models import Principal

PRINCIPAL_HEADER = "x-ms-client-principal"

UNKNOWN_USER = "unknown"


@dataclass(frozen=True, slots=True)
class ClaimTable:
    """
    Claim types understood for a given identity provider.

    `username_types` is ordered by preference; the first claim matching the
    earliest type wins.
    """

    username_types: tuple[str, ...]
    group_types: frozenset[str]
    fallback_username_field: str = "userDetails"


# Entra ID (Azure AD) as surfaced by App Service / Static Web Apps auth.
DEFAULT_CLAIMS = ClaimTable(
    username_types=(
        "preferred_username",
        "http://schemas.xmlsoap.org/ws/2005/05/identity/claims/upn",
        "upn",
    ),
    group_types=frozenset(
        {
            "groups",
            "http://schemas.microsoft.com/ws/2008/06/identity/claims/groups",
        }
    ),
)


def parse_client_principal(header: str | None) -> dict[str, Any] | None:
    if not header:
        return None
    try:
        # Pad leniently; some proxies strip trailing "=".
        raw = base64.b64decode(header + "=" * (-len(header) % 4), validate=True)
        payload = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None
    if not isinstance(payload, dict):
        return None
    return payload


def _claims(payload: dict[str, Any]) -> list[dict[str, Any]]:
    claims = payload.get("claims")
    if not isinstance(claims, list):
        return []
    return [c for c in claims if isinstance(c, dict)]


def resolve_username(payload: dict[str, Any], table: ClaimTable = DEFAULT_CLAIMS) -> str:
    claims = _claims(payload)
    for typ in table.username_types:
        for claim in claims:
            if claim.get("typ") == typ and claim.get("val"):
                return str(claim["val"])
    fallback = payload.get(table.fallback_username_field)
    return str(fallback) if fallback else UNKNOWN_USER


def resolve_groups(payload: dict[str, Any], table: ClaimTable = DEFAULT_CLAIMS) -> frozenset[str]:
    return frozenset(
        str(c["val"]) for c in _claims(payload) if c.get("typ") in table.group_types and "val" in c
    )


def extract_principal(header: str | None, table: ClaimTable = DEFAULT_CLAIMS) -> Principal | None:
    """
    Build a `Principal` from the raw header value.

    Returns None (never raises) when the header is absent or undecodable; the
    caller treats that as unauthenticated.
    """
    payload = parse_client_principal(header)
    if payload is None:
        return None
    return Principal(user_id=resolve_username(payload, table), groups=resolve_groups(payload, table))


# --- Module Notes -----------------------------------------------------------
# Supporting another identity provider means passing a different ClaimTable,
# not changing the resolution functions.
