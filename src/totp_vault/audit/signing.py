"""
totp_vault.audit.signing

SharedKey request signing for the Log Analytics HTTP Data Collector API.

Responsibilities:
- Build the canonical string-to-sign.
- HMAC-SHA256 it with the base64-decoded workspace key.
"""

from __future__ import annotations

import base64
import hashlib
import hmac

LOGS_RESOURCE = "/api/logs"
CONTENT_TYPE = "application/json"


def string_to_sign(
    *,
    content_length: int,
    date: str,
    method: str = "POST",
    content_type: str = CONTENT_TYPE,
    resource: str = LOGS_RESOURCE,
) -> str:
    return f"{method}\n{content_length}\n{content_type}\nx-ms-date:{date}\n{resource}"


def build_authorization(*, workspace_id: str, shared_key: str, content_length: int, date: str) -> str:
    """
    Return the `Authorization` header value: `SharedKey <workspace>:<signature>`.

    `shared_key` is the base64 workspace key as shown in the portal.
    """
    message = string_to_sign(content_length=content_length, date=date).encode("utf-8")
    digest = hmac.new(base64.b64decode(shared_key), message, hashlib.sha256).digest()
    signature = base64.b64encode(digest).decode("ascii")
    return f"SharedKey {workspace_id}:{signature}"


# --- Module Notes -----------------------------------------------------------
# The date passed here must be the exact `x-ms-date` header value sent with the
# request; the workspace recomputes the signature from it.
