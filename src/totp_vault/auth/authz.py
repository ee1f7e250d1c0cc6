"""
totp_vault.auth.authz

Group allow-list authorization.

Responsibilities:
- Hold the single configured allow-list group.
- Fail fatally on missing configuration instead of defaulting to allow/deny.
"""

from __future__ import annotations

from collections.abc import Iterable

from totp_vault.errors import ConfigurationError


class Authorizer:
    def __init__(self, allowed_group_id: str | None) -> None:
        if not allowed_group_id or not allowed_group_id.strip():
            raise ConfigurationError("TOTP_VAULT_ALLOWED_GROUP_ID is not configured")
        self._allowed_group_id = allowed_group_id

    def is_authorized(self, groups: Iterable[str]) -> bool:
        # Exact match only: no wildcards, no nested group resolution.
        return self._allowed_group_id in set(groups)


# --- Module Notes -----------------------------------------------------------
# Constructed once in `api.app.create_app`; a missing group id stops startup.
