"""
totp_vault.audit.models

Audit record model.

Responsibilities:
- Hold one access attempt, filled in as the request pipeline progresses.
- Serialize to the column names used by the audit workspace.
"""

from __future__ import annotations

import enum
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AuditOperation(str, enum.Enum):
    get = "GET"
    create = "CREATE"


class AuditRecord(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(tz=UTC), serialization_alias="Timestamp"
    )
    operation: AuditOperation = Field(serialization_alias="Operation")
    user_id: str = Field(default="unknown", serialization_alias="UserPrincipalName")
    secret_id: str = Field(default="invalid", serialization_alias="SecretId")
    success: bool = Field(default=False, serialization_alias="Success")
    error_message: str | None = Field(default=None, serialization_alias="ErrorMessage")
    client_address: str = Field(default="unknown", serialization_alias="ClientIP")

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# --- Module Notes -----------------------------------------------------------
# One record per request; the dispatcher sends a snapshot so late mutation of
# the live record cannot change what was shipped.
