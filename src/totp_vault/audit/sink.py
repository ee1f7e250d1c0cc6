"""
totp_vault.audit.sink

Audit sinks.

Responsibilities:
- `LogAnalyticsSink`: POST signed JSON batches to the Data Collector API.
- `LogOnlySink`: write records to the local structured log when no workspace
  is configured.
"""

from __future__ import annotations

import json
from email.utils import formatdate
from typing import Protocol

import httpx

from totp_vault.audit.models import AuditRecord
from totp_vault.audit.signing import CONTENT_TYPE, build_authorization
from totp_vault.observability.logging import get_logger
from totp_vault.settings import Settings

log = get_logger(__name__)

API_VERSION = "2016-04-01"


class AuditSink(Protocol):
    async def send(self, record: AuditRecord) -> None: ...


class LogOnlySink:
    async def send(self, record: AuditRecord) -> None:
        log.info("audit_record", **record.to_payload())


class LogAnalyticsSink:
    def __init__(self, *, settings: Settings, http: httpx.AsyncClient) -> None:
        if not settings.audit_sink_enabled:
            raise ValueError("Log Analytics workspace id and shared key are required")
        self._workspace_id: str = settings.log_analytics_workspace_id  # type: ignore[assignment]
        self._shared_key: str = settings.log_analytics_shared_key  # type: ignore[assignment]
        self._log_type = settings.log_analytics_log_type
        self._timeout = settings.audit_timeout_seconds
        self._url = settings.log_analytics_endpoint or (
            f"https://{self._workspace_id}.ods.opinsights.azure.com/api/logs"
            f"?api-version={API_VERSION}"
        )
        self._http = http

    async def send(self, record: AuditRecord) -> None:
        body = json.dumps([record.to_payload()]).encode("utf-8")
        date = formatdate(usegmt=True)
        headers = {
            "Content-Type": CONTENT_TYPE,
            "Log-Type": self._log_type,
            "x-ms-date": date,
            "time-generated-field": "Timestamp",
            "Authorization": build_authorization(
                workspace_id=self._workspace_id,
                shared_key=self._shared_key,
                content_length=len(body),
                date=date,
            ),
        }
        r = await self._http.post(self._url, content=body, headers=headers, timeout=self._timeout)
        r.raise_for_status()


# --- Module Notes -----------------------------------------------------------
# Sinks raise on failure; swallowing is the dispatcher's responsibility.
