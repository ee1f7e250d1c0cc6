"""
totp_vault.audit.dispatcher

Fire-and-forget audit delivery.

Responsibilities:
- Schedule delivery as a background task that the response path never awaits.
- Catch and log delivery failures (never retried, never surfaced).
- Let shutdown wait, bounded, for in-flight deliveries.
"""

from __future__ import annotations

import asyncio

from totp_vault.audit.models import AuditRecord
from totp_vault.audit.sink import AuditSink
from totp_vault.observability.logging import get_logger

log = get_logger(__name__)


class AuditDispatcher:
    def __init__(self, sink: AuditSink) -> None:
        self._sink = sink
        # Strong references; the event loop only keeps weak ones to tasks.
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def dispatch(self, record: AuditRecord) -> None:
        snapshot = record.model_copy()
        task = asyncio.get_running_loop().create_task(self._deliver(snapshot))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _deliver(self, record: AuditRecord) -> None:
        try:
            await self._sink.send(record)
        except Exception as e:
            log.warning(
                "audit_delivery_failed",
                error=repr(e),
                operation=record.operation.value,
                secret_id=record.secret_id,
            )

    async def drain(self, timeout: float | None = None) -> None:
        if not self._pending:
            return
        _, not_done = await asyncio.wait(set(self._pending), timeout=timeout)
        if not_done:
            log.warning("audit_drain_timeout", pending=len(not_done))


# --- Module Notes -----------------------------------------------------------
# `drain` is called from app shutdown and from tests that need to observe delivery.
