"""
tests.conftest

Shared fixtures for the TOTP Vault test suite.

Responsibilities:
- In-memory secret store and recording audit sinks.
- Identity assertion header builder.
- An in-process app + httpx client with lifespan managed explicitly.
"""

from __future__ import annotations

import base64
import json
from collections.abc import AsyncIterator, Iterable

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from totp_vault.api.app import create_app
from totp_vault.audit.models import AuditRecord
from totp_vault.settings import Settings
from totp_vault.vault.client import SecretNotFoundError

ALLOWED_GROUP = "11111111-2222-3333-4444-555555555555"
OTHER_GROUP = "99999999-0000-0000-0000-000000000000"
GROUP_CLAIM = "http://schemas.microsoft.com/ws/2008/06/identity/claims/groups"


class FakeStore:
    def __init__(self, secrets: dict[str, str] | None = None) -> None:
        self.secrets: dict[str, str] = dict(secrets or {})
        self.get_error: Exception | None = None
        self.set_error: Exception | None = None
        self.closed = False

    async def get(self, name: str) -> str:
        if self.get_error is not None:
            raise self.get_error
        if name not in self.secrets:
            raise SecretNotFoundError(name)
        return self.secrets[name]

    async def set(self, name: str, value: str) -> None:
        if self.set_error is not None:
            raise self.set_error
        self.secrets[name] = value

    async def aclose(self) -> None:
        self.closed = True


class RecordingSink:
    def __init__(self) -> None:
        self.records: list[AuditRecord] = []

    async def send(self, record: AuditRecord) -> None:
        self.records.append(record)


class FailingSink:
    def __init__(self) -> None:
        self.attempts = 0

    async def send(self, record: AuditRecord) -> None:
        self.attempts += 1
        raise httpx.ConnectError("log sink unreachable")


def principal_header(
    user: str = "alice@example.com",
    groups: Iterable[str] = (ALLOWED_GROUP,),
    *,
    group_claim: str = GROUP_CLAIM,
) -> str:
    claims = [{"typ": "preferred_username", "val": user}]
    claims += [{"typ": group_claim, "val": g} for g in groups]
    payload = {"identityProvider": "aad", "userDetails": user, "claims": claims}
    return base64.b64encode(json.dumps(payload).encode("utf-8")).decode("ascii")


def member_headers(user: str = "alice@example.com") -> dict[str, str]:
    return {"x-ms-client-principal": principal_header(user)}


def non_member_headers(user: str = "mallory@example.com") -> dict[str, str]:
    return {"x-ms-client-principal": principal_header(user, groups=(OTHER_GROUP,))}


@pytest.fixture
def settings() -> Settings:
    return Settings(env="test", allowed_group_id=ALLOWED_GROUP, keyvault_name="kv-test")


@pytest.fixture
def store() -> FakeStore:
    return FakeStore({"totp-42": "JBSWY3DPEHPK3PXP"})


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def app(settings: Settings, store: FakeStore, sink: RecordingSink) -> FastAPI:
    return create_app(settings=settings, store=store, audit_sink=sink)


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    # httpx ASGITransport does not run lifespan; drive it explicitly.
    async with app.router.lifespan_context(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
            yield c


async def drain_audit(app: FastAPI) -> None:
    await app.state.audit_dispatcher.drain(timeout=5)
