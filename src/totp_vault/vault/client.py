"""
totp_vault.vault.client

Secret store client.

Responsibilities:
- Namespace numeric secret ids into vault secret names.
- Lazily construct a single Azure Key Vault client per process (ambient credential).
- Translate "not found" into `SecretNotFoundError`; let everything else propagate.
"""

from __future__ import annotations

import asyncio
from typing import Protocol

from azure.core.exceptions import ResourceNotFoundError
from azure.identity.aio import DefaultAzureCredential
from azure.keyvault.secrets.aio import SecretClient

from totp_vault.errors import ConfigurationError
from totp_vault.observability.logging import get_logger
from totp_vault.settings import Settings

log = get_logger(__name__)


class SecretNotFoundError(LookupError):
    def __init__(self, name: str) -> None:
        super().__init__(f"secret {name!r} not found")
        self.name = name


class SecretStore(Protocol):
    async def get(self, name: str) -> str: ...

    async def set(self, name: str, value: str) -> None: ...

    async def aclose(self) -> None: ...


def secret_name(secret_id: str, prefix: str = "totp-") -> str:
    return f"{prefix}{secret_id}"


class KeyVaultSecretStore:
    """
    Azure Key Vault backed store.

    The vault URL is checked eagerly; the SDK client and credential are built on
    first use and then shared by all requests.
    """

    def __init__(self, settings: Settings) -> None:
        vault_url = settings.vault_url
        if not vault_url:
            raise ConfigurationError(
                "TOTP_VAULT_KEYVAULT_NAME or TOTP_VAULT_KEYVAULT_URL must be configured"
            )
        self._vault_url = vault_url
        self._timeout = settings.vault_timeout_seconds
        self._client: SecretClient | None = None
        self._credential: DefaultAzureCredential | None = None
        self._lock = asyncio.Lock()

    async def _get_client(self) -> SecretClient:
        if self._client is not None:
            return self._client
        async with self._lock:
            # Re-check: another request may have finished construction while we waited.
            if self._client is None:
                self._credential = DefaultAzureCredential()
                # Callers retry through ordinary HTTP semantics; the SDK must not.
                self._client = SecretClient(
                    vault_url=self._vault_url, credential=self._credential, retry_total=0
                )
                log.info("vault_client_initialized", vault_url=self._vault_url)
        return self._client

    async def get(self, name: str) -> str:
        client = await self._get_client()
        try:
            async with asyncio.timeout(self._timeout):
                secret = await client.get_secret(name)
        except ResourceNotFoundError as e:
            raise SecretNotFoundError(name) from e
        if secret.value is None:
            raise SecretNotFoundError(name)
        return secret.value

    async def set(self, name: str, value: str) -> None:
        client = await self._get_client()
        async with asyncio.timeout(self._timeout):
            await client.set_secret(name, value, content_type="application/json")

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()
        if self._credential is not None:
            await self._credential.close()
        self._client = None
        self._credential = None


# --- Module Notes -----------------------------------------------------------
# No retries at any layer, including the SDK pipeline; the only bound on a call
# is vault_timeout_seconds.
