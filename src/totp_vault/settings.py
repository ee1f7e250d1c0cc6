"""
totp_vault.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (e.g., the Log Analytics shared key).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Env-driven configuration, prefixed with `TOTP_VAULT_`.

    `allowed_group_id` and the vault location have no defaults on purpose: the
    application refuses to start without them (see `api.app.create_app`).
    """

    model_config = SettingsConfigDict(env_prefix="TOTP_VAULT_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "totp-vault"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Authorization: membership in this one group grants access.
    allowed_group_id: str | None = None

    # Secret vault (Azure Key Vault). `keyvault_url` wins over `keyvault_name`.
    keyvault_name: str | None = None
    keyvault_url: str | None = None
    secret_name_prefix: str = "totp-"
    vault_timeout_seconds: float = 10.0

    # Minimum length of a base32 secret accepted on registration.
    min_secret_length: int = Field(default=16, ge=1)

    # Audit sink (Log Analytics HTTP Data Collector API).
    log_analytics_workspace_id: str | None = None
    log_analytics_shared_key: str | None = Field(default=None, repr=False)
    log_analytics_log_type: str = "TOTPVaultAudit"
    log_analytics_endpoint: str | None = None
    audit_timeout_seconds: float = 5.0
    audit_drain_timeout_seconds: float = 5.0

    @property
    def vault_url(self) -> str | None:
        if self.keyvault_url:
            return self.keyvault_url.rstrip("/")
        if self.keyvault_name:
            return f"https://{self.keyvault_name}.vault.azure.net"
        return None

    @property
    def audit_sink_enabled(self) -> bool:
        return bool(self.log_analytics_workspace_id and self.log_analytics_shared_key)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Every other module receives a Settings instance explicitly; only the process
# entrypoint calls get_settings().
