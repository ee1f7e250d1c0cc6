"""
totp_vault.services.secret_service

Secret endpoint pipeline.

Responsibilities:
- Validate ids and registration bodies.
- Authenticate (identity assertion) and authorize (allow-list group).
- Fetch/store secrets and compute codes.
- Fill in the caller's `AuditRecord` as facts become known.

Every step raises a `RequestError` on rejection; store and engine failures
propagate unchanged to the router boundary.
"""

from __future__ import annotations

import json
import re

from pydantic import BaseModel, StrictStr, ValidationError

from totp_vault.audit.models import AuditRecord
from totp_vault.auth.authz import Authorizer
from totp_vault.auth.models import Principal
from totp_vault.auth.principal import DEFAULT_CLAIMS, ClaimTable, extract_principal
from totp_vault.errors import (
    InvalidRequestBody,
    InvalidSecretId,
    InvalidSecretValue,
    SecretNotFound,
    Unauthenticated,
    Unauthorized,
)
from totp_vault.observability.logging import get_logger
from totp_vault.totp import codec
from totp_vault.totp.engine import TotpCode, compute
from totp_vault.vault.client import SecretNotFoundError, SecretStore, secret_name

log = get_logger(__name__)

_SECRET_ID_RE = re.compile(r"[0-9]+")


class CreateSecretRequest(BaseModel):
    id: StrictStr
    secret: StrictStr


def is_valid_secret_id(secret_id: str | None) -> bool:
    return bool(secret_id) and _SECRET_ID_RE.fullmatch(secret_id) is not None


class SecretService:
    def __init__(
        self,
        *,
        store: SecretStore,
        authorizer: Authorizer,
        name_prefix: str = "totp-",
        min_secret_length: int = codec.DEFAULT_MIN_SECRET_LENGTH,
        claims: ClaimTable = DEFAULT_CLAIMS,
    ) -> None:
        self._store = store
        self._authorizer = authorizer
        self._name_prefix = name_prefix
        self._min_secret_length = min_secret_length
        self._claims = claims

    # --- pipeline steps -----------------------------------------------------

    def _check_id(self, secret_id: str | None) -> str:
        if not is_valid_secret_id(secret_id):
            raise InvalidSecretId()
        return secret_id  # type: ignore[return-value]

    def _authenticate(self, header: str | None, record: AuditRecord) -> Principal:
        principal = extract_principal(header, self._claims)
        if principal is None:
            raise Unauthenticated()
        record.user_id = principal.user_id
        return principal

    def _authorize(self, principal: Principal) -> None:
        if not self._authorizer.is_authorized(principal.groups):
            raise Unauthorized()

    async def _fetch(self, secret_id: str) -> str:
        try:
            return await self._store.get(secret_name(secret_id, self._name_prefix))
        except SecretNotFoundError as e:
            raise SecretNotFound() from e

    def _parse_body(self, body: bytes) -> CreateSecretRequest:
        try:
            data = json.loads(body)
        except ValueError as e:
            raise InvalidRequestBody("Invalid JSON body") from e
        if not isinstance(data, dict):
            raise InvalidRequestBody("Request body is not a JSON object")
        try:
            return CreateSecretRequest.model_validate(data)
        except ValidationError as e:
            raise InvalidRequestBody("Missing or invalid 'id' or 'secret' field") from e

    # --- operations ---------------------------------------------------------

    async def get_code(
        self, *, secret_id: str, principal_header: str | None, record: AuditRecord
    ) -> TotpCode:
        secret_id = self._check_id(secret_id)
        principal = self._authenticate(principal_header, record)
        self._authorize(principal)
        raw = await self._fetch(secret_id)
        result = compute(codec.decode(raw))
        log.info("totp_code_issued", secret_id=secret_id, user=principal.user_id)
        return result

    async def exists(
        self, *, secret_id: str, principal_header: str | None, record: AuditRecord
    ) -> None:
        secret_id = self._check_id(secret_id)
        principal = self._authenticate(principal_header, record)
        self._authorize(principal)
        # Value is fetched and dropped; it never leaves this method.
        await self._fetch(secret_id)

    async def register(
        self, *, body: bytes, principal_header: str | None, record: AuditRecord
    ) -> str:
        principal = self._authenticate(principal_header, record)
        self._authorize(principal)

        req = self._parse_body(body)
        record.secret_id = req.id or "invalid"
        secret_id = self._check_id(req.id)

        cleaned = codec.normalize_base32(req.secret)
        if not codec.validate_base32(cleaned, self._min_secret_length):
            raise InvalidSecretValue()

        await self._store.set(secret_name(secret_id, self._name_prefix), codec.encode(cleaned))
        log.info("totp_secret_registered", secret_id=secret_id, user=principal.user_id)
        return secret_id


# --- Module Notes -----------------------------------------------------------
# Step order is part of the contract: id format is checked before authentication
# for reads, and after authorization for registration.
