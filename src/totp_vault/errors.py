"""
totp_vault.errors

Error taxonomy for the secret endpoints.

Responsibilities:
- Map each pipeline failure to an HTTP status, a caller-facing message and an
  audit message.
- Separate operator misconfiguration (`ConfigurationError`) from request errors.
"""

from __future__ import annotations

from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
)


class ConfigurationError(RuntimeError):
    """Required configuration is missing. Raised once at startup."""


class RequestError(Exception):
    """
    A request-level rejection.

    `public_message` is returned to the caller; `audit_message` is what the
    audit record stores.
    """

    status_code: int = HTTP_400_BAD_REQUEST
    public_message: str = "Bad request"
    audit_message: str = "Bad request"

    def __init__(self, audit_message: str | None = None, *, public_message: str | None = None) -> None:
        if audit_message is not None:
            self.audit_message = audit_message
        if public_message is not None:
            self.public_message = public_message
        super().__init__(self.audit_message)


class ClientInputError(RequestError):
    status_code = HTTP_400_BAD_REQUEST


class InvalidSecretId(ClientInputError):
    public_message = "Invalid ID format. ID must be a numeric string."
    audit_message = "Invalid ID format"


class InvalidRequestBody(ClientInputError):
    public_message = "Request body must be a JSON object with string 'id' and 'secret' fields."
    audit_message = "Invalid request body"


class InvalidSecretValue(ClientInputError):
    public_message = "Invalid secret. Secret must be a base32 string of sufficient length."
    audit_message = "Invalid base32 secret"


class Unauthenticated(RequestError):
    status_code = HTTP_401_UNAUTHORIZED
    public_message = "Authentication required"
    audit_message = "Not authenticated"


class Unauthorized(RequestError):
    status_code = HTTP_403_FORBIDDEN
    public_message = "Access denied. You are not authorized to access this resource."
    audit_message = "Not authorized - not a member of allowed group"


class SecretNotFound(RequestError):
    status_code = HTTP_404_NOT_FOUND
    public_message = "TOTP configuration not found for the specified ID"
    audit_message = "Secret not found"


# --- Module Notes -----------------------------------------------------------
# Upstream failures (vault transport, codec/engine errors on stored data) are
# not RequestErrors; they propagate to the handler boundary and become a 500.
