"""
totp_vault.api.routers.secrets

TOTP secret endpoints.

Responsibilities:
- `GET /secret/{id}`: current code for a stored secret.
- `HEAD /secret/{id}`: existence check, status only.
- `POST /secret`: register a new secret.
- Emit exactly one audit record per request, whatever the outcome.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field
from starlette.status import HTTP_200_OK, HTTP_201_CREATED, HTTP_500_INTERNAL_SERVER_ERROR

from totp_vault.api.deps import audit_dispatcher_dep, secret_service_dep
from totp_vault.audit.dispatcher import AuditDispatcher
from totp_vault.audit.models import AuditOperation, AuditRecord
from totp_vault.auth.principal import PRINCIPAL_HEADER
from totp_vault.errors import RequestError
from totp_vault.observability.logging import get_logger
from totp_vault.services.secret_service import SecretService

log = get_logger(__name__)

router = APIRouter(prefix="/secret", tags=["secrets"])

INTERNAL_ERROR_MESSAGE = "An internal error occurred while processing the request"


class TotpCodeResponse(BaseModel):
    code: str
    remaining_seconds: int = Field(serialization_alias="remainingSeconds")


class CreateSecretResponse(BaseModel):
    message: str
    id: str


def client_address(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for") or request.headers.get("x-client-ip")
    if forwarded:
        return forwarded
    if request.client is not None and request.client.host:
        return request.client.host
    return "unknown"


def _error_response(status_code: int, message: str, *, with_body: bool) -> Response:
    if not with_body:
        return Response(status_code=status_code)
    return JSONResponse(status_code=status_code, content={"error": message})


async def _audited(
    request: Request,
    *,
    operation: AuditOperation,
    secret_id: str | None,
    dispatcher: AuditDispatcher,
    pipeline: Callable[[AuditRecord], Awaitable[Response]],
    with_body: bool = True,
) -> Response:
    record = AuditRecord(
        operation=operation,
        secret_id=secret_id or "invalid",
        client_address=client_address(request),
    )
    try:
        response = await pipeline(record)
        record.success = True
        return response
    except RequestError as e:
        record.error_message = e.audit_message
        log.info("request_rejected", status=e.status_code, reason=e.audit_message)
        return _error_response(e.status_code, e.public_message, with_body=with_body)
    except Exception as e:
        # Single conversion point for upstream/unexpected failures; detail stays internal.
        record.error_message = str(e) or type(e).__name__
        log.exception("request_failed", operation=operation.value)
        return _error_response(
            HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE, with_body=with_body
        )
    finally:
        dispatcher.dispatch(record)


@router.get("/{secret_id}")
async def get_totp_code(
    secret_id: str,
    request: Request,
    service: SecretService = Depends(secret_service_dep),
    dispatcher: AuditDispatcher = Depends(audit_dispatcher_dep),
) -> Response:
    async def pipeline(record: AuditRecord) -> Response:
        result = await service.get_code(
            secret_id=secret_id,
            principal_header=request.headers.get(PRINCIPAL_HEADER),
            record=record,
        )
        body = TotpCodeResponse(code=result.code, remaining_seconds=result.remaining_seconds)
        return JSONResponse(status_code=HTTP_200_OK, content=body.model_dump(by_alias=True))

    return await _audited(
        request,
        operation=AuditOperation.get,
        secret_id=secret_id,
        dispatcher=dispatcher,
        pipeline=pipeline,
    )


@router.head("/{secret_id}")
async def secret_exists(
    secret_id: str,
    request: Request,
    service: SecretService = Depends(secret_service_dep),
    dispatcher: AuditDispatcher = Depends(audit_dispatcher_dep),
) -> Response:
    async def pipeline(record: AuditRecord) -> Response:
        await service.exists(
            secret_id=secret_id,
            principal_header=request.headers.get(PRINCIPAL_HEADER),
            record=record,
        )
        return Response(status_code=HTTP_200_OK)

    return await _audited(
        request,
        # Existence checks run the Retrieve ladder and are audited as reads.
        operation=AuditOperation.get,
        secret_id=secret_id,
        dispatcher=dispatcher,
        pipeline=pipeline,
        with_body=False,
    )


# `/secret/` has an empty id. Without these routes Starlette would redirect it to
# `/secret` (405, unaudited) instead of answering 400 through the audited ladder.
@router.get("/", include_in_schema=False)
async def get_totp_code_without_id(
    request: Request,
    service: SecretService = Depends(secret_service_dep),
    dispatcher: AuditDispatcher = Depends(audit_dispatcher_dep),
) -> Response:
    return await get_totp_code("", request, service, dispatcher)


@router.head("/", include_in_schema=False)
async def secret_exists_without_id(
    request: Request,
    service: SecretService = Depends(secret_service_dep),
    dispatcher: AuditDispatcher = Depends(audit_dispatcher_dep),
) -> Response:
    return await secret_exists("", request, service, dispatcher)


@router.post("")
async def create_secret(
    request: Request,
    service: SecretService = Depends(secret_service_dep),
    dispatcher: AuditDispatcher = Depends(audit_dispatcher_dep),
) -> Response:
    # Body is read raw: it must not be validated before authn/authz have run.
    async def pipeline(record: AuditRecord) -> Response:
        secret_id = await service.register(
            body=await request.body(),
            principal_header=request.headers.get(PRINCIPAL_HEADER),
            record=record,
        )
        body = CreateSecretResponse(message="TOTP secret saved successfully", id=secret_id)
        return JSONResponse(status_code=HTTP_201_CREATED, content=body.model_dump())

    return await _audited(
        request,
        operation=AuditOperation.create,
        secret_id=None,
        dispatcher=dispatcher,
        pipeline=pipeline,
    )


# --- Module Notes -----------------------------------------------------------
# Methods other than GET/HEAD/POST fall through to Starlette's 405, rendered as
# {"error": ...} by the handler installed in `api.app`.
