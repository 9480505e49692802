"""Credential registry endpoints.

Reads are public: anyone may ask who owns a credential, whether it is
locked, or how many credentials an account holds.  Issue, revoke and
burn take the caller from the bearer token and leave every authorization
decision to CredentialRegistry.  Transfer needs no token: it is refused
with 423 whoever asks.  This module only translates exceptions to HTTP.

Handlers that touch the registry are `async def` with no await inside the
registry call, so they run one at a time on the event loop and no two
mutations interleave.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field

from sbt_service.api.dependencies import require_user
from sbt_service.core.config import SETTINGS
from sbt_service.core.metrics import ACTIVE_CREDENTIALS
from sbt_service.models.credential import Credential
from sbt_service.models.principal import Principal
from sbt_service.repos.credential_repo import InMemoryCredentialRepo
from sbt_service.services.credential_registry import (
    CredentialError,
    CredentialLockedError,
    CredentialNotFoundError,
    CredentialRegistry,
    DuplicateIdError,
    DuplicateOwnerError,
    UnauthorizedError,
)

router = APIRouter(tags=["credentials"])

# --- Module-level singletons (in-memory for now) ---
credential_repo = InMemoryCredentialRepo()
registry = CredentialRegistry(
    credential_repo,
    issuer=SETTINGS.sbt_issuer,
    base_uri=SETTINGS.sbt_base_uri,
    name=SETTINGS.sbt_name,
    symbol=SETTINGS.sbt_symbol,
    kyc_level=SETTINGS.sbt_kyc_level,
    max_events=SETTINGS.sbt_max_events,
)
# One registry per process; the gauge reads it at scrape time.
ACTIVE_CREDENTIALS.set_function(registry.total_supply)

_STATUS_BY_ERROR: dict[type[CredentialError], int] = {
    UnauthorizedError: status.HTTP_403_FORBIDDEN,
    CredentialNotFoundError: status.HTTP_404_NOT_FOUND,
    DuplicateOwnerError: status.HTTP_409_CONFLICT,
    DuplicateIdError: status.HTTP_409_CONFLICT,
    CredentialLockedError: status.HTTP_423_LOCKED,
}


def _http_error(e: CredentialError) -> HTTPException:
    return HTTPException(
        status_code=_STATUS_BY_ERROR.get(type(e), status.HTTP_400_BAD_REQUEST),
        detail={"code": e.code, "message": str(e)},
    )


# --- Pydantic schemas ---


class CredentialIssueIn(BaseModel):
    owner: str = Field(min_length=1)
    token_id: int = Field(ge=0)


class CredentialOut(BaseModel):
    id: int
    owner: str
    issuer: str
    uri: str
    burn_auth: int
    burn_auth_name: str
    locked: bool
    issued_at: int

    @staticmethod
    def from_credential(c: Credential) -> CredentialOut:
        return CredentialOut(
            id=c.id,
            owner=c.owner,
            issuer=c.issuer,
            uri=c.uri,
            burn_auth=int(c.burn_auth),
            burn_auth_name=c.burn_auth.name,
            locked=c.locked,
            issued_at=c.issued_at,
        )


class TransferIn(BaseModel):
    from_: str = Field(alias="from")
    to: str
    data: str | None = None  # selects the safe-transfer variant; never decoded


class OwnerOut(BaseModel):
    token_id: int
    owner: str


class UriOut(BaseModel):
    token_id: int
    uri: str


class LockedOut(BaseModel):
    token_id: int
    locked: bool


class BurnAuthOut(BaseModel):
    token_id: int
    burn_auth: int
    name: str


class BalanceOut(BaseModel):
    identity: str
    balance: int


class CapabilityOut(BaseModel):
    tag: str
    supported: bool


class RegistryOut(BaseModel):
    name: str
    symbol: str
    issuer: str
    base_uri: str
    kyc_level: int
    total_supply: int


class EventOut(BaseModel):
    kind: str
    token_id: int
    from_: str | None = Field(default=None, serialization_alias="from")
    to: str | None = None
    burn_auth: int | None = None


# --- Registry metadata ---


@router.get("/v1/registry", response_model=RegistryOut)
async def get_registry() -> RegistryOut:
    return RegistryOut(
        name=registry.name,
        symbol=registry.symbol,
        issuer=registry.issuer,
        base_uri=registry.base_uri,
        kyc_level=registry.kyc_level,
        total_supply=registry.total_supply(),
    )


@router.get("/v1/registry/events", response_model=list[EventOut])
async def list_events(token_id: int | None = None) -> list[EventOut]:
    return [
        EventOut(
            kind=e.kind,
            token_id=e.token_id,
            from_=e.from_,
            to=e.to,
            burn_auth=None if e.burn_auth is None else int(e.burn_auth),
        )
        for e in registry.events(token_id)
    ]


@router.get("/v1/capabilities/{tag}", response_model=CapabilityOut)
async def get_capability(tag: str) -> CapabilityOut:
    return CapabilityOut(tag=tag, supported=registry.supports_interface(tag))


@router.get("/v1/owners/{identity}/balance", response_model=BalanceOut)
async def get_balance(identity: str) -> BalanceOut:
    return BalanceOut(identity=identity, balance=registry.balance_of(identity))


# --- Issuance ---


@router.post(
    "/v1/credentials",
    response_model=CredentialOut,
    status_code=status.HTTP_201_CREATED,
)
async def issue_credential(
    body: CredentialIssueIn,
    principal: Annotated[Principal, Depends(require_user)],
) -> CredentialOut:
    try:
        credential = registry.issue(principal.identity, body.owner, body.token_id)
    except CredentialError as e:
        raise _http_error(e) from None
    return CredentialOut.from_credential(credential)


# --- Queries ---


@router.get("/v1/credentials/{token_id}", response_model=CredentialOut)
async def get_credential(token_id: int) -> CredentialOut:
    try:
        return CredentialOut.from_credential(registry.get(token_id))
    except CredentialError as e:
        raise _http_error(e) from None


@router.get("/v1/credentials/{token_id}/owner", response_model=OwnerOut)
async def get_owner(token_id: int) -> OwnerOut:
    try:
        return OwnerOut(token_id=token_id, owner=registry.owner_of(token_id))
    except CredentialError as e:
        raise _http_error(e) from None


@router.get("/v1/credentials/{token_id}/uri", response_model=UriOut)
async def get_uri(token_id: int) -> UriOut:
    try:
        return UriOut(token_id=token_id, uri=registry.token_uri(token_id))
    except CredentialError as e:
        raise _http_error(e) from None


@router.get("/v1/credentials/{token_id}/locked", response_model=LockedOut)
async def get_locked(token_id: int) -> LockedOut:
    try:
        return LockedOut(token_id=token_id, locked=registry.locked(token_id))
    except CredentialError as e:
        raise _http_error(e) from None


@router.get("/v1/credentials/{token_id}/burn-auth", response_model=BurnAuthOut)
async def get_burn_auth(token_id: int) -> BurnAuthOut:
    try:
        mode = registry.burn_auth(token_id)
    except CredentialError as e:
        raise _http_error(e) from None
    return BurnAuthOut(token_id=token_id, burn_auth=int(mode), name=mode.name)


# --- Transfer (always refused, for any caller) ---


@router.post("/v1/credentials/{token_id}/transfer")
async def transfer_credential(token_id: int, body: TransferIn) -> None:
    try:
        if body.data is None:
            registry.transfer_from(body.from_, body.to, token_id)
        else:
            registry.safe_transfer_from(
                body.from_, body.to, token_id, body.data.encode()
            )
    except CredentialError as e:
        raise _http_error(e) from None


# --- Destruction ---


@router.post(
    "/v1/credentials/{token_id}/revoke",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def revoke_credential(
    token_id: int,
    principal: Annotated[Principal, Depends(require_user)],
) -> Response:
    try:
        registry.revoke(principal.identity, token_id)
    except CredentialError as e:
        raise _http_error(e) from None
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/v1/credentials/{token_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def burn_credential(
    token_id: int,
    principal: Annotated[Principal, Depends(require_user)],
) -> Response:
    try:
        registry.burn(principal.identity, token_id)
    except CredentialError as e:
        raise _http_error(e) from None
    return Response(status_code=status.HTTP_204_NO_CONTENT)
