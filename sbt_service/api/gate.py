"""Credential-gated counter endpoints.

POST /v1/gate/increment succeeds only while the caller holds a
credential in the registry; the check is made on every call.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from sbt_service.api.credentials import registry
from sbt_service.api.dependencies import require_user
from sbt_service.models.principal import Principal
from sbt_service.services.access_gate import AccessGate, NoCredentialError

router = APIRouter(prefix="/v1/gate", tags=["gate"])

access_gate = AccessGate(registry)


class CountOut(BaseModel):
    count: int


@router.post("/increment", response_model=CountOut)
async def increment(
    principal: Annotated[Principal, Depends(require_user)],
) -> CountOut:
    try:
        count = access_gate.increment(principal.identity)
    except NoCredentialError as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=str(e),
        ) from None
    return CountOut(count=count)


@router.get("/count", response_model=CountOut)
async def get_count() -> CountOut:
    return CountOut(count=access_gate.get_count())
