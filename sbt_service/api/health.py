"""Liveness, readiness and Prometheus scrape endpoints.

/health answers "is the process up", and reports how many credentials
are live.  /ready always passes: state is in-process, so there is no
backing service to wait on.  /metrics returns the text exposition
format, not JSON.
"""

from __future__ import annotations

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from sbt_service.api.credentials import registry

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict:
    return {
        "status": "ok",
        "registry": {
            "name": registry.name,
            "total_supply": registry.total_supply(),
        },
    }


@router.get("/ready")
async def ready() -> Response:
    return Response(status_code=200)


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
