from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from sbt_service.api.credentials import registry
from sbt_service.api.credentials import router as credentials_router
from sbt_service.api.gate import router as gate_router
from sbt_service.api.health import router as health_router
from sbt_service.core.config import SETTINGS
from sbt_service.core.logging import setup_logging
from sbt_service.middleware.metrics import MetricsMiddleware
from sbt_service.middleware.request_context import RequestContextMiddleware

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info(
        "registry ready  name=%s symbol=%s issuer=%s base_uri=%s",
        registry.name,
        registry.symbol,
        registry.issuer,
        registry.base_uri,
    )
    yield
    logger.info("shutting down  live_credentials=%d", registry.total_supply())


app = FastAPI(
    title="sbt-service",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

# Middleware execution order: last-added runs first (outermost layer).
# RequestContext (outermost) → Metrics → route handler
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

app.include_router(health_router)
app.include_router(credentials_router)
app.include_router(gate_router)

logger.info(
    "sbt-service started  env=%s log_level=%s port=%d docs=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    "on" if SETTINGS.is_dev else "off",
)
