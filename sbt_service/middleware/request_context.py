"""Request context middleware: request IDs, caller tagging, timing.

Every request gets an ID, echoed from X-Request-ID or freshly generated,
stored in a ContextVar from sbt_service.core.logging.  The logging filter
installed by setup_logging copies it (and the caller resolved by
require_user) onto every LogRecord, so a registry rejection logged deep in
the service layer still carries the request that caused it.

ContextVars rather than thread-locals: async handlers for concurrent
requests share one thread, and each task needs its own copy.
"""

from __future__ import annotations

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from sbt_service.core.logging import caller_var, request_id_var

logger = logging.getLogger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assign a request ID, time the request, log one summary line."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        req_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request_id_var.set(req_id)
        caller_var.set(None)

        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000, 1)

        logger.info(
            "%s %s → %d (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            extra={
                "request_id": req_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        response.headers["X-Request-ID"] = req_id
        return response
