"""
API Middleware

Per-request logging for the report API. Each request gets an id, taken
from ``X-Request-ID`` when the dashboard sends one, that is bound into the
structlog context for every event logged while the request is handled.
"""

import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
import structlog

logger = structlog.get_logger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with its report path, status and duration"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        started = time.perf_counter()

        with structlog.contextvars.bound_contextvars(request_id=request_id, path=request.url.path):
            response = await call_next(request)
            duration_ms = round((time.perf_counter() - started) * 1000, 2)

            log = logger.warning if response.status_code >= 500 else logger.info
            log(
                "Request handled",
                method=request.method,
                status_code=response.status_code,
                query=str(request.url.query) or None,
                duration_ms=duration_ms,
            )

        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
        response.headers["X-Request-ID"] = request_id
        return response
