"""
Correlation ID Middleware
Adds a request id to every log line and response, and logs request duration
"""
from __future__ import annotations

import time
from uuid import uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from turnos.shared.logging import bind_context, clear_context, get_logger, set_correlation_id

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """
    Generates or extracts X-Request-ID and binds it to the logging context.

    The id is also stored on ``request.state.request_id`` so error bodies can
    echo it back as ``correlation_id``.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        correlation_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        request.state.request_id = correlation_id

        clear_context()
        set_correlation_id(correlation_id)
        bind_context(method=request.method, path=request.url.path)

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = int((time.perf_counter() - start_time) * 1000)
            logger.error("Request failed", error=str(e), duration_ms=duration_ms, exc_info=True)
            raise
        else:
            duration_ms = int((time.perf_counter() - start_time) * 1000)
            response.headers[REQUEST_ID_HEADER] = correlation_id
            response.headers["X-Response-Time"] = f"{duration_ms}ms"
            logger.info(
                f"{request.method} {request.url.path} - {response.status_code}",
                status_code=response.status_code,
                duration_ms=duration_ms,
                client_ip=request.client.host if request.client else None,
            )
            return response
        finally:
            clear_context()
