"""Request id propagation and one access log line per HTTP request."""
from __future__ import annotations

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Reuses the caller's X-Request-ID (or mints one), echoes it back and
    logs ``[id] METHOD path status elapsed``.

    WebSocket upgrades are not HTTP requests for Starlette's base middleware
    and pass through untouched.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        started = time.perf_counter()
        response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(
            "[%s] %s %s %s %.1fms",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response
