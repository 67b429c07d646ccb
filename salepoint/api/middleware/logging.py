"""
Request logging middleware.

Every event logged while a request is handled carries its ``http_request_id``.
The terminal gateway sends the sale's idempotency key as ``X-Request-ID``, so
a submission can be followed from the till to the finalization transaction.
"""

import time
import uuid
from collections.abc import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from salepoint.config import get_logger, sale_context

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log request start, completion or failure, with timing headers."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        request.state.request_id = request_id
        started = time.perf_counter()

        with sale_context(
            http_request_id=request_id,
            method=request.method,
            path=request.url.path,
        ):
            logger.info(
                "request_started",
                client=request.client.host if request.client else "unknown",
            )
            try:
                response = await call_next(request)
            except Exception as e:
                logger.error(
                    "request_failed",
                    error=str(e),
                    duration_ms=round((time.perf_counter() - started) * 1000, 2),
                )
                raise

            duration_ms = (time.perf_counter() - started) * 1000
            log = logger.warning if response.status_code >= 400 else logger.info
            log("request_completed", status=response.status_code, duration_ms=round(duration_ms, 2))

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
        return response
