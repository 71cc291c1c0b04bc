"""Request/response logging middleware for the analytics API."""

import time
import uuid
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from deck_analytics.core.logging_config import get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
QUIET_PATHS = frozenset({"/health"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with a correlation id and its duration.

    A caller-supplied X-Request-ID is reused; otherwise a short id is
    generated. Health checks are logged at DEBUG.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        path = request.url.path
        quiet = path in QUIET_PATHS
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"Request failed: {request.method} {path}",
                extra={
                    "extra_data": {
                        "request_id": request_id,
                        "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                        "error": str(e),
                    }
                },
                exc_info=True,
            )
            raise

        if response.status_code >= 500:
            log = logger.error
        elif response.status_code >= 400:
            log = logger.warning
        else:
            log = logger.debug if quiet else logger.info

        log(
            f"{request.method} {path} -> {response.status_code}",
            extra={
                "extra_data": {
                    "request_id": request_id,
                    "status_code": response.status_code,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                }
            },
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
