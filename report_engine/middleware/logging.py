"""Request logging middleware."""

import logging
import time
from typing import Callable
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request with a generated request ID and its duration."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid4())
        request.state.request_id = request_id
        school_id = request.headers.get("X-School-Id")

        start_time = time.perf_counter()
        logger.info(
            f"[REQUEST] {request.method} {request.url.path} started",
            extra={
                "request_id": request_id,
                "school_id": school_id,
                "client_ip": request.client.host if request.client else None,
            },
        )

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
            logger.error(
                f"[REQUEST] {request.method} {request.url.path} failed after {duration_ms}ms: {e}",
                extra={"request_id": request_id, "school_id": school_id},
            )
            raise

        duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
        logger.info(
            f"[REQUEST] {request.method} {request.url.path} -> {response.status_code} in {duration_ms}ms",
            extra={
                "request_id": request_id,
                "school_id": school_id,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        response.headers["X-Request-ID"] = request_id
        return response
