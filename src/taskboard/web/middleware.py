"""Request logging middleware for Taskboard.

This module provides middleware for logging HTTP requests with:
- Request method, path, and status code
- Request duration in milliseconds
- Correlation IDs for distributed tracing
- The calling principal, bound into every log line of the request

Example:
    >>> from fastapi import FastAPI
    >>> from taskboard.web.middleware import RequestLoggingMiddleware
    >>>
    >>> app = FastAPI()
    >>> app.add_middleware(RequestLoggingMiddleware)
"""

from __future__ import annotations

import time
import uuid
from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware

from taskboard.logging import (
    bind_principal_context,
    clear_principal_context,
    get_logger,
    set_correlation_id,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from starlette.requests import Request
    from starlette.responses import Response

logger = get_logger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request with timing, correlation ID and principal.

    The correlation ID is taken from the X-Correlation-ID header if present,
    otherwise a new UUID is generated, and echoed on the response. Principal
    fields are read from the identity headers configured in ``config.auth``
    when the app has a config attached.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
        set_correlation_id(correlation_id)

        config = getattr(request.app.state, "config", None)
        if config is not None:
            bind_principal_context(
                request.headers.get(config.auth.id_header),
                (request.headers.get(config.auth.email_header) or "").strip().lower() or None,
            )

        start_time = time.perf_counter()
        logger.info(
            "request_started",
            method=request.method,
            path=request.url.path,
            query=str(request.url.query) if request.url.query else None,
        )

        try:
            response = await call_next(request)

            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info(
                "request_completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
            )

            response.headers["X-Correlation-ID"] = correlation_id
            return response

        except Exception as exc:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                "request_failed",
                method=request.method,
                path=request.url.path,
                duration_ms=round(duration_ms, 2),
                error=str(exc),
                exc_info=True,
            )
            raise

        finally:
            set_correlation_id(None)
            clear_principal_context()
