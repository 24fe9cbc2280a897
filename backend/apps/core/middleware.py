"""
Core middleware.
"""

import time
import uuid
from collections.abc import Callable

from django.http import HttpRequest, HttpResponse

from apps.core.logging import bind_contextvars, clear_contextvars, get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class CorrelationIdMiddleware:
    """
    Binds a correlation ID to the logging context for the request.

    Reuses the caller's X-Request-ID when present so a client retry and the
    matching webhook delivery can be tied together in the logs.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        correlation_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.correlation_id = correlation_id  # type: ignore[attr-defined]

        clear_contextvars()
        bind_contextvars(correlation_id=correlation_id)
        started = time.monotonic()
        try:
            response = self.get_response(request)
            logger.debug(
                "request_finished",
                **{
                    "http.method": request.method,
                    "http.url_details.path": request.path,
                    "http.status_code": response.status_code,
                },
                duration_ms=(time.monotonic() - started) * 1000,
            )
            response[REQUEST_ID_HEADER] = correlation_id
            return response
        finally:
            clear_contextvars()
