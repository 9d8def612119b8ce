import time
import uuid
from contextvars import ContextVar
from typing import Callable

import structlog
from django.http import HttpRequest, HttpResponse

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

logger = structlog.get_logger(__name__)


class CorrelationIdMiddleware:
    """Binds a correlation ID to every log line emitted while serving a request.

    Reads ``X-Request-ID`` from the incoming request or generates a UUID4,
    stores it in structlog's contextvars (so service-layer events such as
    ``order.payment_verified`` carry it) and echoes it back in the
    ``X-Request-ID`` response header.  Context is cleared after the
    response so worker threads never leak one request's id into the next.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        cid = request.META.get("HTTP_X_REQUEST_ID") or str(uuid.uuid4())
        correlation_id_var.set(cid)

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(correlation_id=cid)

        start = time.monotonic()
        logger.info("request_started", method=request.method, path=request.path)

        try:
            response = self.get_response(request)
            logger.info(
                "request_finished",
                method=request.method,
                path=request.path,
                status_code=response.status_code,
                duration_ms=round((time.monotonic() - start) * 1000, 2),
            )
            response["X-Request-ID"] = cid
            return response
        finally:
            structlog.contextvars.clear_contextvars()
