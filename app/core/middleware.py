"""Request middleware: correlation IDs and per-request timing."""

import re
import time
import uuid
from collections.abc import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.core.logging import get_logger, request_id_ctx

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
RESPONSE_TIME_HEADER = "X-Response-Time-Ms"

# Caller-supplied IDs end up in every log line, so only short plain tokens pass
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


def resolve_request_id(header_value: str | None) -> str:
    """Return the caller's request ID if it is a safe token, else a fresh UUID4."""
    if header_value and _REQUEST_ID_PATTERN.fullmatch(header_value):
        return header_value
    return str(uuid.uuid4())


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Bind a request ID to the logging context and time every request."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Tag the request, run it, and stamp ID and latency on the response.

        Args:
            request: Incoming HTTP request.
            call_next: Next middleware/handler in chain.

        Returns:
            Response carrying X-Request-ID and X-Response-Time-Ms headers.
        """
        supplied = request.headers.get(REQUEST_ID_HEADER)
        request_id = resolve_request_id(supplied)
        token = request_id_ctx.set(request_id)
        started = time.perf_counter()

        try:
            if supplied and supplied != request_id:
                logger.warning("http.request_id_replaced", supplied_length=len(supplied))

            response = await call_next(request)
            elapsed_ms = (time.perf_counter() - started) * 1000

            log = logger.warning if response.status_code >= 500 else logger.info
            log(
                "http.request_completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(elapsed_ms, 3),
            )

            response.headers[REQUEST_ID_HEADER] = request_id
            response.headers[RESPONSE_TIME_HEADER] = f"{elapsed_ms:.3f}"
            return response
        finally:
            request_id_ctx.reset(token)
