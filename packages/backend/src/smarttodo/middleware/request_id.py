"""Request ID middleware — correlation id, access log, last-resort 500.

Learn: Every request gets an id, either from the incoming X-Request-ID
header or a fresh UUID. It is bound to structlog's contextvars so every
log line emitted while handling the request (auth.denied, errors, ...)
carries it, and it is echoed back in the response header. Context is
cleared at the start of each request so nothing leaks between requests.

This is the innermost middleware, so an exception no handler claimed
lands here: it is logged (traceback only outside production), turned
into the normalized 500 envelope, and still passes back through the
security and CORS layers. It is never re-raised to the ASGI server.
"""

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from smarttodo.api.errors import error_response, log_server_error

REQUEST_ID_HEADER = "X-Request-ID"

logger = structlog.get_logger()


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Bind a request id for logging and return it to the client."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        started = time.perf_counter()
        try:
            response: Response = await call_next(request)
        except Exception as exc:
            log_server_error(
                request, exc, production=request.app.state.settings.is_production
            )
            response = error_response(exc)
        response.headers[REQUEST_ID_HEADER] = request_id

        logger.info(
            "http.request",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return response
