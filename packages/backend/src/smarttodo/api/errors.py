"""Error normalizer — the single place failures become client responses.

Learn: normalize() is a total function from a raised exception to
(status_code, {"success": false, "message": ...}). Route handlers and
dependencies never build error responses themselves; they raise one of
the smarttodo.errors types and the handlers registered here map it.

    MissingCredential / InvalidCredential / ExpiredCredential /
    UnknownSubject / InvalidLogin             → 401, fixed message per kind
    Forbidden                                 → 403
    ResourceNotFound (absent or malformed id) → 404
    DuplicateKey(field)                       → 400 "<Field> already exists"
    ValidationFailure / request validation    → 400, messages comma-joined
    StoreUnavailable / anything else          → 500 "Server Error"

Internal detail is logged, never returned. Tracebacks are only logged
outside production.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from smarttodo.errors import (
    AppError,
    AuthError,
    DuplicateKey,
    ExpiredCredential,
    Forbidden,
    InvalidCredential,
    InvalidLogin,
    MissingCredential,
    ResourceNotFound,
    UnknownSubject,
    ValidationFailure,
)

logger = structlog.get_logger()

SERVER_ERROR_MESSAGE = "Server Error"

# Fixed (status, message) per failure type.
FIXED_RESPONSES: dict[type, tuple[int, str]] = {
    MissingCredential: (
        401,
        "Not authorized to access this route. Please provide a valid token.",
    ),
    InvalidCredential: (401, "Invalid token. Please login again."),
    ExpiredCredential: (401, "Token expired. Please login again."),
    UnknownSubject: (401, "User not found. Token may be invalid."),
    InvalidLogin: (401, "Invalid email or password"),
    Forbidden: (403, "Not authorized to access this resource"),
    ResourceNotFound: (404, "Resource not found"),
    AuthError: (401, "Not authorized to access this route."),
}

HTTP_MESSAGES = {
    404: "Route not found",
    405: "Method not allowed",
}


def envelope(message: str) -> dict:
    return {"success": False, "message": message}


def _validation_messages(exc: RequestValidationError) -> list[str]:
    messages = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        field = ".".join(loc)
        msg = err.get("msg", "Invalid value")
        messages.append(f"{field}: {msg}" if field else msg)
    return messages


def normalize(exc: Exception) -> tuple[int, dict]:
    """Map any exception to (status_code, envelope)."""
    fixed = FIXED_RESPONSES.get(type(exc))
    if fixed is not None:
        status, message = fixed
        return status, envelope(message)

    if isinstance(exc, DuplicateKey):
        field = exc.field[:1].upper() + exc.field[1:]
        return 400, envelope(f"{field} already exists")

    if isinstance(exc, ValidationFailure):
        return 400, envelope(", ".join(exc.messages))

    if isinstance(exc, RequestValidationError):
        return 400, envelope(", ".join(_validation_messages(exc)))

    if isinstance(exc, StarletteHTTPException):
        message = HTTP_MESSAGES.get(exc.status_code, str(exc.detail))
        return exc.status_code, envelope(message)

    # Subclasses of a mapped type fall back to their nearest mapped base.
    for known, (status, message) in FIXED_RESPONSES.items():
        if isinstance(exc, known):
            return status, envelope(message)

    return 500, envelope(SERVER_ERROR_MESSAGE)


def error_response(exc: Exception) -> JSONResponse:
    status, body = normalize(exc)
    headers = {"WWW-Authenticate": "Bearer"} if status == 401 else None
    return JSONResponse(status_code=status, content=body, headers=headers)


def log_server_error(request: Request, exc: Exception, production: bool) -> None:
    """Traceback only outside production; production gets the error type alone."""
    if production:
        logger.error(
            "app.unhandled_error",
            path=request.url.path,
            error_type=type(exc).__name__,
        )
    else:
        logger.exception(
            "app.unhandled_error",
            path=request.url.path,
            error_type=type(exc).__name__,
            error=str(exc),
            exc_info=exc,
        )


def register_error_handlers(app: FastAPI, production: bool) -> None:
    """Route every typed failure through normalize().

    Anything else is caught by RequestIdMiddleware, inside the middleware
    stack, so the 500 still gets request-id and security headers and is
    never re-raised to the server.
    """

    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        response = error_response(exc)
        if response.status_code >= 500:
            log_server_error(request, exc, production)
        return response

    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return error_response(exc)

    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        response = error_response(exc)
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
