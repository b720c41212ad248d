"""API middleware: CORS, request logging, and error handling.

Provides helper functions and middleware classes to configure cross-origin
resource sharing, structured request logging (via structlog), and automatic
conversion of ``SmartFormError`` subclasses into JSON ``ErrorResponse``
bodies.

# ─── MIDDLEWARE EXECUTION ORDER (Junior Developer Guide) ───────────────
#
# Starlette middleware is a stack (LIFO: last added, first executed):
#
#   In main.py:
#     app.add_middleware(ErrorHandlingMiddleware)   # added 1st → inner
#     app.add_middleware(RequestLoggingMiddleware)   # added 2nd → outermost
#
#   Request flow:
#     Client → RequestLogging → ErrorHandling → route handler
#
# So RequestLoggingMiddleware sees the *final* response status code
# (even if ErrorHandling replaced an exception with a structured error).
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from src.api.schemas import ErrorResponse
from src.utils.errors import (
    AdvisoryUnavailableError,
    AuthenticationError,
    ExtractionError,
    InvalidImageError,
    LLMError,
    NotFoundError,
    ProviderUnavailableError,
    RateLimitError,
    SmartFormError,
)
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

# Checked in order; the first matching class wins, so subclasses go first.
_STATUS_BY_ERROR: tuple[tuple[type[SmartFormError], int], ...] = (
    (NotFoundError, 404),
    (AuthenticationError, 401),
    (InvalidImageError, 422),
    (RateLimitError, 429),
    (ExtractionError, 502),
    (LLMError, 502),
    (ProviderUnavailableError, 502),
    (AdvisoryUnavailableError, 502),
)


def status_for_error(exc: SmartFormError) -> int:
    """Return the HTTP status for an application error (500 if unmapped)."""
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Add CORS middleware to the FastAPI application.

    Parameters
    ----------
    app:
        The FastAPI application instance.
    allowed_origins:
        Explicit list of allowed origins.  Defaults to ``["*"]`` for
        development; override with the frontend origin in production.
    """
    origins = allowed_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# ---------------------------------------------------------------------------
# Request Logging
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status code, and duration."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        response: Response | None = None

        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            status_code = response.status_code if response else 500
            _logger.info(
                "http_request",
                method=request.method,
                path=str(request.url.path),
                status=status_code,
                duration_ms=duration_ms,
            )


# ---------------------------------------------------------------------------
# Error Handling
# ---------------------------------------------------------------------------


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Catch ``SmartFormError`` subclasses and return structured JSON errors.

    The client sees the exception class name and its message; stack traces
    and provider details stay in the server log.  Generic Python exceptions
    bubble up to FastAPI's default 500 handler.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except SmartFormError as exc:
            status_code = status_for_error(exc)
            log = _logger.error if status_code >= 500 else _logger.warning
            log(
                "application_error",
                error_type=type(exc).__name__,
                message=exc.message,
                provider=exc.provider_name,
                path=str(request.url.path),
                status=status_code,
            )
            body = ErrorResponse(
                error=type(exc).__name__,
                detail=exc.message,
            )
            return JSONResponse(
                status_code=status_code,
                content=body.model_dump(),
            )
