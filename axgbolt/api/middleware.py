"""API middleware for AXG Bolt.

Provides:
- The error envelope every failed request is answered with
- Request ID correlation and access logging
- A last-resort handler for unexpected exceptions
"""

import time
from typing import Any, Callable
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"

# Health checks are polled constantly; completing them is not worth a log line
QUIET_PATHS = frozenset({"/health", "/ready"})


def error_response(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    details: list[dict[str, Any]] | None = None,
) -> JSONResponse:
    """Render ``{error_code, message, details, request_id}``."""
    return JSONResponse(
        status_code=status_code,
        content={
            "error_code": error_code,
            "message": message,
            "details": details or [],
            "request_id": getattr(request.state, "request_id", None),
        },
    )


# ============================================================================
# Request ID Middleware
# ============================================================================


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag every request with an ID and log its outcome.

    A client-supplied ``X-Request-ID`` is reused; otherwise one is
    generated. The ID is bound into the structlog context for the
    duration of the request and echoed in the response header. When the
    request was authenticated the completion log carries the user ID.
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        request.state.request_id = request_id
        structlog.contextvars.bind_contextvars(request_id=request_id)

        started = time.perf_counter()
        response: Response | None = None
        try:
            response = await call_next(request)
        finally:
            if request.url.path not in QUIET_PATHS:
                logger.info(
                    "Request completed",
                    method=request.method,
                    path=request.url.path,
                    status_code=response.status_code if response is not None else 500,
                    duration_ms=round((time.perf_counter() - started) * 1000, 2),
                    user_id=getattr(request.state, "user_id", None),
                )
            structlog.contextvars.unbind_contextvars("request_id")

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


# ============================================================================
# Error Handling Middleware
# ============================================================================


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Answer unexpected exceptions with a 500 in the standard envelope.

    Domain and validation errors never get here; the app's exception
    handlers render those.
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            logger.exception(
                "Unhandled exception",
                path=request.url.path,
                method=request.method,
                error=str(e),
            )
            return error_response(
                request,
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "INTERNAL_ERROR",
                "An internal error occurred",
            )


# ============================================================================
# Middleware Setup
# ============================================================================


def setup_middleware(app: FastAPI) -> None:
    """Install the error handler inside the request ID middleware.

    Last added runs first, so error responses already carry the ID.
    """
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(RequestIdMiddleware)
