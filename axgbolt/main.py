"""AXG Bolt API main application module.

This module initializes the FastAPI application and configures
core middleware, routers, exception handlers and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException

from axgbolt.api import health_router, products_router, reviews_router, users_router
from axgbolt.api.middleware import error_response, setup_middleware
from axgbolt.domain.exceptions import DomainError, RateLimitExceededError
from axgbolt.infrastructure.config import settings
from axgbolt.infrastructure.database import create_tables
from axgbolt.infrastructure.logging import configure_logging

logger = structlog.get_logger()

API_PREFIX = "/api"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    # Startup
    configure_logging()
    logger.info(
        "Starting AXG Bolt API",
        version=settings.api_version,
        environment=settings.environment,
        debug=settings.debug,
    )
    await create_tables()

    yield

    # Shutdown
    logger.info("Shutting down AXG Bolt API")


app = FastAPI(
    title="AXG Bolt API",
    description="Camera accessories storefront backend",
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware (must be added before custom middleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Setup custom middleware (request ID, error handling)
setup_middleware(app)

# Include routers
app.include_router(health_router, tags=["Health"])
app.include_router(users_router, prefix=API_PREFIX)
app.include_router(products_router, prefix=API_PREFIX)
app.include_router(reviews_router, prefix=API_PREFIX)


# ============================================================================
# Custom Exception Handlers
# ============================================================================


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Map domain errors to their HTTP status and code."""
    if exc.status_code >= 500:
        logger.error("Domain error", error_code=exc.error_code, error=exc.message)
    else:
        logger.info(
            "Request rejected",
            error_code=exc.error_code,
            status_code=exc.status_code,
            path=request.url.path,
        )
    response = error_response(
        request, exc.status_code, exc.error_code, exc.message, exc.field_errors
    )
    if isinstance(exc, RateLimitExceededError):
        response.headers["Retry-After"] = str(exc.retry_after)
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Flatten pydantic errors into field/message pairs."""
    details = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        message = str(error.get("msg", "Invalid value"))
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        details.append({"field": ".".join(location) or None, "message": message})

    return error_response(
        request,
        422,
        "VALIDATION_ERROR",
        details[0]["message"] if details else "Validation failed",
        details,
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions with consistent format."""
    detail = exc.detail
    if isinstance(detail, dict):
        error_code = detail.get("error_code", "ERROR")
        message = detail.get("message", str(detail))
        details = detail.get("details", [])
    else:
        error_code = {404: "NOT_FOUND", 405: "METHOD_NOT_ALLOWED"}.get(exc.status_code, "ERROR")
        message = str(detail)
        details = []

    return error_response(request, exc.status_code, error_code, message, details)


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """Uniqueness races that slip past the service checks."""
    logger.warning("Integrity error", path=request.url.path, error=str(exc.orig))
    return error_response(request, 409, "CONFLICT", "Resource already exists")
