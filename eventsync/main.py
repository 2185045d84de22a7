"""
FastAPI application entry point for the EventSync backend.

This module initializes the FastAPI application with:
- Exception handlers for consistent error responses
- Startup handler validating settings and the event record type
- Logging configuration

Environment Variables:
    EVENTSYNC_DB_URL: Database URL (default: sqlite:///./eventsync.db)
    EVENTSYNC_ENV: Environment (production/development, default: development)
    EVENTSYNC_LOG_LEVEL: Log level (DEBUG/INFO/WARNING/ERROR/CRITICAL, default: INFO)
    EVENTSYNC_TIMEZONE, EVENTSYNC_ACTIVE_LANGUAGES, ...: see eventsync.config.settings
"""

from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from eventsync import __version__
from eventsync.config.settings import get_settings
from eventsync.services.exceptions import (
    ConflictError,
    NotFoundError,
    ServiceError,
    ValidationError,
    WriteDeniedError,
)
from eventsync.utils.logging_config import get_logger, init_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Loads settings once at startup so that a misconfiguration (unknown
    timezone, page size out of range) fails fast.
    """
    logger = get_logger("api")
    logger.info("Starting EventSync backend application")

    settings = get_settings()
    logger.info(
        "Settings loaded",
        extra={
            "timezone": settings.timezone,
            "languages": settings.active_languages_list,
            "archive_page_size": settings.archive_page_size,
        }
    )

    yield

    logger.info("Shutting down EventSync backend application")


# Initialize logging before creating app
init_logging()

app = FastAPI(
    title="EventSync API",
    description="Events with recurrences, denormalized locations, translations "
                "and a grouped event archive.",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)


# Exception handlers


def _error_response(
    request: Request,
    exc: ServiceError,
    status_code: int,
    **extra: Any,
) -> JSONResponse:
    logger = get_logger("api")
    logger.warning(
        "Service error",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_type": type(exc).__name__,
            "error": str(exc),
        }
    )
    content = {"detail": str(exc)}
    content.update({k: v for k, v in extra.items() if v is not None})
    return JSONResponse(status_code=status_code, content=content)


@app.exception_handler(NotFoundError)
async def not_found_exception_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    """Handle missing records (404)."""
    return _error_response(request, exc, status.HTTP_404_NOT_FOUND)


@app.exception_handler(ConflictError)
async def conflict_exception_handler(request: Request, exc: ConflictError) -> JSONResponse:
    """Handle conflicts such as deleting a referenced location (409)."""
    return _error_response(request, exc, status.HTTP_409_CONFLICT)


@app.exception_handler(ValidationError)
async def validation_exception_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Handle invalid field values (422)."""
    return _error_response(
        request, exc, status.HTTP_422_UNPROCESSABLE_ENTITY, field=exc.field
    )


@app.exception_handler(WriteDeniedError)
async def write_denied_exception_handler(request: Request, exc: WriteDeniedError) -> JSONResponse:
    """Handle writes to automatically maintained fields (403)."""
    return _error_response(request, exc, status.HTTP_403_FORBIDDEN, field=exc.field)


@app.exception_handler(ServiceError)
async def service_exception_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Handle structural failures that aborted a save cascade (500)."""
    logger = get_logger("api")
    logger.error(
        "Save cascade aborted",
        extra={
            "path": request.url.path,
            "error_type": type(exc).__name__,
            "error": str(exc),
        },
        exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc)},
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Handle SQLAlchemy database errors."""
    logger = get_logger("db")
    logger.error(
        "Database error",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_type": type(exc).__name__,
            "error": str(exc),
        },
        exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Database Error",
            "message": "A database error occurred. Please try again later.",
        }
    )


# Health check endpoint


@app.get("/health", tags=["Health"])
async def health_check() -> Dict[str, Any]:
    """
    Health check endpoint.

    Returns:
        Health status and application information
    """
    return {
        "status": "healthy",
        "service": "eventsync",
        "version": __version__,
    }


# API routers (archive first so /events/archive is not taken for a GUID)
from eventsync.api import archive, events, locations

app.include_router(archive.router, prefix="/api")
app.include_router(events.router, prefix="/api")
app.include_router(locations.router, prefix="/api")
