"""Main FastAPI application for the Festival Scheduling Service."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from festival_scheduling import __version__
from festival_scheduling.api.routes import health, permissions, schedule
from festival_scheduling.core.database import get_database
from festival_scheduling.core.settings import get_settings
from festival_scheduling.middleware.auth import AuthenticationMiddleware
from festival_scheduling.middleware.logging import LoggingMiddleware, configure_logging
from festival_scheduling.services.errors import (
    ConflictError,
    DomainValidationError,
    ForbiddenError,
    InfrastructureError,
    NotFoundError,
    ServiceError,
)

configure_logging()

logger = logging.getLogger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management."""
    # Startup
    await get_database().connect()
    yield
    # Shutdown
    await get_database().disconnect()


app = FastAPI(
    title="Festival Scheduling Service",
    description="Stage time slots, artist engagements, schedule publishing, and festival permissions",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs" if not settings.is_production else None,
    redoc_url="/redoc" if not settings.is_production else None,
    openapi_url="/openapi.json" if not settings.is_production else None,
)

# Security middleware
app.add_middleware(
    TrustedHostMiddleware,
    allowed_hosts=settings.allowed_hosts
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["*"],
)

# Custom middleware stack (last added runs first)
app.add_middleware(AuthenticationMiddleware)
app.add_middleware(LoggingMiddleware)


def _error_response(request: Request, status_code: int, code: str, title: str, detail: str,
                    errors: list = None) -> JSONResponse:
    if errors:
        body = [
            {
                "status": str(status_code),
                "code": error.code,
                "title": title,
                "detail": error.message,
                "source": {"pointer": f"/{error.field}"},
            }
            for error in errors
        ]
    else:
        body = [{
            "status": str(status_code),
            "code": code,
            "title": title,
            "detail": detail,
            "source": {"pointer": request.url.path},
        }]
    return JSONResponse(status_code=status_code, content={"errors": body})


# Exception handlers
@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    """Map service errors to HTTP status codes in JSON:API format."""
    if isinstance(exc, NotFoundError):
        return _error_response(request, status.HTTP_404_NOT_FOUND, exc.code.value,
                               "Resource Not Found", exc.message)
    if isinstance(exc, ForbiddenError):
        return _error_response(request, status.HTTP_403_FORBIDDEN, exc.code.value,
                               "Forbidden", exc.message)
    if isinstance(exc, ConflictError):
        return _error_response(request, status.HTTP_409_CONFLICT, exc.code.value,
                               "Conflict", exc.message)
    if isinstance(exc, DomainValidationError):
        return _error_response(request, status.HTTP_400_BAD_REQUEST, exc.code.value,
                               "Validation Error", exc.message, exc.validation_errors)
    if isinstance(exc, InfrastructureError):
        logger.error(f"Store failure on {request.method} {request.url.path}: {exc.message}")
    return _error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, exc.code.value,
                           "Internal Server Error", "An unexpected error occurred")


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Handle malformed request bodies and parameters with JSON:API format."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "errors": [
                {
                    "status": "400",
                    "code": "VALIDATION_FAILED",
                    "title": "Validation Error",
                    "detail": error["msg"],
                    "source": {"pointer": "/" + "/".join(str(part) for part in error["loc"])},
                }
                for error in exc.errors()
            ]
        },
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions with JSON:API format."""
    if isinstance(exc.detail, dict):
        code = exc.detail.get("code", "HTTP_ERROR")
        message = exc.detail.get("message", "HTTP Error")
    else:
        code = "HTTP_ERROR"
        message = str(exc.detail)
    return _error_response(request, exc.status_code, code, message, message)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    """Handle store failures that escaped the services."""
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    return _error_response(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "STORE_FAILURE",
                           "Internal Server Error", "An unexpected error occurred")


# Routes
app.include_router(health.router, prefix="", tags=["system"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": health.SERVICE_NAME,
        "version": __version__,
        "status": "running",
        "api": {
            "docs": "/docs" if not settings.is_production else None,
            "openapi": "/openapi.json" if not settings.is_production else None
        }
    }


# Main API routes
app.include_router(permissions.router, prefix=settings.api_v1_prefix, tags=["permissions"])
app.include_router(schedule.router, prefix=settings.api_v1_prefix, tags=["schedule"])


if __name__ == "__main__":
    uvicorn.run(
        "festival_scheduling.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
        log_level=settings.log_level.lower(),
    )
