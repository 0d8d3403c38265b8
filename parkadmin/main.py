"""
Main FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from parkadmin import __version__
from parkadmin.api.params import TOTAL_COUNT_HEADER
from parkadmin.core.config import settings
from parkadmin.core.errors import AppError, UpstreamError
from parkadmin.core.logging import get_logger, setup_logging
from parkadmin.db.session import check_db_health, close_db, init_db

# Setup logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan events.
    Handles startup and shutdown tasks.
    """
    logger.info(
        "starting_application",
        app_name=settings.APP_NAME,
        environment=settings.APP_ENV,
        version=__version__,
        cdn_configured=settings.cloudinary_configured,
    )

    await init_db()

    yield

    logger.info("shutting_down_application")

    await close_db()


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="Content admin panel - Backend API",
    version=__version__,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)

# Add middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[TOTAL_COUNT_HEADER],
)

app.add_middleware(GZipMiddleware, minimum_size=1000)


# Health check endpoint
@app.get("/health", tags=["health"])
async def health_check() -> JSONResponse:
    """
    Health check endpoint for monitoring.
    Includes database connectivity check.
    """
    db_healthy = await check_db_health()

    return JSONResponse(
        status_code=200 if db_healthy else 503,
        content={
            "status": "healthy" if db_healthy else "unhealthy",
            "app_name": settings.APP_NAME,
            "environment": settings.APP_ENV,
            "version": __version__,
            "database": "connected" if db_healthy else "disconnected",
        }
    )


@app.get("/", tags=["root"])
async def root() -> JSONResponse:
    """
    Root endpoint.
    """
    return JSONResponse(
        content={
            "message": f"Welcome to {settings.APP_NAME} API",
            "version": __version__,
            "docs": "/docs" if settings.DEBUG else "Documentation disabled in production",
        }
    )


# Include API routers
from parkadmin.api import api_router  # noqa: E402
app.include_router(api_router, prefix=settings.API_V1_PREFIX)


# ================================
# Exception handlers
# ================================

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render domain errors as {"detail", "code"}."""
    log = logger.error if isinstance(exc, UpstreamError) else logger.info
    log(
        "request_failed",
        code=exc.code,
        error=exc.message,
        path=request.url.path,
        method=request.method,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Body/query validation failures are plain 400 validation errors."""
    errors = exc.errors()
    detail = "Invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ())[1:]) or "request"
        message = str(first.get("msg", "invalid value")).removeprefix("Value error, ")
        detail = f"{field}: {message}"

    return JSONResponse(
        status_code=400,
        content={"detail": detail, "code": "validation_error"},
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler for unhandled errors.
    """
    logger.error(
        "unhandled_exception",
        error=str(exc),
        path=request.url.path,
        method=request.method,
        exc_info=True,
    )

    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred. Please try again later.",
            "code": "internal_server_error",
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "parkadmin.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
