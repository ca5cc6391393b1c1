"""StayDesk FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from staydesk.api.v1.guests import router as guests_router
from staydesk.config import settings
from staydesk.exceptions import (
    ConcurrentModificationError,
    DuplicateGuestError,
    GuestLifecycleError,
    InvalidStateError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)

# Configure root logger so all staydesk.* loggers output to stderr (captured by Docker).
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)

_ERROR_STATUS_CODES: dict[type[GuestLifecycleError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidStateError: status.HTTP_409_CONFLICT,
    ConcurrentModificationError: status.HTTP_409_CONFLICT,
    DuplicateGuestError: status.HTTP_409_CONFLICT,
    ValidationError: status.HTTP_400_BAD_REQUEST,
    StoreUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_code_for(exc: GuestLifecycleError) -> int:
    for error_type in type(exc).__mro__:
        if error_type in _ERROR_STATUS_CODES:
            return _ERROR_STATUS_CODES[error_type]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup and shutdown events."""
    from staydesk.database import create_tables, engine

    # Startup
    if settings.create_tables_on_startup:
        logger.info("Creating database tables")
        await create_tables()
    yield
    # Shutdown: dispose engine connections
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Guest occupancy and loyalty lifecycle service for hotel administrators.",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(GuestLifecycleError)
async def guest_lifecycle_error_handler(request: Request, exc: GuestLifecycleError) -> JSONResponse:
    """Render lifecycle errors as ``{"detail", "code"}`` with a matching status."""
    return JSONResponse(
        status_code=status_code_for(exc),
        content={"detail": exc.message, "code": exc.code},
    )


# Routers
app.include_router(guests_router)


@app.get("/health", tags=["health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "service": settings.app_name}


@app.get("/", tags=["root"])
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }
