"""
Facility Booking API - Main Application Entry Point

Employees request time slots on shared facilities. Requests pass through
a two-step approval chain (Group Director, then Facility Manager, or an
Admin override) before they appear on the facility calendar; cancellations
follow the same chain.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from facility_booking.core.config import get_settings
from facility_booking.core.exceptions import GENERIC_ERROR_MESSAGE
from facility_booking.core.logging import setup_logging, get_logger
from facility_booking.core.metrics import metrics_endpoint
from facility_booking.api.router import api_router
from facility_booking.api.middleware import RequestLoggingMiddleware
from facility_booking.infrastructure.redis_client import get_redis, close_redis
from facility_booking.services.cache_service import get_cache_stats
from facility_booking.services.session_service import get_session_store

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    setup_logging()

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
    )

    redis_client = await get_redis()
    if redis_client:
        logger.info("redis_ready")
    else:
        logger.warning("redis_unavailable", message="Running without cache")
    get_session_store()

    yield

    await close_redis()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Facility booking with Group Director / Facility Manager approval chains",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS; credentials are needed for the session cookie
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestLoggingMiddleware)

app.include_router(api_router)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed input is a 400 naming the first invalid field."""
    errors = exc.errors()
    location = errors[0].get("loc", ()) if errors else ()
    field = next((str(part) for part in reversed(location) if isinstance(part, str)), "request")
    if field in ("body", "query", "path"):
        field = "request"
    logger.info("request_validation_failed", field=field, errors=len(errors))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": f"Invalid {field}"},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("unhandled_error", error_type=type(exc).__name__)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": GENERIC_ERROR_MESSAGE},
    )


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for Docker and load balancers."""
    cache_stats = await get_cache_stats()
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "cache": cache_stats,
    }


@app.get("/metrics", tags=["Health"], include_in_schema=False)
async def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
