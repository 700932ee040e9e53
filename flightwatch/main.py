"""
Event Flight Tracker - Main FastAPI Application
Guest flight verification and live arrival tracking for event logistics
"""

import logging
import logging.config
from contextlib import asynccontextmanager
from typing import Dict, Any
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder

# Load .env file explicitly (before importing config)
from dotenv import load_dotenv
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

from flightwatch.core.config import get_settings
from flightwatch.api.v1.endpoints import router as v1_router

# Initialize settings
settings = get_settings()

# Configure logging
logging.config.dictConfig(settings.get_log_config())
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events
    """
    # Startup
    logger.info("=" * 60)
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")
    logger.info(
        f"Amadeus: {'Configured (' + settings.amadeus_env + ')' if settings.is_amadeus_configured() else 'Not configured'}"
    )
    logger.info(f"AviationStack: {'Configured' if settings.is_aviationstack_configured() else 'Not configured'}")
    if not settings.is_amadeus_configured() and not settings.is_aviationstack_configured():
        logger.warning("No schedule provider configured - verification will use mock schedules")
    logger.info(f"Event airport: {settings.event_airport or 'none'}")
    logger.info("=" * 60)

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.app_name}")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    **Event Flight Tracker API**

    Verifies guest flight details against airline schedules and tracks event-day arrivals live.

    **Core Features:**
    - **Schedule Verification**: Amadeus, then AviationStack, then mock data
    - **Mismatch Detection**: Flags entered times more than 30 minutes off schedule
    - **Live Tracking**: OpenSky state vectors, one snapshot shared by every lookup
    - **Smart Polling**: 2x daily, 5x daily or every 5 minutes depending on days to the flight
    - **Deduplication**: Many guests on one flight cost one lookup
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)


# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Exception Handlers
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors with detailed messages"""
    logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=jsonable_encoder({
            "status": "error",
            "message": "Invalid request data",
            "errors": exc.errors()
        })
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors"""
    logger.error(f"Unhandled exception on {request.url.path}: {str(exc)}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "status": "error",
            "message": "Internal server error",
            "detail": str(exc) if settings.debug else "An unexpected error occurred"
        }
    )


# Include routers
app.include_router(v1_router)


# Root endpoint
@app.get("/", tags=["Root"])
async def root() -> Dict[str, Any]:
    """
    Root endpoint - API information
    """
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "docs": "/docs",
        "health": "/api/v1/health",
        "endpoints": {
            "verify_flight": "POST /api/v1/flights/verify",
            "verify_batch": "POST /api/v1/flights/verify-batch",
            "unique_flights": "POST /api/v1/flights/unique",
            "live_status": "GET /api/v1/flights/live/{flight_number}",
            "live_batch": "POST /api/v1/flights/live/batch"
        }
    }


@app.get("/info", tags=["Root"])
async def info() -> Dict[str, Any]:
    """
    Detailed API information and configuration
    """
    return {
        "application": {
            "name": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
            "debug": settings.debug
        },
        "configuration": {
            "mismatch_threshold": f"{settings.mismatch_threshold_minutes} minutes",
            "snapshot_ttl": f"{settings.snapshot_ttl_seconds} seconds",
            "api_timeout": f"{settings.api_timeout} seconds",
            "event_airport": settings.event_airport
        },
        "services": {
            "amadeus": settings.amadeus_env if settings.is_amadeus_configured() else "Disabled",
            "aviationstack": "Enabled" if settings.is_aviationstack_configured() else "Disabled",
            "opensky": settings.opensky_base_url
        },
        "endpoints_count": len([route for route in app.routes if hasattr(route, 'methods')])
    }


if __name__ == "__main__":
    import uvicorn

    # Run with uvicorn
    uvicorn.run(
        "flightwatch.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development(),
        log_level=settings.log_level.lower()
    )
