"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from physiopoint.config import get_settings
from physiopoint.api import api_router
from physiopoint.services.session_registry import SessionRegistry, get_session_registry

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info(f"Starting {settings.app_name} ({settings.frame_rate:.0f} Hz tracking)")
    # Build the registry before any request thread can race on the first call
    get_session_registry()
    yield
    logger.info(f"Shutting down {settings.app_name}")


app = FastAPI(
    title=settings.app_name,
    description="""
    PhysioPoint Rehab Engine API

    Real-time motion analysis for guided physiotherapy exercises. A client
    streams three tracked joint positions per frame; the engine answers with
    the live joint angle, target zone, repetition count and coaching cue, and
    summarizes the session when it ends.

    ## Key Features

    - **Hold-gated Rep Counting**: A rep is a full cycle, held in the target zone and returned to rest
    - **Stable Zones**: Hysteresis keeps boundary jitter from flipping the zone
    - **Compensation Detection**: Watched secondary joints flag cheating movements
    - **Session Feedback**: Deterministic praise, one growth tip and a journey message

    Timer-only exercises (grip, rotation, ankle work) can be started and
    finished but do not accept frames.
    """,
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix=settings.api_prefix)


@app.get("/health")
async def health_check(registry: SessionRegistry = Depends(get_session_registry)):
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": "1.0.0",
        "active_sessions": len(registry)
    }


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "app": settings.app_name,
        "docs": "/docs",
        "health": "/health"
    }
