# backend/app/main.py
"""
Booking engine API.

Mounts the booking routes under /api/bookings plus the health and
Prometheus endpoints.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import settings
from .database import init_db
from .errors import register_error_handlers
from .routes import booking_types, bookings, health, prometheus, public_bookings

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)

API_TITLE = "Booking Scheduling API"
API_VERSION = "1.0.0"


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: make sure the schema exists before serving."""
    logger.info(f"{API_TITLE} starting in {settings.environment} mode")
    init_db()

    yield

    logger.info(f"{API_TITLE} shutting down...")


app = FastAPI(
    title=API_TITLE,
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=app_lifespan,
)

# Register unified error envelope handlers
register_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "HEAD", "OPTIONS", "POST", "PATCH", "DELETE"],
    allow_headers=["*"],
)

API_PREFIX = "/api/bookings"

# Note: Route order matters - /types and /public must come BEFORE /{booking_id}
app.include_router(booking_types.router, prefix=API_PREFIX)
app.include_router(public_bookings.router, prefix=API_PREFIX)
app.include_router(bookings.router, prefix=API_PREFIX)
app.include_router(health.router)
app.include_router(prometheus.router)
