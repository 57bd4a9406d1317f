# backend/app/routes/health.py
"""
Health check endpoint.

Used by load balancers and uptime checks; reports database connectivity.
"""

from datetime import datetime, timezone
import logging

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..api.dependencies.database import get_db
from ..core.config import settings

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


class HealthCheckResponse(BaseModel):
    status: str
    environment: str
    database: bool
    timestamp: datetime


@router.get("/health", response_model=HealthCheckResponse)
def health_check(response: Response, db: Session = Depends(get_db)) -> HealthCheckResponse:
    """
    Basic health check endpoint.

    Returns:
        "healthy", or "degraded" when the database does not answer.
    """
    try:
        db.execute(text("SELECT 1"))
        db_ok = True
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        db_ok = False

    response.headers["Cache-Control"] = "no-store"
    return HealthCheckResponse(
        status="healthy" if db_ok else "degraded",
        environment=settings.environment,
        database=db_ok,
        timestamp=datetime.now(timezone.utc),
    )
