"""
Health check endpoints for monitoring application status.

Provides:
- Basic health check
- Readiness check (database connectivity)
- Ping
"""

import time
from datetime import datetime, timezone
from typing import Dict, Any

from fastapi import APIRouter, Depends, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from teacha.database.connection import get_db
from teacha.utils.config import get_settings
from teacha.utils.exceptions import ServiceUnavailableError
from teacha.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check() -> Dict[str, Any]:
    """
    Basic health check endpoint.

    Returns 200 if application is running.
    """
    return {
        "status": "ok",
        "timestamp": _timestamp(),
        "environment": get_settings().environment,
    }


@router.get("/ping", status_code=status.HTTP_200_OK)
async def ping() -> Dict[str, str]:
    return {"message": "pong"}


@router.get("/health/ready", status_code=status.HTTP_200_OK)
async def readiness_check(db: Session = Depends(get_db)) -> Dict[str, Any]:
    """
    Readiness check endpoint.

    Answers 503 with the failing checks as details while the database cannot
    be reached.
    """
    checks = {"database": _check_database(db)}

    failing = [
        {"check": name, **check} for name, check in checks.items() if check["status"] != "healthy"
    ]
    if failing:
        raise ServiceUnavailableError("Service unavailable", details=failing)

    return {
        "status": "ok",
        "timestamp": _timestamp(),
        "checks": checks,
    }


def _check_database(db: Session) -> Dict[str, Any]:
    """Check database connectivity."""
    start_time = time.time()

    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return {
            "status": "unhealthy",
            "error": str(e)[:100],
            "response_time_ms": round((time.time() - start_time) * 1000, 2),
        }

    return {
        "status": "healthy",
        "response_time_ms": round((time.time() - start_time) * 1000, 2),
    }
