# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Health checks for the load balancer and container runtime:
# - /health: Process answers, with version and environment
# - /health/ready: Supabase and the Celery broker are reachable
# - /health/live: Process is alive (no dependencies touched)
# =============================================================================

import logging
from datetime import datetime, timezone
from typing import Callable

from fastapi import APIRouter
from pydantic import BaseModel

from app.config import settings

logger = logging.getLogger(__name__)

router = APIRouter()

VERSION = "1.0.0"


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    environment: str | None = None
    version: str | None = None


class ReadinessResponse(BaseModel):
    """Readiness with one entry per dependency ("ok" or the error)."""
    status: str
    checks: dict[str, str]
    timestamp: datetime


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _ping_database() -> None:
    from lib.supabase_client import SupabaseClient

    SupabaseClient.get_client().table("shopify_users").select("id").limit(1).execute()


def _ping_broker() -> None:
    from workers.celery_app import celery_app

    with celery_app.connection_for_write() as connection:
        connection.ensure_connection(max_retries=1)


def _check_dependency(name: str, ping: Callable[[], None]) -> str:
    try:
        ping()
    except Exception as e:
        logger.warning(f"Readiness check {name} failed: {e}")
        return f"error: {str(e)[:80]}"
    return "ok"


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Basic health status for monitoring."""
    return HealthResponse(
        status="healthy",
        timestamp=_now(),
        environment=settings.ENVIRONMENT,
        version=VERSION,
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check():
    """
    Whether the API can serve requests.

    `degraded` when the database or the task broker is unreachable. Reads
    still work without the broker; background removal does not.
    """
    checks = {
        "database": _check_dependency("database", _ping_database),
        "broker": _check_dependency("broker", _ping_broker),
    }
    ready = all(result == "ok" for result in checks.values())

    return ReadinessResponse(
        status="ready" if ready else "degraded",
        checks=checks,
        timestamp=_now(),
    )


@router.get("/health/live", response_model=HealthResponse)
async def liveness_check():
    """Process liveness for restart decisions."""
    return HealthResponse(status="alive", timestamp=_now())
