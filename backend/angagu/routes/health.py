"""
ANGAGU Backend — Health Check Route
====================================

What:  Liveness/readiness probe for Docker and load balancers.
How:   Runs SELECT 1 against the database and reports whether SMS provider
       credentials are configured (no SMS is sent).

Status levels:
    healthy    database reachable, SMS configured
    degraded   database reachable, SMS unconfigured (signup cannot work)
    unhealthy  database unreachable
"""

import logging
import time

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from angagu import __version__
from angagu.config import settings
from angagu.database import engine
from angagu.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check() -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    # ── Check Database ────────────────────────────────────────────────────
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    # ── Check SMS Gateway configuration ───────────────────────────────────
    sms_status = "configured" if settings.sms_configured else "unconfigured"
    if sms_status == "unconfigured" and overall == "healthy":
        overall = "degraded"

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        sms_gateway=sms_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
