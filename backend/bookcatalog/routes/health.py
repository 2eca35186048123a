"""
Book Catalog Backend — Health Check Route
=========================================

What:  Health check endpoint for monitoring and load balancer probes, plus
       the root welcome route.
How:   Runs SELECT 1 on the application's engine.

Status levels:
    - healthy:   database reachable
    - unhealthy: database unreachable (still HTTP 200; the body says why)
"""

import logging
import time

from fastapi import APIRouter, Request
from sqlalchemy import text

from bookcatalog import __version__
from bookcatalog.schemas.common import HealthResponse, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/", response_model=MessageResponse, summary="API welcome message")
async def root() -> MessageResponse:
    return MessageResponse(message="Welcome to the Bookstore API")


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Returns the health status of the backend service and its database.",
)
async def health_check(request: Request) -> HealthResponse:
    """
    Check the health of the service and the database.

    A failed probe is reported in the body, never raised.
    """
    db_status = "connected"
    overall = "healthy"

    try:
        engine = request.app.state.engine
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
