"""
Noteful Backend — Health Check Route
======================================

What:  GET /health for container health checks and load balancer probes.
How:   Runs `SELECT 1` through a session from the request's session factory.

Status levels:
    healthy:   database reachable        (HTTP 200)
    unhealthy: database unreachable      (HTTP 503, stop routing traffic)
"""

import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from noteful import __version__
from noteful.database import get_session_factory
from noteful.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(
    sessions: async_sessionmaker = Depends(get_session_factory),
):
    db_status = "connected"
    try:
        async with sessions() as session:
            await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        logger.warning("Health check: database unreachable: %s", e)

    health = HealthResponse(
        status="healthy" if db_status == "connected" else "unhealthy",
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if db_status != "connected":
        return JSONResponse(status_code=503, content=health.model_dump())
    return health
