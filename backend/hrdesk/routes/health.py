"""
HR Desk Backend - Health Check Route
=====================================

What:  GET /health for container probes, mounted on both apps.
How:   The attendance app runs SELECT 1 against its database; the recruitment
       app reports how many candidates its store holds.

Status levels:
    healthy    the app's backing state is usable (HTTP 200)
    unhealthy  the database is unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Request, Response
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from hrdesk import __version__
from hrdesk.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


async def _database_status() -> str:
    from hrdesk.database import engine

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Health check: database unreachable: %s", str(e))
        return "disconnected"
    return "connected"


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
)
async def health_check(request: Request, response: Response) -> HealthResponse:
    kind = request.app.state.kind
    result = HealthResponse(
        status="healthy",
        app=kind,
        version=__version__,
        uptime_seconds=round(time.time() - _start_time, 2),
    )

    if kind == "attendance":
        result.database = await _database_status()
        if result.database != "connected":
            result.status = "unhealthy"
            response.status_code = 503
    else:
        store = getattr(request.app.state, "store", None)
        result.store_candidates = len(store.candidates) if store is not None else 0

    return result
