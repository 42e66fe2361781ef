"""
Doula JSON Backend — Health Check Route
=========================================

What:  Health check endpoint for monitoring and container orchestrators.
How:   Checks that the data directory exists and is writable. Collection
       contents are never read, so a health check cannot create or touch files.

Status levels:
    - healthy:   data directory present and writable
    - degraded:  data directory missing or read-only (writes will fail)
"""

import logging
import time

from fastapi import APIRouter, Request

from doula_api import __version__
from doula_api.schemas.responses import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request) -> HealthResponse:
    store = request.app.state.store
    if store.is_writable():
        storage, overall = "writable", "healthy"
    else:
        storage, overall = "unavailable", "degraded"
        logger.warning("Health check: data directory not writable: %s", store.data_dir)

    return HealthResponse(
        status=overall,
        version=__version__,
        data_dir=str(store.data_dir),
        storage=storage,
        collections=list(request.app.state.collections),
        uptime_seconds=round(time.time() - _start_time, 2),
    )
