"""
RecipeBox Backend — Health Check Route
========================================

What:  Health check endpoint for monitoring and load balancer probes.
Why:   A backend that cannot reach its store cannot serve a single record;
       load balancers should route away from it.
How:   Pings the configured storage backend and reports the result.
Who:   Called by Docker health checks, load balancers, and monitoring systems.

Status levels:
    - healthy:   storage answered the ping (HTTP 200)
    - unhealthy: storage unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Request, Response

from recipebox import __version__
from recipebox.schemas.record import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    responses={503: {"description": "Storage unreachable", "model": HealthResponse}},
)
async def health_check(request: Request, response: Response) -> HealthResponse:
    """
    Probe the storage backend.

    Check details:
        memory:  always connected
        mongodb: `ping` admin command
        sql:     SELECT 1
    """
    backend = request.app.state.backend
    connected = await backend.ping()

    if not connected:
        logger.warning("Health check: storage backend '%s' unreachable", backend.name)
        response.status_code = 503

    return HealthResponse(
        status="healthy" if connected else "unhealthy",
        version=__version__,
        backend=backend.name,
        storage="connected" if connected else "disconnected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
