"""
SnapShare Backend — Health Check Route
=========================================

What:  Health check endpoint for monitoring and load balancer checks.
How:   Pings the configured user store and reports aggregate status.
Who:   Called by Docker health checks, load balancers and monitoring.

Status levels:
    - healthy:   user store reachable (HTTP 200)
    - unhealthy: user store unreachable (HTTP 503, stop routing traffic)
"""

import logging
import time

from fastapi import APIRouter, Request, Response, status

from app import __version__
from app.schemas.auth import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Initialized once when the module loads
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request, response: Response) -> HealthResponse:
    """
    Check the service and its user store.

    The in-memory store is always reachable; the SQL store runs SELECT 1.
    """
    repository = request.app.state.user_repository
    reachable = await repository.ping()
    if not reachable:
        logger.warning("Health check: user store '%s' unreachable", repository.backend_name)
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthResponse(
        status="healthy" if reachable else "unhealthy",
        version=__version__,
        user_store=repository.backend_name,
        user_store_status="connected" if reachable else "disconnected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
