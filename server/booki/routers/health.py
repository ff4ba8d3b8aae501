"""Health check router."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter

from ..core.observability import SERVICE_VERSION
from ..schemas.health import HealthResponse, HealthStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/health", tags=["health"])


@router.get("/ping", response_model=HealthResponse)
async def health_ping() -> HealthResponse:
    """
    Liveness probe.

    Does not touch the database; see /ready for that.
    """
    response = HealthResponse(
        status=HealthStatus.HEALTHY,
        timestamp=datetime.now(timezone.utc),
        version=SERVICE_VERSION,
        database="unchecked",
    )
    logger.debug("Health check requested", extra={"timestamp": response.timestamp.isoformat()})
    return response
