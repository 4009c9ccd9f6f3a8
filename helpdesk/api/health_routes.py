"""
Health Check Routes

- Basic service health (/api/health)
- Readiness probe with a MongoDB ping (/api/health/ready)
"""

import logging
import time
from datetime import datetime, timezone
from typing import Dict, Optional

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from helpdesk.config import settings
from helpdesk.database import get_client as get_mongo_client


logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["health"])

# Track service start time
SERVICE_START_TIME = time.time()
SERVICE_VERSION = "1.0.0"


class HealthStatus(BaseModel):
    """Health check response model"""
    status: str  # "healthy" | "degraded" | "unhealthy"
    timestamp: str
    uptime_seconds: float
    version: str
    environment: Optional[str] = None


@router.get("/health", response_model=HealthStatus)
async def health_check() -> HealthStatus:
    """
    Basic health check endpoint

    Returns 200 if the service is running.
    """
    uptime = time.time() - SERVICE_START_TIME

    return HealthStatus(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        uptime_seconds=round(uptime, 2),
        version=SERVICE_VERSION,
        environment=settings.environment,
    )


@router.get("/health/ready")
async def readiness_check(response: Response) -> Dict[str, str]:
    """
    Readiness probe

    Returns:
        200: MongoDB reachable, ready to serve traffic
        503: MongoDB unavailable
    """
    try:
        await get_mongo_client().admin.command('ping')
    except Exception as e:
        logger.error(f"MongoDB readiness check failed: {e}")
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {"status": "not_ready", "reason": "MongoDB unavailable"}

    return {"status": "ready"}
