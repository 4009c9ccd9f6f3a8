"""
CORS Middleware Configuration

Production-safe origin filtering: localhost origins are dropped when
running with ENVIRONMENT=production.
"""
import logging
from typing import List, Optional

from helpdesk.config import settings

logger = logging.getLogger(__name__)


def get_cors_origins(environment: Optional[str] = None) -> List[str]:
    """
    Get CORS allowed origins, filtering localhost in production.

    Args:
        environment: Deployment environment (defaults to settings.environment)

    Returns:
        List of allowed CORS origins

    Raises:
        ValueError: If in production and no valid (non-localhost) origins remain
    """
    environment = environment or settings.environment
    origins = list(settings.cors_allowed_origins)

    if environment != "production":
        return origins

    filtered_origins = [
        origin for origin in origins
        if "localhost" not in origin.lower() and "127.0.0.1" not in origin
    ]

    if not filtered_origins:
        raise ValueError(
            "No valid CORS origins for production environment. "
            "All configured origins contain localhost/127.0.0.1. "
            "Please configure production domain(s) in CORS_ALLOWED_ORIGINS."
        )

    removed_origins = set(origins) - set(filtered_origins)
    if removed_origins:
        logger.warning(
            f"CORS: Filtered out localhost origins in production: {removed_origins}"
        )

    return filtered_origins
