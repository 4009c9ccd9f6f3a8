"""
Rate limiting key

slowapi applies ``settings.rate_limit_default`` to every route through
SlowAPIMiddleware; this module decides who a request is counted against.
"""
import hashlib
import logging

from fastapi import Request
from slowapi.util import get_remote_address

logger = logging.getLogger(__name__)


def get_rate_limit_key(request: Request) -> str:
    """
    Generate a rate limit key based on client fingerprint.

    Combines the client IP with the first 50 characters of its User-Agent,
    so clients sharing a NAT address do not exhaust each other's budget.

    Args:
        request: FastAPI request object

    Returns:
        MD5 hash of the combined fingerprint
    """
    ip = get_remote_address(request)
    user_agent = request.headers.get("User-Agent", "")[:50]

    fingerprint = f"{ip}:{user_agent}"
    hashed_key = hashlib.md5(fingerprint.encode()).hexdigest()

    logger.debug(f"Rate limit key generated for IP {ip}: {hashed_key[:8]}...")

    return hashed_key
