"""
Middleware helpers for rate limiting and CORS
"""
from .rate_limiter import get_rate_limit_key
from .cors import get_cors_origins

__all__ = [
    "get_rate_limit_key",
    "get_cors_origins",
]
