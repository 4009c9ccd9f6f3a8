"""
API endpoints
"""
from .routes import router
from .admin_routes import router as admin_router
from .re_routes import router as re_router
from .upload_routes import router as upload_router
from .health_routes import router as health_router

__all__ = [
    "router",
    "admin_router",
    "re_router",
    "upload_router",
    "health_router",
]
