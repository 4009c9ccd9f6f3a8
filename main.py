"""
Main FastAPI application for the Helpdesk Ticket service
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from helpdesk.config import settings
from helpdesk.database import ensure_indexes, close_connection
from helpdesk.api import router, admin_router, re_router, upload_router, health_router
from helpdesk.middleware.rate_limiter import get_rate_limit_key
from helpdesk.middleware.cors import get_cors_origins
from helpdesk.security.error_handler import (
    request_validation_handler,
    secure_exception_handler,
    ticket_error_handler,
)
from helpdesk.tickets.errors import TicketServiceError
from helpdesk.utils.secure_logging import configure_secure_logging

# Configure secure logging (masks credentials and contact details automatically)
configure_secure_logging(
    level=settings.log_level,
    format_type=settings.log_format,
    include_trace_id=True,
)

logger = logging.getLogger(__name__)

# Rate limiter keyed on the client fingerprint (IP + User-Agent)
limiter = Limiter(key_func=get_rate_limit_key, default_limits=[settings.rate_limit_default])


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events"""
    logger.info("Starting Helpdesk Ticket service...")

    await ensure_indexes()
    logger.info("Database indexes created/verified")

    yield

    logger.info("Shutting down...")
    await close_connection()
    logger.info("Database connection closed")


# Create FastAPI app
app = FastAPI(
    title="Helpdesk Ticket Service",
    description="Ticket lifecycle, audit trail and query API for the support helpdesk",
    version="1.0.0",
    lifespan=lifespan
)

# Add rate limiter to app state
app.state.limiter = limiter

app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# Localhost origins are filtered out in production
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
    allow_headers=[
        "Content-Type",
        "Authorization",
        "Accept",
        "Origin",
    ],
    expose_headers=["X-RateLimit-Limit", "X-RateLimit-Remaining"],
    max_age=600,
)

# Error bodies never expose internal details
app.add_exception_handler(TicketServiceError, ticket_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(StarletteHTTPException, secure_exception_handler)
app.add_exception_handler(Exception, secure_exception_handler)

# Include routes
app.include_router(health_router)
app.include_router(router)
app.include_router(admin_router)
app.include_router(re_router)
app.include_router(upload_router)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "name": "Helpdesk Ticket Service",
        "version": "1.0.0",
        "status": "running",
        "endpoints": {
            "health": "/api/health",
            "list_tickets": "GET /api/tickets",
            "create_ticket": "POST /api/tickets",
            "get_ticket": "GET /api/tickets/{ticket_id}",
            "audit_trail": "GET /api/tickets/{ticket_id}/audit-trail",
            "admin_tickets": "GET /api/admin/tickets",
            "re_tickets": "GET /api/re/tickets",
            "upload": "POST /api/uploads",
        }
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload
    )
