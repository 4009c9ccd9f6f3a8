"""
Secure Error Handler - Render ticket errors without exposing internal details

This module provides:
- Trace ID generation for log correlation
- A handler mapping TicketServiceError subclasses onto their HTTP status
- A handler rendering request validation failures as ValidationError/400
- A global fallback handler that never leaks exception details

Every error body has the same shape:

    {"success": false,
     "error": {"kind": ..., "message": ..., "trace_id": ..., "timestamp": ...}}

Usage:
    from helpdesk.security.error_handler import secure_exception_handler

    app.add_exception_handler(Exception, secure_exception_handler)
"""

import uuid
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from helpdesk.tickets.errors import TicketServiceError, TicketValidationError

logger = logging.getLogger(__name__)


GENERIC_MESSAGE = "An internal server error occurred. Please try again later."

# Error kind reported for plain HTTP errors raised by the framework
HTTP_STATUS_KINDS: Dict[int, str] = {
    400: "ValidationError",
    404: "NotFound",
    405: "MethodNotAllowed",
    409: "Conflict",
    413: "ValidationError",
    422: "ValidationError",
    429: "RateLimited",
}


def generate_trace_id() -> str:
    """
    Generate a unique trace ID for error correlation.

    Returns:
        A unique trace ID string (UUID4)
    """
    return str(uuid.uuid4())


def error_body(
    kind: str,
    message: str,
    trace_id: str,
    fields: Optional[List[str]] = None,
) -> Dict[str, Any]:
    error: Dict[str, Any] = {
        "kind": kind,
        "message": message,
        "trace_id": trace_id,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if fields:
        error["fields"] = fields
    return {"success": False, "error": error}


async def ticket_error_handler(request: Request, exc: TicketServiceError) -> JSONResponse:
    """
    Render a ticket domain error with its own kind and status code.

    Register with: app.add_exception_handler(TicketServiceError, ticket_error_handler)
    """
    trace_id = generate_trace_id()
    fields = exc.fields if isinstance(exc, TicketValidationError) else None

    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        f"{exc.kind} [{exc.status_code}] trace_id={trace_id}: {exc}",
        extra={
            "trace_id": trace_id,
            "status_code": exc.status_code,
            "path": str(request.url.path),
            "method": request.method,
        },
    )

    message = str(exc) if exc.status_code < 500 else GENERIC_MESSAGE
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.kind, message, trace_id, fields),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Render malformed bodies and query strings as ValidationError/400.

    Register with: app.add_exception_handler(RequestValidationError, request_validation_handler)
    """
    trace_id = generate_trace_id()
    fields = [
        ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
        for error in exc.errors()
    ]
    fields = [field for field in fields if field]

    logger.info(
        f"Request validation failed trace_id={trace_id}: {fields}",
        extra={"trace_id": trace_id, "path": str(request.url.path), "method": request.method},
    )

    message = "Invalid request"
    if fields:
        message = f"Invalid value for: {', '.join(fields)}"
    return JSONResponse(
        status_code=400,
        content=error_body("ValidationError", message, trace_id, fields),
    )


async def secure_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler for FastAPI that never exposes internal details.

    Register with: app.add_exception_handler(Exception, secure_exception_handler)

    Args:
        request: FastAPI request
        exc: Exception that was raised

    Returns:
        Secure JSONResponse
    """
    if isinstance(exc, TicketServiceError):
        return await ticket_error_handler(request, exc)

    # Handle FastAPI/Starlette HTTPException
    if isinstance(exc, (HTTPException, StarletteHTTPException)):
        trace_id = generate_trace_id()
        kind = HTTP_STATUS_KINDS.get(exc.status_code, "Unexpected")

        logger.warning(
            f"HTTPException [{exc.status_code}] trace_id={trace_id}: {exc.detail}",
            extra={
                "trace_id": trace_id,
                "status_code": exc.status_code,
                "path": str(request.url.path),
                "method": request.method,
            }
        )

        detail = str(exc.detail)
        message = detail if _is_safe_message(detail) else GENERIC_MESSAGE
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(kind, message, trace_id),
        )

    # Handle unexpected exceptions - never expose details
    trace_id = generate_trace_id()

    logger.error(
        f"Unhandled exception trace_id={trace_id}",
        extra={
            "trace_id": trace_id,
            "exception_type": type(exc).__name__,
            "path": str(request.url.path),
            "method": request.method,
        },
        exc_info=True,
    )

    return JSONResponse(
        status_code=500,
        content=error_body("Unexpected", GENERIC_MESSAGE, trace_id),
    )


def _is_safe_message(message: str) -> bool:
    """
    Check if an error message is safe to expose to clients.

    Unsafe patterns include stack traces, file paths, driver names, etc.
    """
    unsafe_patterns = [
        "Traceback",
        "File \"",
        "Exception:",
        "at 0x",
        "/usr/",
        "/home/",
        "/var/",
        "pymongo",
        "motor",
        "asyncio",
        "mongodb",
        "localhost",
        "127.0.0.1",
        ".py",
    ]

    message_lower = message.lower()
    return not any(pattern.lower() in message_lower for pattern in unsafe_patterns)


__all__ = [
    'GENERIC_MESSAGE',
    'generate_trace_id',
    'error_body',
    'ticket_error_handler',
    'request_validation_handler',
    'secure_exception_handler',
]
