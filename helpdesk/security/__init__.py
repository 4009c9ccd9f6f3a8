"""
Error rendering for the HTTP layer
"""
from .error_handler import (
    generate_trace_id,
    ticket_error_handler,
    request_validation_handler,
    secure_exception_handler,
)

__all__ = [
    "generate_trace_id",
    "ticket_error_handler",
    "request_validation_handler",
    "secure_exception_handler",
]
