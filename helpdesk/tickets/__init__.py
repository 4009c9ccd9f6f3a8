"""
Ticket lifecycle and query engine
"""
from .errors import (
    TicketServiceError,
    TicketNotFoundError,
    TicketValidationError,
    InvalidTicketStateError,
    InvalidTicketTransitionError,
    TicketConflictError,
)

__all__ = [
    "TicketServiceError",
    "TicketNotFoundError",
    "TicketValidationError",
    "InvalidTicketStateError",
    "InvalidTicketTransitionError",
    "TicketConflictError",
]
