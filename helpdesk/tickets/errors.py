"""
Ticket domain errors

Each error carries a machine-readable ``kind`` and the HTTP status the API
layer answers with.
"""
from typing import Iterable, Optional


class TicketServiceError(RuntimeError):
    """Base error for ticket lifecycle and query failures."""

    kind = "Unexpected"
    status_code = 500


class TicketNotFoundError(TicketServiceError):
    """Raised when an operation targets a non-existent ticket."""

    kind = "NotFound"
    status_code = 404

    def __init__(self, ticket_id: str):
        self.ticket_id = ticket_id
        super().__init__(f"Ticket {ticket_id} not found")


class TicketValidationError(TicketServiceError):
    """Raised when a required field is missing or a value is out of range."""

    kind = "ValidationError"
    status_code = 400

    def __init__(self, message: str, fields: Optional[Iterable[str]] = None):
        self.fields = list(fields or [])
        super().__init__(message)


class InvalidTicketStateError(TicketServiceError):
    """Raised when an operation's status precondition is not met."""

    kind = "InvalidState"
    status_code = 400


class InvalidTicketTransitionError(TicketServiceError):
    """Raised when the target status is not reachable from the current one."""

    kind = "InvalidTransition"
    status_code = 400

    def __init__(self, from_status: str, to_status: str):
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(f'Invalid status transition from "{from_status}" to "{to_status}"')


class TicketConflictError(TicketServiceError):
    """Raised when a ticket keeps changing underneath a mutation."""

    kind = "Conflict"
    status_code = 409
