"""
Ticket status state machine
"""
from typing import Mapping, Optional, Sequence

from helpdesk.models import TicketStatus

from .errors import InvalidTicketTransitionError


DEFAULT_ACTIVITY = "Status Updated"

# Audit label recorded when an administrative status update lands on each state
ACTIVITY_LABELS: Mapping[TicketStatus, str] = {
    TicketStatus.PENDING: "Ticket Status Updated",
    TicketStatus.RESOLVED: "Ticket Resolved",
    TicketStatus.CLARIFICATION_SOUGHT: "Clarification Requested",
    TicketStatus.CLARIFICATION_PROVIDED: DEFAULT_ACTIVITY,
    TicketStatus.RE_OPENED: "Ticket Re-Opened",
    TicketStatus.RESPONDED_BY_RE: "RE Responded",
    TicketStatus.ASSIGNED_TO_RE: "Ticket Assigned to RE",
    TicketStatus.CLOSED: "Ticket Closed",
}


def parse_status(value) -> Optional[TicketStatus]:
    """Return the matching TicketStatus, or None for an unknown value."""
    try:
        return TicketStatus(value)
    except ValueError:
        return None


def activity_for(status) -> str:
    parsed = parse_status(status)
    if parsed is None:
        return DEFAULT_ACTIVITY
    return ACTIVITY_LABELS.get(parsed, DEFAULT_ACTIVITY)


class TicketStateMachine:
    """Validate ticket lifecycle transitions."""

    _TRANSITIONS: Mapping[TicketStatus, Sequence[TicketStatus]] = {
        TicketStatus.PENDING: (
            TicketStatus.RESOLVED,
            TicketStatus.CLARIFICATION_SOUGHT,
            TicketStatus.RE_OPENED,
        ),
        TicketStatus.RESOLVED: (TicketStatus.RE_OPENED, TicketStatus.CLOSED),
        TicketStatus.CLARIFICATION_SOUGHT: (
            TicketStatus.RESOLVED,
            TicketStatus.RE_OPENED,
            TicketStatus.CLARIFICATION_PROVIDED,
        ),
        TicketStatus.CLARIFICATION_PROVIDED: (
            TicketStatus.RESOLVED,
            TicketStatus.CLARIFICATION_SOUGHT,
            TicketStatus.PENDING,
        ),
        TicketStatus.RE_OPENED: (
            TicketStatus.RESOLVED,
            TicketStatus.CLARIFICATION_SOUGHT,
            TicketStatus.PENDING,
        ),
        TicketStatus.RESPONDED_BY_RE: (
            TicketStatus.RESOLVED,
            TicketStatus.CLARIFICATION_SOUGHT,
            TicketStatus.PENDING,
        ),
        TicketStatus.ASSIGNED_TO_RE: (
            TicketStatus.RESOLVED,
            TicketStatus.CLARIFICATION_SOUGHT,
            TicketStatus.PENDING,
        ),
        TicketStatus.CLOSED: (),
    }

    @classmethod
    def initial_state(cls) -> TicketStatus:
        return TicketStatus.PENDING

    @classmethod
    def is_terminal(cls, status) -> bool:
        parsed = parse_status(status)
        return parsed is not None and not cls._TRANSITIONS[parsed]

    @classmethod
    def allowed_targets(cls, current) -> Sequence[TicketStatus]:
        parsed = parse_status(current)
        if parsed is None:
            return ()
        return cls._TRANSITIONS.get(parsed, ())

    @classmethod
    def can_transition(cls, current, new) -> bool:
        target = parse_status(new)
        if target is None:
            return False
        return target in cls.allowed_targets(current)

    @classmethod
    def assert_transition(cls, current, new) -> None:
        if not cls.can_transition(current, new):
            raise InvalidTicketTransitionError(_label(current), _label(new))


def _label(status) -> str:
    return status.value if isinstance(status, TicketStatus) else str(status)
