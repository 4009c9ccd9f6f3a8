"""
Audit trail construction

``append_audit_entry`` never mutates its input: it returns the new ticket
aggregate together with the entry that was appended, so callers persist
exactly what they can inspect.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Optional, Sequence, Tuple

from helpdesk.models import AuditEntry, Document, Ticket, TicketStatus

from .dates import format_display_date


@dataclass(frozen=True)
class AuditEntryInput:
    """What happened, as described by the lifecycle operation."""

    activity: str
    status: TicketStatus
    previous_status: Optional[TicketStatus] = None
    remark: str = ""
    documents: Sequence[Document] = field(default_factory=tuple)
    user_name: Optional[str] = None
    user_id: Optional[str] = None


def next_entry_number(audit_trail: Sequence[AuditEntry]) -> int:
    return len(audit_trail) + 1


def append_audit_entry(
    ticket: Ticket,
    entry: AuditEntryInput,
    now: Optional[datetime] = None,
    **changes: Any,
) -> Tuple[Ticket, AuditEntry]:
    """
    Append one audit entry and apply the accompanying field changes.

    The resulting ticket's ``status`` is the entry's status and its
    ``last_updated_on`` is the entry's date.

    Args:
        ticket: Current ticket aggregate
        entry: Description of the action
        now: Moment of the action (defaults to the current UTC time)
        **changes: Other ticket fields changed by the same action

    Returns:
        Tuple of (updated ticket, appended entry)
    """
    now = now or datetime.now(timezone.utc)
    display_date = format_display_date(now.astimezone())

    appended = AuditEntry(
        sr_no=next_entry_number(ticket.audit_trail),
        activity=entry.activity,
        date=display_date,
        timestamp=now.isoformat(),
        status=entry.status,
        previous_status=entry.previous_status,
        remark=entry.remark or "",
        documents=list(entry.documents),
        user_id=entry.user_id,
        user_name=entry.user_name,
    )

    trail: List[AuditEntry] = [*ticket.audit_trail, appended]
    updated = ticket.with_changes(
        **changes,
        audit_trail=[item.model_dump() for item in trail],
        status=entry.status,
        last_updated_on=display_date,
        updated_at=now,
    )
    return updated, appended


def extract_reopening_reason(audit_trail: Sequence[AuditEntry]) -> Optional[str]:
    """Reason recorded on the most recent re-open entry, without its ``Reason:`` prefix."""
    for entry in reversed(audit_trail):
        if entry.activity == "Ticket Re-Opened":
            if not entry.remark:
                return None
            remark = entry.remark
            if remark.startswith("Reason:"):
                remark = remark[len("Reason:"):]
            return remark.strip()
    return None
