"""
Ticket lifecycle operations

Every mutation follows the same cycle: load the ticket, check the
operation's precondition, build the new aggregate with ``append_audit_entry``
and save it against the lock version it was loaded with. When another writer
got there first the cycle restarts from a fresh load.
"""
import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional, Tuple

from pymongo.errors import DuplicateKeyError

from helpdesk.config import settings
from helpdesk.database import ticket_operations
from helpdesk.models import (
    AssignRequest,
    AuditEntry,
    ClarificationQuestion,
    ClarificationRequest,
    FeedbackRequest,
    InterventionRequest,
    ReopenRequest,
    ResolveRequest,
    StatusUpdateRequest,
    Ticket,
    TicketCategory,
    TicketCreate,
    TicketPriority,
    TicketStatus,
)

from .audit_trail import AuditEntryInput, append_audit_entry
from .dates import format_display_date
from .errors import (
    InvalidTicketStateError,
    TicketConflictError,
    TicketNotFoundError,
    TicketValidationError,
)
from .identifiers import (
    generate_fi_code,
    next_sr_no,
    next_ticket_id,
    pick_default_assignee,
    resync_sequences,
)
from .state import TicketStateMachine, activity_for

logger = logging.getLogger(__name__)

SUBJECT_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 1000
REMARKS_MAX_LENGTH = 200

DEFAULT_INITIATOR = "User"
DEFAULT_ADMIN = "Admin"
HELPDESK_ASSIGNEE = "Helpdesk"
ASSIGN_TARGETS = ("helpdesk", "re")

Mutation = Callable[[Ticket], Tuple[Ticket, AuditEntry]]


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _check_max_length(value: Optional[str], limit: int, field: str) -> None:
    if value is not None and len(value) > limit:
        raise TicketValidationError(f"{field} must be at most {limit} characters", [field])


def _check_choice(value: str, choices: Iterable[str], field: str) -> None:
    choices = list(choices)
    if value not in choices:
        raise TicketValidationError(
            f"{field} must be one of: {', '.join(choices)}", [field]
        )


def _require(value, message: str, field: str) -> None:
    if _is_blank(value):
        raise TicketValidationError(message, [field])


async def _apply(ticket_id: str, mutate: Mutation) -> Ticket:
    """Run a mutation under the ticket's lock version, retrying lost races."""
    attempts = max(1, settings.ticket_update_max_retries)
    for attempt in range(1, attempts + 1):
        ticket = await ticket_operations.find_ticket(ticket_id)
        if ticket is None:
            raise TicketNotFoundError(ticket_id)

        updated, entry = mutate(ticket)
        try:
            saved = await ticket_operations.save_ticket(updated)
        except TicketConflictError:
            if attempt == attempts:
                raise
            logger.warning(
                "Retrying %r on ticket %s (attempt %s of %s)",
                entry.activity,
                ticket_id,
                attempt + 1,
                attempts,
            )
            continue

        logger.info(
            "Ticket %s: %s (%s -> %s)",
            ticket_id,
            entry.activity,
            entry.previous_status or ticket.status,
            entry.status,
        )
        return saved

    raise TicketConflictError(f"Ticket {ticket_id} was modified concurrently")


async def create_ticket(data: TicketCreate, now: Optional[datetime] = None) -> Ticket:
    """
    Raise a new ticket in Pending status

    Args:
        data: Ticket data; category, subCategory, subject and description are required
        now: Creation moment (defaults to the current UTC time)

    Returns:
        The stored ticket with its first audit entry

    Raises:
        TicketValidationError: If required fields are missing or values are invalid
    """
    required = {
        "category": data.category,
        "subCategory": data.sub_category,
        "subject": data.subject,
        "description": data.description,
    }
    missing = [field for field, value in required.items() if _is_blank(value)]
    if missing:
        raise TicketValidationError(f"Missing required fields: {', '.join(missing)}", missing)

    _check_choice(data.category, [c.value for c in TicketCategory], "category")
    if data.priority is not None:
        _check_choice(data.priority, [p.value for p in TicketPriority], "priority")
    _check_max_length(data.subject, SUBJECT_MAX_LENGTH, "subject")
    _check_max_length(data.description, DESCRIPTION_MAX_LENGTH, "description")

    now = now or datetime.now(timezone.utc)
    raised_on = format_display_date(now.astimezone())
    initiator = data.initiator or DEFAULT_INITIATOR

    attempts = max(1, settings.ticket_update_max_retries)
    for attempt in range(1, attempts + 1):
        draft = Ticket(
            ticket_id=await next_ticket_id(),
            sr_no=await next_sr_no(),
            category=data.category,
            sub_category=data.sub_category,
            subject=data.subject,
            description=data.description,
            status=TicketStateMachine.initial_state(),
            priority=data.priority or TicketPriority.MEDIUM,
            raised_on=raised_on,
            last_updated_on=raised_on,
            supporting_document=data.supporting_document or "",
            initiator=initiator,
            raised_by=data.raised_by or initiator,
            re_client_name=data.re_client_name or initiator,
            fi_code=data.fi_code or generate_fi_code(),
            assigned_to=data.assigned_to or pick_default_assignee(),
            contact_info=data.contact_info,
            tags=data.tags,
            related_tickets=data.related_tickets,
            sla=data.sla,
            documents=data.documents,
            created_at=now,
            updated_at=now,
        )
        ticket, _ = append_audit_entry(
            draft,
            AuditEntryInput(
                activity="Ticket Created",
                status=TicketStatus.PENDING,
                remark=f"Ticket raised for {data.category} - {data.sub_category}",
                documents=data.documents,
                user_name=initiator,
            ),
            now=now,
        )

        try:
            created = await ticket_operations.insert_ticket(ticket)
        except DuplicateKeyError:
            logger.warning(
                "Ticket id %s already taken (attempt %s of %s), resyncing counters",
                ticket.ticket_id,
                attempt,
                attempts,
            )
            await resync_sequences()
            continue

        logger.info("Ticket %s created (srNo %s)", created.ticket_id, created.sr_no)
        return created

    raise TicketConflictError("Could not allocate a unique ticket id")


async def submit_feedback(
    ticket_id: str, data: FeedbackRequest, now: Optional[datetime] = None
) -> Ticket:
    """Record requester feedback on a resolved ticket and close it."""
    rating = data.rating
    if rating is None or not 1 <= rating <= 5:
        raise TicketValidationError("Rating must be between 1 and 5", ["rating"])

    def mutate(ticket: Ticket):
        if ticket.status != TicketStatus.RESOLVED:
            raise InvalidTicketStateError("Feedback can only be submitted for resolved tickets")
        moment = now or datetime.now(timezone.utc)
        return append_audit_entry(
            ticket,
            AuditEntryInput(
                activity="Feedback Submitted",
                status=TicketStatus.CLOSED,
                previous_status=TicketStatus(ticket.status),
                remark=f"Rating: {rating}/5. {data.comment or ''}".strip(),
                documents=data.documents,
                user_name=DEFAULT_INITIATOR,
            ),
            now=moment,
            feedback={"rating": rating, "comment": data.comment, "submitted_at": moment},
        )

    return await _apply(ticket_id, mutate)


async def reopen_ticket(
    ticket_id: str, data: ReopenRequest, now: Optional[datetime] = None
) -> Ticket:
    """Re-open a resolved ticket with the requester's reason."""
    _require(data.reason, "Reason is required to reopen a ticket", "reason")

    def mutate(ticket: Ticket):
        if ticket.status != TicketStatus.RESOLVED:
            raise InvalidTicketStateError("Only resolved tickets can be reopened")
        return append_audit_entry(
            ticket,
            AuditEntryInput(
                activity="Ticket Re-Opened",
                status=TicketStatus.RE_OPENED,
                previous_status=TicketStatus(ticket.status),
                remark=f"Reason: {data.reason}. {data.description or ''}".strip(),
                documents=data.documents,
                user_name=DEFAULT_INITIATOR,
            ),
            now=now,
            reason=data.reason,
        )

    return await _apply(ticket_id, mutate)


async def provide_clarification(
    ticket_id: str, data: ClarificationRequest, now: Optional[datetime] = None
) -> Ticket:
    """Answer an open clarification request."""
    _require(data.clarification, "Clarification text is required", "clarification")

    def mutate(ticket: Ticket):
        if ticket.status != TicketStatus.CLARIFICATION_SOUGHT:
            raise InvalidTicketStateError(
                'Clarification can only be provided when status is "Clarification Sought"'
            )
        return append_audit_entry(
            ticket,
            AuditEntryInput(
                activity="Clarification Provided",
                status=TicketStatus.CLARIFICATION_PROVIDED,
                previous_status=TicketStatus(ticket.status),
                remark=data.clarification,
                documents=data.documents,
                user_name=DEFAULT_INITIATOR,
            ),
            now=now,
        )

    return await _apply(ticket_id, mutate)


async def update_ticket_status(
    ticket_id: str, data: StatusUpdateRequest, now: Optional[datetime] = None
) -> Ticket:
    """
    Move a ticket to a new status (administrative action)

    Only transitions allowed by TicketStateMachine are accepted.

    Raises:
        TicketValidationError: If no status is given or remarks are too long
        InvalidTicketTransitionError: If the target is not reachable from the current status
    """
    _require(data.status, "New status is required", "status")
    _check_max_length(data.remarks, REMARKS_MAX_LENGTH, "remarks")

    def mutate(ticket: Ticket):
        TicketStateMachine.assert_transition(ticket.status, data.status)
        changes = {}
        if data.remarks:
            changes["remarks"] = data.remarks
        return append_audit_entry(
            ticket,
            AuditEntryInput(
                activity=activity_for(data.status),
                status=TicketStatus(data.status),
                previous_status=TicketStatus(ticket.status),
                remark=data.remarks or "",
                documents=data.documents,
                user_name=data.admin_user or DEFAULT_ADMIN,
            ),
            now=now,
            **changes,
        )

    return await _apply(ticket_id, mutate)


async def resolve_ticket(
    ticket_id: str, data: ResolveRequest, now: Optional[datetime] = None
) -> Ticket:
    return await update_ticket_status(
        ticket_id,
        StatusUpdateRequest(
            status=TicketStatus.RESOLVED.value,
            remarks=data.remarks or data.resolution,
            documents=data.documents,
            admin_user=data.admin_user,
        ),
        now=now,
    )


async def request_clarification(
    ticket_id: str, data: ClarificationQuestion, now: Optional[datetime] = None
) -> Ticket:
    return await update_ticket_status(
        ticket_id,
        StatusUpdateRequest(
            status=TicketStatus.CLARIFICATION_SOUGHT.value,
            remarks=data.question or data.remarks,
            documents=data.documents,
            admin_user=data.admin_user,
        ),
        now=now,
    )


async def intervene_ticket(
    ticket_id: str, data: InterventionRequest, now: Optional[datetime] = None
) -> Ticket:
    """Record an administrator's note without changing the status."""
    _require(data.remark, "Remark is required", "remark")
    remark = data.remark.strip()

    def mutate(ticket: Ticket):
        return append_audit_entry(
            ticket,
            AuditEntryInput(
                activity="Admin Intervention",
                status=TicketStatus(ticket.status),
                remark=remark,
                user_name=data.admin_user or DEFAULT_ADMIN,
            ),
            now=now,
        )

    return await _apply(ticket_id, mutate)


async def assign_ticket(
    ticket_id: str, data: AssignRequest, now: Optional[datetime] = None
) -> Ticket:
    """
    Hand a ticket to a relationship executive or back to the helpdesk

    Both targets leave the ticket in "Assigned to RE"; only ``assignedTo``
    tells them apart. The transition table is not consulted, but closed
    tickets stay closed.

    Raises:
        TicketValidationError: If assignTo is missing/unknown, or reEntity is missing for "re"
        InvalidTicketStateError: If the ticket is closed
    """
    _require(data.assign_to, "assignTo is required (helpdesk or re)", "assignTo")
    target = data.assign_to.strip().lower()
    _check_choice(target, ASSIGN_TARGETS, "assignTo")
    if target == "re":
        _require(data.re_entity, "RE Entity is required when assigning to RE", "reEntity")
    _check_max_length(data.remarks, REMARKS_MAX_LENGTH, "remarks")

    assignee = data.re_entity if target == "re" else HELPDESK_ASSIGNEE

    def mutate(ticket: Ticket):
        if TicketStateMachine.is_terminal(ticket.status):
            raise InvalidTicketStateError(f'{ticket.status} tickets cannot be assigned')
        changes = {"assigned_to": assignee}
        if data.remarks:
            changes["remarks"] = data.remarks
        return append_audit_entry(
            ticket,
            AuditEntryInput(
                activity="Assigned to RE" if target == "re" else "Assigned to Helpdesk",
                status=TicketStatus.ASSIGNED_TO_RE,
                previous_status=TicketStatus(ticket.status),
                remark=data.remarks or "",
                documents=data.documents,
                user_name=data.admin_user or DEFAULT_ADMIN,
            ),
            now=now,
            **changes,
        )

    return await _apply(ticket_id, mutate)


__all__: List[str] = [
    "create_ticket",
    "submit_feedback",
    "reopen_ticket",
    "provide_clarification",
    "update_ticket_status",
    "resolve_ticket",
    "request_clarification",
    "intervene_ticket",
    "assign_ticket",
]
