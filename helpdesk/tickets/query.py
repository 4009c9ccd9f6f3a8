"""
Read side of the ticket engine: filtered, sorted and paginated listings,
single-ticket lookups and aggregate counts
"""
import asyncio
import logging
import math
import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from helpdesk.database import ticket_operations
from helpdesk.database.ticket_operations import SortKeys
from helpdesk.models import (
    AuditEntry,
    StatusCounts,
    Ticket,
    TicketPage,
    TicketQuery,
    TicketStats,
    TicketStatus,
)

from .audit_trail import extract_reopening_reason
from .dates import calculate_ticket_age
from .errors import TicketNotFoundError, TicketValidationError

logger = logging.getLogger(__name__)

MATCH_ALL = "All"
INTERVENE_QUEUE_STATUSES = "Re-Opened,Clarification Provided"
SEARCH_FIELDS = ("subject", "description", "ticketId", "subCategory")
SORT_ORDERS = {"asc": 1, "desc": -1}
SORT_FIELDS = frozenset({
    "createdAt", "updatedAt", "srNo", "ticketId", "status", "category", "subCategory",
    "priority", "subject", "raisedOn", "lastUpdatedOn", "assignedTo",
})


def _match_values(value: Optional[str]):
    """Exact match for one value, ``$in`` for a comma-separated list, None for no filter."""
    if value is None:
        return None
    values = [part.strip() for part in value.split(",") if part.strip() not in ("", MATCH_ALL)]
    if not values:
        return None
    if len(values) == 1:
        return values[0]
    return {"$in": values}


def build_ticket_filter(query: TicketQuery) -> Dict[str, Any]:
    """Translate listing parameters into a MongoDB filter."""
    filter_query: Dict[str, Any] = {}

    status = _match_values(query.status)
    if status is not None:
        filter_query["status"] = status

    category = _match_values(query.category)
    if category is not None:
        filter_query["category"] = category

    if query.search and query.search.strip():
        pattern = re.escape(query.search.strip())
        filter_query["$or"] = [
            {field: {"$regex": pattern, "$options": "i"}} for field in SEARCH_FIELDS
        ]

    return filter_query


def build_sort(query: TicketQuery) -> SortKeys:
    order = (query.sort_order or "desc").lower()
    if order not in SORT_ORDERS:
        raise TicketValidationError("sortOrder must be asc or desc", ["sortOrder"])
    field = query.sort_field or "createdAt"
    if field not in SORT_FIELDS:
        raise TicketValidationError(f"sortField {field!r} is not sortable", ["sortField"])
    return [(field, SORT_ORDERS[order])]


def reopening_reason_for(ticket: Ticket) -> Optional[str]:
    """Why a re-opened ticket came back, from ``reason`` or the latest re-open entry."""
    if ticket.status != TicketStatus.RE_OPENED and not ticket.reason:
        return None
    if ticket.reason:
        return ticket.reason
    return extract_reopening_reason(ticket.audit_trail)


def with_admin_fields(ticket: Ticket, now: Optional[datetime] = None) -> Ticket:
    return ticket.with_changes(
        ticket_age=calculate_ticket_age(ticket.raised_on, now),
        reopening_reason=reopening_reason_for(ticket),
    )


async def get_tickets(query: TicketQuery) -> TicketPage:
    """
    Fetch one page of tickets

    The page and the total are read independently, so under concurrent
    writes ``total`` may briefly disagree with the returned page.

    Args:
        query: Filter, sort and pagination parameters

    Returns:
        TicketPage with pagination metadata

    Raises:
        TicketValidationError: If page < 1, limit < 1, or sortField or sortOrder is unknown
    """
    if query.page < 1:
        raise TicketValidationError("page must be at least 1", ["page"])
    if query.limit < 1:
        raise TicketValidationError("limit must be greater than 0", ["limit"])

    filter_query = build_ticket_filter(query)
    sort = build_sort(query)
    skip = (query.page - 1) * query.limit

    tickets, total = await asyncio.gather(
        ticket_operations.find_tickets(filter_query, sort, skip, query.limit),
        ticket_operations.count_tickets(filter_query),
    )

    total_pages = math.ceil(total / query.limit)
    has_next_page = query.page < total_pages
    logger.debug("Ticket query %s matched %s tickets", filter_query, total)

    return TicketPage(
        data=tickets,
        total=total,
        page=query.page,
        limit=query.limit,
        total_pages=total_pages,
        has_next_page=has_next_page,
        has_previous_page=query.page > 1,
        has_more=has_next_page,
    )


async def get_admin_tickets(query: TicketQuery, now: Optional[datetime] = None) -> TicketPage:
    """Ticket page with ``ticketAge`` and ``reopeningReason`` filled in."""
    page = await get_tickets(query)
    return page.model_copy(
        update={"data": [with_admin_fields(ticket, now) for ticket in page.data]}
    )


async def get_intervene_tickets(query: TicketQuery, now: Optional[datetime] = None) -> TicketPage:
    """Administrative queue of tickets waiting on the helpdesk after requester action."""
    if not query.status:
        query = query.model_copy(update={"status": INTERVENE_QUEUE_STATUSES})
    return await get_admin_tickets(query, now)


async def get_ticket(ticket_id: str) -> Ticket:
    ticket = await ticket_operations.find_ticket(ticket_id)
    if ticket is None:
        raise TicketNotFoundError(ticket_id)
    return ticket.with_changes(reopening_reason=reopening_reason_for(ticket))


async def get_audit_trail(ticket_id: str) -> List[AuditEntry]:
    ticket = await ticket_operations.find_ticket(ticket_id)
    if ticket is None:
        raise TicketNotFoundError(ticket_id)
    return list(ticket.audit_trail)


async def get_ticket_stats() -> TicketStats:
    """Total ticket count plus per-status counts."""
    counted = (
        TicketStatus.PENDING,
        TicketStatus.RESOLVED,
        TicketStatus.CLARIFICATION_SOUGHT,
        TicketStatus.RE_OPENED,
        TicketStatus.CLOSED,
    )
    total, *by_status = await asyncio.gather(
        ticket_operations.count_tickets({}),
        *(ticket_operations.count_tickets({"status": status.value}) for status in counted),
    )
    pending, resolved, clarification_sought, reopened, closed = by_status

    return TicketStats(
        total=total,
        by_status=StatusCounts(
            pending=pending,
            resolved=resolved,
            clarification_sought=clarification_sought,
            reopened=reopened,
            closed=closed,
        ),
    )
