"""
Database operations for the tickets collection

Tickets are stored with camelCase keys. Writes after creation go through
``save_ticket``, which only succeeds when the stored ``lockVersion`` still
matches the version the caller loaded.
"""
import logging
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple

from helpdesk.database.connection import get_collection, COLLECTION_TICKETS
from helpdesk.models import Ticket
from helpdesk.tickets.errors import TicketConflictError

logger = logging.getLogger(__name__)

SortKeys = List[Tuple[str, int]]


async def find_ticket(ticket_id: str) -> Optional[Ticket]:
    """
    Load a ticket by its ticketId

    Args:
        ticket_id: Public ticket identifier

    Returns:
        The ticket, or None when absent
    """
    collection = get_collection(COLLECTION_TICKETS)
    document = await collection.find_one({"ticketId": ticket_id})
    if document is None:
        return None
    return Ticket.model_validate(document)


async def insert_ticket(ticket: Ticket) -> Ticket:
    """
    Insert a new ticket

    Raises:
        pymongo.errors.DuplicateKeyError: If the ticketId is already taken
    """
    collection = get_collection(COLLECTION_TICKETS)
    document = ticket.to_document()
    result = await collection.insert_one(document)
    return ticket.with_changes(id=str(result.inserted_id))


async def save_ticket(ticket: Ticket) -> Ticket:
    """
    Replace a stored ticket, guarded by its lock version

    Args:
        ticket: Updated ticket carrying the lock version it was loaded with

    Returns:
        The saved ticket with its lock version bumped

    Raises:
        TicketConflictError: If another writer saved the ticket first
    """
    collection = get_collection(COLLECTION_TICKETS)
    saved = ticket.with_changes(lock_version=ticket.lock_version + 1)
    result = await collection.replace_one(
        {"ticketId": ticket.ticket_id, "lockVersion": ticket.lock_version},
        saved.to_document(),
    )
    if result.matched_count == 0:
        logger.warning(
            "Lock version %s of ticket %s is stale", ticket.lock_version, ticket.ticket_id
        )
        raise TicketConflictError(f"Ticket {ticket.ticket_id} was modified concurrently")
    return saved


async def find_tickets(
    filter_query: Dict[str, Any],
    sort: SortKeys,
    skip: int,
    limit: int,
) -> List[Ticket]:
    """Fetch one page of tickets matching a filter."""
    collection = get_collection(COLLECTION_TICKETS)
    cursor = collection.find(filter_query).sort(sort).skip(skip).limit(limit)

    tickets = []
    async for document in cursor:
        tickets.append(Ticket.model_validate(document))
    return tickets


async def count_tickets(filter_query: Optional[Dict[str, Any]] = None) -> int:
    collection = get_collection(COLLECTION_TICKETS)
    return await collection.count_documents(filter_query or {})


async def iter_ticket_ids() -> AsyncIterator[str]:
    """Yield every stored ticketId."""
    collection = get_collection(COLLECTION_TICKETS)
    async for document in collection.find({}, {"ticketId": 1}):
        ticket_id = document.get("ticketId")
        if ticket_id is not None:
            yield str(ticket_id)


async def max_sr_no() -> Optional[int]:
    """Highest ticket-level srNo, or None for an empty collection."""
    collection = get_collection(COLLECTION_TICKETS)
    document = await collection.find_one({}, sort=[("srNo", -1)])
    if document is None or document.get("srNo") is None:
        return None
    return int(document["srNo"])
