"""
Administrator routes: ticket queues, statistics and interventions
"""
from typing import Any, Dict

from fastapi import APIRouter, Depends

from helpdesk.models import InterventionRequest, TicketQuery
from helpdesk.tickets import query, service

from .responses import page_response, success_response, ticket_query_params


router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/tickets", response_model=Dict[str, Any])
async def list_admin_tickets(params: TicketQuery = Depends(ticket_query_params)) -> Dict[str, Any]:
    """All tickets with ticketAge and reopeningReason filled in."""
    page = await query.get_admin_tickets(params)
    return page_response(page, "Tickets retrieved successfully")


@router.get("/tickets/intervene", response_model=Dict[str, Any])
async def list_intervene_tickets(params: TicketQuery = Depends(ticket_query_params)) -> Dict[str, Any]:
    """
    Tickets waiting on the helpdesk after requester action

    Defaults to Re-Opened and Clarification Provided tickets when no status is given.
    """
    page = await query.get_intervene_tickets(params)
    return page_response(page, "Intervention queue retrieved successfully")


@router.get("/tickets/track", response_model=Dict[str, Any])
async def list_tracked_tickets(params: TicketQuery = Depends(ticket_query_params)) -> Dict[str, Any]:
    page = await query.get_admin_tickets(params)
    return page_response(page, "Tracked tickets retrieved successfully")


@router.get("/stats", response_model=Dict[str, Any])
async def admin_stats() -> Dict[str, Any]:
    stats = await query.get_ticket_stats()
    return success_response(stats.to_response(), "Ticket statistics retrieved successfully")


@router.post("/tickets/{ticket_id}/intervene", response_model=Dict[str, Any])
async def intervene_ticket(ticket_id: str, data: InterventionRequest) -> Dict[str, Any]:
    """Record an administrator's note on the ticket without changing its status."""
    ticket = await service.intervene_ticket(ticket_id, data)
    return success_response(ticket.to_response(), "Intervention recorded successfully")
