"""
Relationship-executive routes
"""
from typing import Any, Dict

from fastapi import APIRouter, Depends

from helpdesk.models import ClarificationQuestion, ResolveRequest, TicketQuery
from helpdesk.tickets import query, service

from .responses import page_response, success_response, ticket_query_params


router = APIRouter(prefix="/api/re", tags=["re"])


@router.get("/tickets", response_model=Dict[str, Any])
async def list_re_tickets(params: TicketQuery = Depends(ticket_query_params)) -> Dict[str, Any]:
    page = await query.get_admin_tickets(params)
    return page_response(page, "Tickets retrieved successfully")


@router.get("/tickets/{ticket_id}", response_model=Dict[str, Any])
async def get_re_ticket(ticket_id: str) -> Dict[str, Any]:
    ticket = await query.get_ticket(ticket_id)
    return success_response(ticket.to_response(), "Ticket retrieved successfully")


@router.post("/tickets/{ticket_id}/resolve", response_model=Dict[str, Any])
async def resolve_re_ticket(ticket_id: str, data: ResolveRequest) -> Dict[str, Any]:
    ticket = await service.resolve_ticket(ticket_id, data)
    return success_response(ticket.to_response(), "Ticket resolved successfully")


@router.post("/tickets/{ticket_id}/seek-clarification", response_model=Dict[str, Any])
async def seek_clarification(ticket_id: str, data: ClarificationQuestion) -> Dict[str, Any]:
    ticket = await service.request_clarification(ticket_id, data)
    return success_response(ticket.to_response(), "Clarification requested successfully")
