"""
Requester-facing ticket routes
"""
from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from helpdesk.models import (
    AssignRequest,
    ClarificationQuestion,
    ClarificationRequest,
    FeedbackRequest,
    ReopenRequest,
    ResolveRequest,
    StatusUpdateRequest,
    TicketCreate,
    TicketQuery,
)
from helpdesk.tickets import query, service

from .responses import page_response, success_response, ticket_query_params


router = APIRouter(prefix="/api/tickets", tags=["tickets"])


@router.get("", response_model=Dict[str, Any])
async def list_tickets(params: TicketQuery = Depends(ticket_query_params)) -> Dict[str, Any]:
    """
    List tickets with filters, search, sorting and pagination

    Query params: page, limit, status (comma-separated for several), category,
    search, sortField, sortOrder
    """
    page = await query.get_tickets(params)
    return page_response(page, "Tickets retrieved successfully")


@router.get("/stats", response_model=Dict[str, Any])
async def ticket_stats() -> Dict[str, Any]:
    stats = await query.get_ticket_stats()
    return success_response(stats.to_response(), "Ticket statistics retrieved successfully")


@router.get("/{ticket_id}", response_model=Dict[str, Any])
async def get_ticket(ticket_id: str) -> Dict[str, Any]:
    ticket = await query.get_ticket(ticket_id)
    return success_response(ticket.to_response(), "Ticket retrieved successfully")


@router.post("", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED)
async def create_ticket(ticket_data: TicketCreate) -> Dict[str, Any]:
    """
    Raise a new ticket

    Attachments are uploaded first through POST /api/uploads and their
    descriptors passed in ``documents``.
    """
    ticket = await service.create_ticket(ticket_data)
    return success_response(ticket.to_response(), "Ticket created successfully")


@router.post("/{ticket_id}/feedback", response_model=Dict[str, Any])
async def submit_feedback(ticket_id: str, data: FeedbackRequest) -> Dict[str, Any]:
    ticket = await service.submit_feedback(ticket_id, data)
    return success_response(ticket.to_response(), "Feedback submitted successfully")


@router.post("/{ticket_id}/reopen", response_model=Dict[str, Any])
async def reopen_ticket(ticket_id: str, data: ReopenRequest) -> Dict[str, Any]:
    ticket = await service.reopen_ticket(ticket_id, data)
    return success_response(ticket.to_response(), "Ticket reopened successfully")


@router.post("/{ticket_id}/clarification", response_model=Dict[str, Any])
async def provide_clarification(ticket_id: str, data: ClarificationRequest) -> Dict[str, Any]:
    ticket = await service.provide_clarification(ticket_id, data)
    return success_response(ticket.to_response(), "Clarification provided successfully")


@router.get("/{ticket_id}/audit-trail", response_model=Dict[str, Any])
async def get_audit_trail(ticket_id: str) -> Dict[str, Any]:
    trail = await query.get_audit_trail(ticket_id)
    return success_response(
        [entry.to_response() for entry in trail],
        "Audit trail retrieved successfully",
    )


@router.patch("/{ticket_id}/status", response_model=Dict[str, Any])
async def update_ticket_status(ticket_id: str, data: StatusUpdateRequest) -> Dict[str, Any]:
    ticket = await service.update_ticket_status(ticket_id, data)
    return success_response(ticket.to_response(), "Ticket status updated successfully")


@router.post("/{ticket_id}/resolve", response_model=Dict[str, Any])
async def resolve_ticket(ticket_id: str, data: ResolveRequest) -> Dict[str, Any]:
    ticket = await service.resolve_ticket(ticket_id, data)
    return success_response(ticket.to_response(), "Ticket resolved successfully")


@router.post("/{ticket_id}/request-clarification", response_model=Dict[str, Any])
async def request_clarification(ticket_id: str, data: ClarificationQuestion) -> Dict[str, Any]:
    ticket = await service.request_clarification(ticket_id, data)
    return success_response(ticket.to_response(), "Clarification requested successfully")


@router.post("/{ticket_id}/assign", response_model=Dict[str, Any])
async def assign_ticket(ticket_id: str, data: AssignRequest) -> Dict[str, Any]:
    ticket = await service.assign_ticket(ticket_id, data)
    return success_response(ticket.to_response(), "Ticket assigned successfully")
