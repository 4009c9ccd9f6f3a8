"""
Parameter objects for lifecycle operations and ticket queries

Required fields are Optional here; presence and range checks live in
helpdesk.tickets.service and raise TicketValidationError.
"""
from typing import List, Optional

from pydantic import AliasChoices, Field

from .base import CamelModel
from .document import Document
from .ticket import SLA, ContactInfo


class TicketCreate(CamelModel):
    """Data for raising a new ticket"""
    category: Optional[str] = None
    sub_category: Optional[str] = None
    subject: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    supporting_document: Optional[str] = None
    initiator: Optional[str] = None
    raised_by: Optional[str] = None
    re_client_name: Optional[str] = None
    fi_code: Optional[str] = None
    assigned_to: Optional[str] = None
    contact_info: Optional[ContactInfo] = None
    tags: List[str] = []
    related_tickets: List[str] = []
    sla: Optional[SLA] = None
    documents: List[Document] = []


class FeedbackRequest(CamelModel):
    rating: Optional[int] = None
    comment: Optional[str] = Field(None, validation_alias=AliasChoices("comment", "feedback"))
    documents: List[Document] = []


class ReopenRequest(CamelModel):
    reason: Optional[str] = None
    description: Optional[str] = None
    documents: List[Document] = []


class ClarificationRequest(CamelModel):
    clarification: Optional[str] = None
    documents: List[Document] = []


class StatusUpdateRequest(CamelModel):
    status: Optional[str] = None
    remarks: Optional[str] = None
    documents: List[Document] = []
    admin_user: Optional[str] = None


class ResolveRequest(CamelModel):
    remarks: Optional[str] = None
    resolution: Optional[str] = None
    documents: List[Document] = []
    admin_user: Optional[str] = None


class ClarificationQuestion(CamelModel):
    question: Optional[str] = None
    remarks: Optional[str] = None
    documents: List[Document] = []
    admin_user: Optional[str] = None


class InterventionRequest(CamelModel):
    remark: Optional[str] = None
    admin_user: Optional[str] = None


class AssignRequest(CamelModel):
    assign_to: Optional[str] = None
    re_entity: Optional[str] = None
    remarks: Optional[str] = None
    documents: List[Document] = []
    admin_user: Optional[str] = None


class TicketQuery(CamelModel):
    """Filter, sort and pagination parameters for ticket listings"""
    page: int = 1
    limit: int = 10
    status: Optional[str] = None
    category: Optional[str] = None
    search: Optional[str] = None
    sort_field: str = "createdAt"
    sort_order: str = "desc"
