"""
Ticket models
"""
from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from .audit_log import AuditEntry
from .base import CamelModel
from .document import Document
from .ticket_status import SLAStatus, TicketCategory, TicketPriority, TicketStatus


class ContactInfo(CamelModel):
    """Requester contact details"""
    email: Optional[str] = None
    phone: Optional[str] = None
    name: Optional[str] = None


class SLA(CamelModel):
    """Service level target attached to a ticket"""
    due_date: str
    status: SLAStatus = SLAStatus.ON_TRACK


class Feedback(CamelModel):
    """Requester feedback captured when a resolved ticket is closed"""
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None
    submitted_at: Optional[datetime] = None


class Ticket(CamelModel):
    """Complete ticket document as stored in the tickets collection"""
    id: Optional[str] = Field(None, alias="_id")
    ticket_id: str
    sr_no: int
    category: TicketCategory
    sub_category: str
    subject: str
    description: str
    status: TicketStatus = TicketStatus.PENDING
    priority: TicketPriority = TicketPriority.MEDIUM
    raised_on: str
    last_updated_on: str
    supporting_document: str = ""
    reason: Optional[str] = None
    remarks: Optional[str] = None
    audit_trail: List[AuditEntry] = []
    contact_info: Optional[ContactInfo] = None
    tags: List[str] = []
    related_tickets: List[str] = []
    sla: Optional[SLA] = None
    initiator: Optional[str] = None
    assigned_to: Optional[str] = None
    re_client_name: str = ""
    fi_code: str = ""
    raised_by: str = ""
    documents: List[Document] = []
    feedback: Optional[Feedback] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    lock_version: int = 0

    # Read-side enrichments, never persisted
    ticket_age: Optional[str] = None
    reopening_reason: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_object_id(cls, value):
        return None if value is None else str(value)

    @field_validator("status", mode="before")
    @classmethod
    def _strip_status(cls, value):
        # Older rows carry stray whitespace around the status
        return value.strip() if isinstance(value, str) else value

    def to_document(self):
        document = super().to_document()
        for key in ("_id", "ticketAge", "reopeningReason"):
            document.pop(key, None)
        return document


class TicketPage(CamelModel):
    """One page of a ticket query plus pagination metadata"""
    data: List[Ticket]
    total: int
    page: int
    limit: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool
    has_more: bool


class StatusCounts(CamelModel):
    pending: int = 0
    resolved: int = 0
    clarification_sought: int = 0
    reopened: int = 0
    closed: int = 0


class TicketStats(CamelModel):
    """Aggregate ticket counts"""
    total: int
    by_status: StatusCounts
