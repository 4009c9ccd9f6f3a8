"""
Pydantic models for data validation
"""
from .ticket_status import TicketStatus, TicketCategory, TicketPriority, SLAStatus
from .document import Document, DocumentType
from .audit_log import AuditEntry
from .ticket import (
    Ticket,
    TicketPage,
    TicketStats,
    StatusCounts,
    Feedback,
    ContactInfo,
    SLA,
)
from .requests import (
    TicketCreate,
    FeedbackRequest,
    ReopenRequest,
    ClarificationRequest,
    StatusUpdateRequest,
    ResolveRequest,
    ClarificationQuestion,
    InterventionRequest,
    AssignRequest,
    TicketQuery,
)

__all__ = [
    "TicketStatus",
    "TicketCategory",
    "TicketPriority",
    "SLAStatus",
    "Document",
    "DocumentType",
    "AuditEntry",
    "Ticket",
    "TicketPage",
    "TicketStats",
    "StatusCounts",
    "Feedback",
    "ContactInfo",
    "SLA",
    "TicketCreate",
    "FeedbackRequest",
    "ReopenRequest",
    "ClarificationRequest",
    "StatusUpdateRequest",
    "ResolveRequest",
    "ClarificationQuestion",
    "InterventionRequest",
    "AssignRequest",
    "TicketQuery",
]
