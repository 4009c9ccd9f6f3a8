"""
Audit trail models
"""
from typing import List, Optional

from pydantic import field_validator

from .base import CamelModel
from .document import Document
from .ticket_status import TicketStatus


class AuditEntry(CamelModel):
    """One append-only record of a state-affecting action on a ticket"""
    sr_no: int
    activity: str
    date: str
    timestamp: Optional[str] = None
    status: Optional[TicketStatus] = None
    previous_status: Optional[TicketStatus] = None
    remark: str = ""
    supporting_document: str = ""
    documents: List[Document] = []
    user_id: Optional[str] = None
    user_name: Optional[str] = None

    @field_validator("status", "previous_status", mode="before")
    @classmethod
    def _strip_status(cls, value):
        return value.strip() if isinstance(value, str) else value
