"""
Ticket enumerations
"""
from enum import Enum


class TicketStatus(str, Enum):
    """Ticket lifecycle states"""
    PENDING = "Pending"
    RESOLVED = "Resolved"
    CLARIFICATION_SOUGHT = "Clarification Sought"
    CLARIFICATION_PROVIDED = "Clarification Provided"
    RE_OPENED = "Re-Opened"
    RESPONDED_BY_RE = "Responded by RE"
    ASSIGNED_TO_RE = "Assigned to RE"
    CLOSED = "Closed"


class TicketCategory(str, Enum):
    """Fixed set of ticket categories"""
    TECHNICAL = "Technical"
    OPERATIONAL = "Operational"
    FUNCTIONAL = "Functional"
    MISCELLANEOUS = "Miscellaneous"
    CERSAI_CKYC = "CERSAI-CKYC Level Queries"


class TicketPriority(str, Enum):
    """Ticket priority levels"""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    URGENT = "Urgent"


class SLAStatus(str, Enum):
    """SLA tracking states"""
    ON_TRACK = "On Track"
    AT_RISK = "At Risk"
    BREACHED = "Breached"
