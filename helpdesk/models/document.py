"""
Attachment descriptor models
"""
from datetime import datetime, timezone
from enum import Enum

from pydantic import Field

from .base import CamelModel


class DocumentType(str, Enum):
    """Attachment kinds derived from the upload MIME type"""
    PDF = "pdf"
    IMAGE = "image"
    DOCUMENT = "document"
    VIDEO = "video"
    SPREADSHEET = "spreadsheet"
    JSON = "json"
    OTHER = "other"


class Document(CamelModel):
    """Metadata of an uploaded file attached to a ticket or an audit entry"""
    id: str
    name: str
    type: DocumentType = DocumentType.DOCUMENT
    size: int = 0
    url: str = ""
    uploaded_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
