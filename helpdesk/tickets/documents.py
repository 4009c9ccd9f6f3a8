"""
Attachment descriptor mapping
"""
import random
import string
import time
from typing import Optional

from helpdesk.models import Document, DocumentType

# Ordered: the first matching fragment decides the type
_MIME_FRAGMENTS = (
    (("pdf",), DocumentType.PDF),
    (("image",), DocumentType.IMAGE),
    (("video",), DocumentType.VIDEO),
    (("spreadsheet", "excel"), DocumentType.SPREADSHEET),
    (("json",), DocumentType.JSON),
)

_ID_ALPHABET = string.ascii_lowercase + string.digits


def document_type_for(mime_type: Optional[str]) -> DocumentType:
    """Derive the attachment type from a MIME type."""
    mime_type = (mime_type or "").lower()
    for fragments, document_type in _MIME_FRAGMENTS:
        if any(fragment in mime_type for fragment in fragments):
            return document_type
    return DocumentType.DOCUMENT


def generate_document_id() -> str:
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"doc_{int(time.time() * 1000)}_{suffix}"


def build_document(
    name: str,
    mime_type: Optional[str],
    size: int,
    url: str,
    document_id: Optional[str] = None,
) -> Document:
    """Build a descriptor for one uploaded file."""
    return Document(
        id=document_id or generate_document_id(),
        name=name,
        type=document_type_for(mime_type),
        size=size,
        url=url,
    )
