"""
Attachment upload route

Files are validated and described, not stored: the returned descriptors are
what lifecycle requests carry in their ``documents`` field.
"""
import logging
import os
import random
import time
from typing import Any, Dict, List

from fastapi import APIRouter, File, UploadFile, status

from helpdesk.config import settings
from helpdesk.tickets.documents import build_document
from helpdesk.tickets.errors import TicketValidationError

from .responses import success_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/uploads", tags=["uploads"])

UPLOAD_FIELD = "documents"


def stored_filename(original_name: str) -> str:
    """Unique name an upload is published under, e.g. ``documents-1717000000000-123456789.pdf``."""
    extension = os.path.splitext(original_name or "")[1]
    return f"{UPLOAD_FIELD}-{int(time.time() * 1000)}-{random.randint(0, 10**9)}{extension}"


@router.post("", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED)
async def upload_documents(documents: List[UploadFile] = File(...)) -> Dict[str, Any]:
    """
    Describe uploaded attachments

    Accepts up to ``max_upload_files`` files of the whitelisted MIME types,
    each at most ``max_upload_size`` bytes.
    """
    if len(documents) > settings.max_upload_files:
        raise TicketValidationError(
            f"Too many files. Maximum is {settings.max_upload_files}", [UPLOAD_FIELD]
        )

    descriptors = []
    for upload in documents:
        if upload.content_type not in settings.allowed_upload_types:
            raise TicketValidationError(
                f"File type {upload.content_type} is not allowed", [UPLOAD_FIELD]
            )

        content = await upload.read()
        if len(content) > settings.max_upload_size:
            raise TicketValidationError(
                f"File {upload.filename} is too large. "
                f"Maximum size is {settings.max_upload_size // (1024 * 1024)}MB",
                [UPLOAD_FIELD],
            )

        name = os.path.basename(upload.filename or "") or "upload"
        descriptors.append(
            build_document(
                name=name,
                mime_type=upload.content_type,
                size=len(content),
                url=f"{settings.upload_url_prefix}/{stored_filename(name)}",
            )
        )

    logger.info("Described %s uploaded file(s)", len(descriptors))
    return success_response(
        [document.to_response() for document in descriptors],
        "Files uploaded successfully",
    )
