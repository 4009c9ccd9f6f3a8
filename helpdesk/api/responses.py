"""
Success envelopes and shared query-string parsing for the routers
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import Query

from helpdesk.models import TicketPage, TicketQuery


def success_response(data: Any, message: Optional[str] = None, **meta: Any) -> Dict[str, Any]:
    return {
        "success": True,
        "data": data,
        "message": message,
        "meta": {"timestamp": datetime.now(timezone.utc).isoformat(), **meta},
    }


def page_response(page: TicketPage, message: str) -> Dict[str, Any]:
    """Envelope for a ticket listing; ``data`` is the whole page object."""
    return success_response(page.to_response(), message)


def ticket_query_params(
    page: int = Query(1),
    limit: int = Query(10),
    status: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    sort_field: str = Query("createdAt", alias="sortField"),
    sort_order: str = Query("desc", alias="sortOrder"),
) -> TicketQuery:
    return TicketQuery(
        page=page,
        limit=limit,
        status=status,
        category=category,
        search=search,
        sort_field=sort_field,
        sort_order=sort_order,
    )
