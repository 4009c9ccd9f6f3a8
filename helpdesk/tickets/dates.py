"""
Display timestamps in the DD/MM/YYYY hh:mmAM/PM format used on tickets
"""
import math
from datetime import datetime, timezone
from typing import Optional

DISPLAY_FORMAT = "%d/%m/%Y %I:%M%p"
NOT_AVAILABLE = "N/A"


def format_display_date(moment: Optional[datetime] = None) -> str:
    """Format a moment (local time by default) as e.g. ``05/09/2025 02:30PM``."""
    moment = moment or datetime.now()
    return moment.strftime(DISPLAY_FORMAT)


def iso_timestamp(moment: Optional[datetime] = None) -> str:
    moment = moment or datetime.now(timezone.utc)
    return moment.isoformat()


def parse_display_day(value: str) -> datetime:
    """Parse the DD/MM/YYYY prefix of a display date; the time part is ignored."""
    day, month, year = value.split(" ")[0].split("/")
    return datetime(int(year), int(month), int(day))


def calculate_ticket_age(raised_on: Optional[str], now: Optional[datetime] = None) -> str:
    """Whole days (rounded up) between the raise date and now, e.g. ``3 days``."""
    try:
        raised = parse_display_day(raised_on)
    except (AttributeError, TypeError, ValueError):
        return NOT_AVAILABLE
    now = now or datetime.now()
    elapsed = abs((now - raised).total_seconds())
    return f"{math.ceil(elapsed / 86400)} days"
