"""
Ticket identifier and sequence generation

``scan_next_ticket_id``/``scan_next_sr_no`` recompute the next values from
the tickets collection. They only seed the atomic counters used by
``next_ticket_id``/``next_sr_no``, so concurrent creates never share a value.
"""
import random
import re
from typing import Optional

from helpdesk.config import settings
from helpdesk.database import ticket_operations
from helpdesk.database.sequences import (
    SR_NO_SEQUENCE,
    TICKET_ID_SEQUENCE,
    next_sequence_value,
    reset_sequence,
)

_LEADING_INTEGER = re.compile(r"^\s*([+-]?\d+)")


def parse_ticket_number(ticket_id: str) -> Optional[int]:
    """Leading integer of a ticket id (``"123abc"`` -> 123), None when non-numeric."""
    match = _LEADING_INTEGER.match(ticket_id or "")
    if match is None:
        return None
    return int(match.group(1))


async def scan_next_ticket_id() -> str:
    max_numeric_id = 0
    async for ticket_id in ticket_operations.iter_ticket_ids():
        number = parse_ticket_number(ticket_id)
        if number is not None and number > max_numeric_id:
            max_numeric_id = number

    if max_numeric_id == 0:
        return settings.ticket_id_seed
    return str(max_numeric_id + 1)


async def scan_next_sr_no() -> int:
    highest = await ticket_operations.max_sr_no()
    return 1 if highest is None else highest + 1


async def _seed_ticket_number() -> int:
    return int(await scan_next_ticket_id())


async def next_ticket_id() -> str:
    return str(await next_sequence_value(TICKET_ID_SEQUENCE, _seed_ticket_number))


async def next_sr_no() -> int:
    return await next_sequence_value(SR_NO_SEQUENCE, scan_next_sr_no)


async def resync_sequences() -> None:
    """Forget both counters; the next identifiers are re-derived from the collection."""
    await reset_sequence(TICKET_ID_SEQUENCE)
    await reset_sequence(SR_NO_SEQUENCE)


def generate_fi_code() -> str:
    return f"FI{random.randint(1, 999):03d}"


def pick_default_assignee() -> str:
    return random.choice(settings.assignee_pool)
