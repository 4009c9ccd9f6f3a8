import re

import pytest

from helpdesk.config import settings
from helpdesk.database import COLLECTION_COUNTERS, COLLECTION_TICKETS
from helpdesk.tickets.identifiers import (
    generate_fi_code,
    next_sr_no,
    next_ticket_id,
    parse_ticket_number,
    pick_default_assignee,
    resync_sequences,
    scan_next_sr_no,
    scan_next_ticket_id,
)


@pytest.mark.unit
@pytest.mark.parametrize(
    "ticket_id,expected",
    [
        ("7654567897", 7654567897),
        ("123abc", 123),
        ("  42", 42),
        ("-5", -5),
        ("TKT-1", None),
        ("", None),
    ],
)
def test_parse_ticket_number(ticket_id, expected):
    assert parse_ticket_number(ticket_id) == expected


@pytest.mark.unit
@pytest.mark.asyncio
async def test_scan_uses_seed_for_empty_collection(fake_db):
    assert await scan_next_ticket_id() == settings.ticket_id_seed
    assert await scan_next_sr_no() == 1


@pytest.mark.unit
@pytest.mark.asyncio
async def test_scan_ignores_non_numeric_and_non_positive_ids(fake_db):
    fake_db[COLLECTION_TICKETS].seed(
        {"ticketId": "100", "srNo": 3},
        {"ticketId": "abc", "srNo": 7},
        {"ticketId": "-900", "srNo": 1},
        {"ticketId": "250xyz", "srNo": 2},
    )

    assert await scan_next_ticket_id() == "251"
    assert await scan_next_sr_no() == 8


@pytest.mark.unit
@pytest.mark.asyncio
async def test_scan_falls_back_to_seed_when_no_id_is_positive(fake_db):
    fake_db[COLLECTION_TICKETS].seed({"ticketId": "TKT-9", "srNo": 1}, {"ticketId": "0", "srNo": 2})

    assert await scan_next_ticket_id() == settings.ticket_id_seed


@pytest.mark.unit
@pytest.mark.asyncio
async def test_counters_hand_out_consecutive_values(fake_db):
    fake_db[COLLECTION_TICKETS].seed({"ticketId": "500", "srNo": 10})

    ids = [await next_ticket_id() for _ in range(3)]
    sr_nos = [await next_sr_no() for _ in range(3)]

    assert ids == ["501", "502", "503"]
    assert sr_nos == [11, 12, 13]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_counter_starts_at_seed(fake_db):
    assert await next_ticket_id() == settings.ticket_id_seed
    assert await next_ticket_id() == str(int(settings.ticket_id_seed) + 1)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_resync_reseeds_from_collection(fake_db):
    assert await next_ticket_id() == settings.ticket_id_seed

    fake_db[COLLECTION_TICKETS].seed({"ticketId": "9000000000", "srNo": 40})
    await resync_sequences()

    assert fake_db[COLLECTION_COUNTERS].documents == []
    assert await next_ticket_id() == "9000000001"
    assert await next_sr_no() == 41


@pytest.mark.unit
def test_generate_fi_code_format():
    for _ in range(100):
        code = generate_fi_code()
        assert re.fullmatch(r"FI\d{3}", code)
        assert code != "FI000"


@pytest.mark.unit
def test_default_assignee_comes_from_pool():
    assert pick_default_assignee() in settings.assignee_pool
