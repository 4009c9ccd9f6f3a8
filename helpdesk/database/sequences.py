"""
Atomic named counters for ticket identifiers

Each counter lives in the counters collection as ``{_id: name, value: n}``
and is advanced with a single ``$inc``. A missing counter is seeded from the
caller-supplied function; two processes racing to seed it are separated by
the unique ``_id``.
"""
import logging
from typing import Awaitable, Callable

from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from helpdesk.database.connection import get_collection, COLLECTION_COUNTERS

logger = logging.getLogger(__name__)

TICKET_ID_SEQUENCE = "ticketId"
SR_NO_SEQUENCE = "srNo"


async def next_sequence_value(name: str, seed: Callable[[], Awaitable[int]]) -> int:
    """
    Hand out the next value of a named counter

    Args:
        name: Counter name
        seed: Coroutine function computing the first value when the counter is missing

    Returns:
        The reserved value
    """
    counters = get_collection(COLLECTION_COUNTERS)

    while True:
        counter = await counters.find_one_and_update(
            {"_id": name},
            {"$inc": {"value": 1}},
            return_document=ReturnDocument.AFTER,
        )
        if counter is not None:
            return int(counter["value"])

        initial = await seed()
        try:
            await counters.insert_one({"_id": name, "value": initial})
        except DuplicateKeyError:
            logger.debug("Counter %s was seeded concurrently, retrying increment", name)
            continue
        logger.info("Seeded counter %s at %s", name, initial)
        return initial


async def reset_sequence(name: str) -> None:
    """Drop a counter so that its next use re-seeds it from the tickets collection."""
    counters = get_collection(COLLECTION_COUNTERS)
    await counters.delete_one({"_id": name})
