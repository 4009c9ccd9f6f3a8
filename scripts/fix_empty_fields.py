"""
Back-fill empty reClientName, raisedBy, fiCode and assignedTo fields.

Missing values get the same defaults new tickets receive at creation.

Usage:
    python scripts/fix_empty_fields.py
"""
import asyncio
import sys
import os

# Add parent directory to path to import helpdesk modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from helpdesk.database import get_collection, close_connection, COLLECTION_TICKETS
from helpdesk.tickets.identifiers import generate_fi_code, pick_default_assignee

FIELDS = ("reClientName", "raisedBy", "fiCode", "assignedTo")


def missing_field_defaults(document: dict) -> dict:
    """Values to $set on a stored ticket; empty when nothing is missing."""
    initiator = document.get("initiator") or "User"
    defaults = {
        "reClientName": lambda: initiator,
        "raisedBy": lambda: initiator,
        "fiCode": generate_fi_code,
        "assignedTo": pick_default_assignee,
    }
    return {field: defaults[field]() for field in FIELDS if not document.get(field)}


async def fix_empty_fields() -> int:
    collection = get_collection(COLLECTION_TICKETS)
    query = {
        "$or": [
            condition
            for field in FIELDS
            for condition in ({field: ""}, {field: {"$exists": False}})
        ]
    }

    fixed = 0
    async for document in collection.find(query):
        update_fields = missing_field_defaults(document)
        if not update_fields:
            continue
        await collection.update_one({"_id": document["_id"]}, {"$set": update_fields})
        print(f"Fixed ticket {document.get('ticketId')}: {update_fields}")
        fixed += 1

    print(f"\nDone fixing tickets! ({fixed} updated)")
    return fixed


async def main():
    try:
        await fix_empty_fields()
    finally:
        await close_connection()


if __name__ == "__main__":
    asyncio.run(main())
