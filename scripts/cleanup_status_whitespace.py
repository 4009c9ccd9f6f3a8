"""
Trim stray whitespace and newlines from stored ticket status values.

Usage:
    python scripts/cleanup_status_whitespace.py
"""
import asyncio
import sys
import os

# Add parent directory to path to import helpdesk modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from helpdesk.database import get_collection, close_connection, COLLECTION_TICKETS


async def cleanup_status_whitespace() -> int:
    collection = get_collection(COLLECTION_TICKETS)

    fixed = 0
    async for document in collection.find({}, {"ticketId": 1, "status": 1}):
        status = document.get("status")
        if not isinstance(status, str):
            continue
        trimmed = status.strip()
        if trimmed == status:
            continue
        await collection.update_one({"_id": document["_id"]}, {"$set": {"status": trimmed}})
        print(f"  Fixed {document.get('ticketId')}: {status!r} -> {trimmed!r}")
        fixed += 1

    if fixed == 0:
        print("All tickets have clean status values. Nothing to fix.")
    else:
        print(f"\nFixed {fixed} ticket(s).")
    return fixed


async def main():
    try:
        await cleanup_status_whitespace()
    finally:
        await close_connection()


if __name__ == "__main__":
    asyncio.run(main())
