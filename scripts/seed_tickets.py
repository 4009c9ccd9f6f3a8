"""
Seed the tickets collection with demo data.

Every ticket is raised and moved through its lifecycle with the regular
ticket operations, so seeded audit trails look exactly like real ones.

Usage:
    python scripts/seed_tickets.py            # add demo tickets
    python scripts/seed_tickets.py --reset    # drop existing tickets first
"""
import asyncio
import argparse
import sys
import os

# Add parent directory to path to import helpdesk modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from helpdesk.database import get_collection, close_connection, ensure_indexes, COLLECTION_TICKETS
from helpdesk.models import (
    AssignRequest,
    ClarificationQuestion,
    ClarificationRequest,
    FeedbackRequest,
    InterventionRequest,
    ReopenRequest,
    ResolveRequest,
    TicketCreate,
)
from helpdesk.tickets import service
from helpdesk.tickets.identifiers import resync_sequences


DEMO_TICKETS = [
    {
        "ticket": {
            "category": "Technical",
            "subCategory": "System Performance",
            "subject": "System running slowly after update",
            "description": "After the latest software update the portal takes minutes to load.",
            "priority": "High",
            "initiator": "John Doe",
            "reClientName": "ABC Financial Services",
        },
        "steps": [],
    },
    {
        "ticket": {
            "category": "Operational",
            "subCategory": "Data Upload",
            "subject": "Unable to upload bulk data file",
            "description": "CSV file with 5000+ records fails to upload. File size is within limits.",
            "initiator": "Jane Smith",
            "reClientName": "XYZ Banking Corp",
        },
        "steps": [
            ("resolve", ResolveRequest(remarks="Upload limit raised for the account", adminUser="Support Manager")),
        ],
    },
    {
        "ticket": {
            "category": "Functional",
            "subCategory": "Report Generation",
            "subject": "Monthly report shows wrong totals",
            "description": "Totals in the monthly statement do not match the transaction list.",
            "priority": "Urgent",
            "initiator": "Ravi Kumar",
        },
        "steps": [
            ("request_clarification", ClarificationQuestion(question="Which month and branch?")),
            ("provide_clarification", ClarificationRequest(clarification="August, Pune branch")),
        ],
    },
    {
        "ticket": {
            "category": "CERSAI-CKYC Level Queries",
            "subCategory": "KYC Upload",
            "subject": "CKYC records rejected",
            "description": "Batch of CKYC records rejected without a reason code.",
            "initiator": "Anita Rao",
        },
        "steps": [
            ("resolve", ResolveRequest(remarks="Re-submitted with corrected PAN format")),
            ("reopen", ReopenRequest(reason="Same rejection on the new batch", description="Batch 42 rejected again")),
            ("intervene", InterventionRequest(remark="Escalated to CERSAI liaison", adminUser="Helpdesk Lead")),
        ],
    },
    {
        "ticket": {
            "category": "Miscellaneous",
            "subCategory": "Access Request",
            "subject": "Need access for new team member",
            "description": "Please create maker access for our new operations analyst.",
            "priority": "Low",
            "initiator": "Meera Iyer",
        },
        "steps": [
            ("assign", AssignRequest(assignTo="re", reEntity="FI045", remarks="Needs RE approval")),
            ("resolve", ResolveRequest(resolution="Access granted")),
            ("submit_feedback", FeedbackRequest(rating=5, comment="Quick turnaround")),
        ],
    },
]

OPERATIONS = {
    "resolve": service.resolve_ticket,
    "request_clarification": service.request_clarification,
    "provide_clarification": service.provide_clarification,
    "reopen": service.reopen_ticket,
    "intervene": service.intervene_ticket,
    "assign": service.assign_ticket,
    "submit_feedback": service.submit_feedback,
}


async def seed_tickets(reset: bool):
    """
    Create the demo tickets

    Args:
        reset: Delete all existing tickets before seeding
    """
    await ensure_indexes()

    if reset:
        result = await get_collection(COLLECTION_TICKETS).delete_many({})
        print(f"Deleted {result.deleted_count} existing ticket(s)")

    # Counters are re-derived from whatever is left in the collection
    await resync_sequences()

    for demo in DEMO_TICKETS:
        ticket = await service.create_ticket(TicketCreate.model_validate(demo["ticket"]))
        for operation, payload in demo["steps"]:
            ticket = await OPERATIONS[operation](ticket.ticket_id, payload)
        print(f"Created ticket {ticket.ticket_id} [{ticket.status}] {ticket.subject}")

    print(f"\nSeeded {len(DEMO_TICKETS)} tickets.")


async def main(reset: bool):
    try:
        await seed_tickets(reset)
    finally:
        await close_connection()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the tickets collection with demo data")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Delete all existing tickets before seeding"
    )
    args = parser.parse_args()

    asyncio.run(main(args.reset))
