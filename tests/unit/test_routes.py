from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.testclient import TestClient
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.exceptions import HTTPException as StarletteHTTPException

import pytest

from helpdesk.api import admin_router, health_router, re_router, router, upload_router
from helpdesk.config import settings
from helpdesk.database import COLLECTION_TICKETS
from helpdesk.security.error_handler import (
    request_validation_handler,
    secure_exception_handler,
    ticket_error_handler,
)
from helpdesk.tickets.errors import TicketServiceError


def build_app():
    app = FastAPI()
    limiter = Limiter(key_func=get_remote_address)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)
    app.add_exception_handler(TicketServiceError, ticket_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, secure_exception_handler)
    app.add_exception_handler(Exception, secure_exception_handler)
    app.include_router(health_router)
    app.include_router(router)
    app.include_router(admin_router)
    app.include_router(re_router)
    app.include_router(upload_router)
    return app


@pytest.fixture
def client(fake_db):
    return TestClient(build_app(), raise_server_exceptions=False)


def create_ticket(client, **overrides):
    payload = {
        "category": "Technical",
        "subCategory": "SFTP",
        "subject": "Upload failing",
        "description": "Transfers stop at 50%",
        "initiator": "Priya",
    }
    payload.update(overrides)
    response = client.post("/api/tickets", json=payload)
    assert response.status_code == 201
    return response.json()["data"]


@pytest.mark.unit
def test_create_ticket_success(client, fake_db):
    response = client.post(
        "/api/tickets",
        json={
            "category": "Technical",
            "subCategory": "SFTP",
            "subject": "x",
            "description": "y",
        },
    )

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Ticket created successfully"
    assert "timestamp" in body["meta"]
    data = body["data"]
    assert data["ticketId"] == "7654567897"
    assert data["srNo"] == 1
    assert data["status"] == "Pending"
    assert data["auditTrail"][0]["activity"] == "Ticket Created"
    assert len(fake_db[COLLECTION_TICKETS].documents) == 1


@pytest.mark.unit
def test_create_ticket_missing_fields_returns_400(client):
    response = client.post("/api/tickets", json={"category": "Technical"})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"]["kind"] == "ValidationError"
    assert body["error"]["fields"] == ["subCategory", "subject", "description"]
    assert body["error"]["trace_id"]


@pytest.mark.unit
def test_malformed_body_returns_400(client):
    response = client.post("/api/tickets", json={"category": "Technical", "tags": "not-a-list"})

    assert response.status_code == 400
    assert response.json()["error"]["kind"] == "ValidationError"


@pytest.mark.unit
def test_get_unknown_ticket_returns_404(client):
    response = client.get("/api/tickets/0000")

    assert response.status_code == 404
    error = response.json()["error"]
    assert error["kind"] == "NotFound"
    assert error["message"] == "Ticket 0000 not found"


@pytest.mark.unit
def test_full_requester_flow(client):
    ticket = create_ticket(client)
    ticket_id = ticket["ticketId"]

    response = client.post(f"/api/tickets/{ticket_id}/resolve", json={"remarks": "Restarted"})
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "Resolved"

    response = client.post(f"/api/tickets/{ticket_id}/reopen", json={"reason": "Still failing"})
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "Re-Opened"

    response = client.get(f"/api/tickets/{ticket_id}")
    assert response.json()["data"]["reopeningReason"] == "Still failing"

    response = client.patch(f"/api/tickets/{ticket_id}/status", json={"status": "Resolved"})
    assert response.status_code == 200

    response = client.post(f"/api/tickets/{ticket_id}/feedback", json={"rating": 5, "feedback": "Thanks"})
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "Closed"
    assert response.json()["data"]["feedback"]["rating"] == 5

    response = client.get(f"/api/tickets/{ticket_id}/audit-trail")
    activities = [entry["activity"] for entry in response.json()["data"]]
    assert activities == [
        "Ticket Created",
        "Ticket Resolved",
        "Ticket Re-Opened",
        "Ticket Resolved",
        "Feedback Submitted",
    ]
    assert [entry["srNo"] for entry in response.json()["data"]] == [1, 2, 3, 4, 5]


@pytest.mark.unit
def test_invalid_transition_returns_400(client):
    ticket = create_ticket(client)

    response = client.patch(f"/api/tickets/{ticket['ticketId']}/status", json={"status": "Closed"})

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["kind"] == "InvalidTransition"
    assert error["message"] == 'Invalid status transition from "Pending" to "Closed"'


@pytest.mark.unit
def test_invalid_state_returns_400(client):
    ticket = create_ticket(client)

    response = client.post(f"/api/tickets/{ticket['ticketId']}/feedback", json={"rating": 4})

    assert response.status_code == 400
    assert response.json()["error"]["kind"] == "InvalidState"


@pytest.mark.unit
def test_clarification_and_assignment_routes(client):
    ticket_id = create_ticket(client)["ticketId"]

    response = client.post(
        f"/api/tickets/{ticket_id}/request-clarification", json={"question": "Which host?"}
    )
    assert response.json()["data"]["status"] == "Clarification Sought"

    response = client.post(f"/api/tickets/{ticket_id}/clarification", json={"clarification": "sftp-02"})
    assert response.json()["data"]["status"] == "Clarification Provided"

    response = client.post(f"/api/tickets/{ticket_id}/assign", json={"assignTo": "re"})
    assert response.status_code == 400

    response = client.post(f"/api/tickets/{ticket_id}/assign", json={"assignTo": "re", "reEntity": "FI045"})
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "Assigned to RE"
    assert response.json()["data"]["assignedTo"] == "FI045"


@pytest.mark.unit
def test_list_tickets_with_pagination(client):
    for number in range(7):
        create_ticket(client, subject=f"Ticket {number}")

    response = client.get("/api/tickets", params={"page": 2, "limit": 5, "sortField": "srNo", "sortOrder": "asc"})

    assert response.status_code == 200
    body = response.json()
    page = body["data"]
    assert [ticket["subject"] for ticket in page["data"]] == ["Ticket 5", "Ticket 6"]
    assert page["page"] == 2
    assert page["limit"] == 5
    assert page["total"] == 7
    assert page["totalPages"] == 2
    assert page["hasNextPage"] is False
    assert page["hasPreviousPage"] is True
    assert page["hasMore"] is False


@pytest.mark.unit
def test_list_tickets_rejects_bad_page(client):
    assert client.get("/api/tickets", params={"page": 0}).status_code == 400
    assert client.get("/api/tickets", params={"page": "first"}).status_code == 400
    assert client.get("/api/tickets", params={"sortField": "$x"}).status_code == 400


@pytest.mark.unit
def test_stats_routes(client):
    ticket_id = create_ticket(client)["ticketId"]
    create_ticket(client)
    client.post(f"/api/tickets/{ticket_id}/resolve", json={"remarks": "Done"})

    for path in ("/api/tickets/stats", "/api/admin/stats"):
        data = client.get(path).json()["data"]
        assert data["total"] == 2
        assert data["byStatus"]["pending"] == 1
        assert data["byStatus"]["resolved"] == 1


@pytest.mark.unit
def test_admin_queues_and_intervention(client):
    reopened_id = create_ticket(client)["ticketId"]
    create_ticket(client)
    client.post(f"/api/tickets/{reopened_id}/resolve", json={"remarks": "Done"})
    client.post(f"/api/tickets/{reopened_id}/reopen", json={"reason": "Not done"})

    page = client.get("/api/admin/tickets/intervene").json()["data"]
    assert [ticket["ticketId"] for ticket in page["data"]] == [reopened_id]
    assert page["data"][0]["reopeningReason"] == "Not done"
    assert page["data"][0]["ticketAge"].endswith("days")

    tracked = client.get("/api/admin/tickets/track").json()
    assert tracked["data"]["total"] == 2

    response = client.post(
        f"/api/admin/tickets/{reopened_id}/intervene", json={"remark": "Calling requester", "adminUser": "Meera"}
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "Re-Opened"
    assert data["auditTrail"][-1]["activity"] == "Admin Intervention"

    response = client.post(f"/api/admin/tickets/{reopened_id}/intervene", json={"remark": ""})
    assert response.status_code == 400


@pytest.mark.unit
def test_re_routes(client):
    first_id = create_ticket(client)["ticketId"]
    second_id = create_ticket(client)["ticketId"]

    listing = client.get("/api/re/tickets").json()
    assert listing["data"]["total"] == 2
    assert all("ticketAge" in ticket for ticket in listing["data"]["data"])

    assert client.get(f"/api/re/tickets/{first_id}").json()["data"]["ticketId"] == first_id

    response = client.post(f"/api/re/tickets/{first_id}/resolve", json={"resolution": "Patched"})
    assert response.json()["data"]["status"] == "Resolved"

    response = client.post(f"/api/re/tickets/{second_id}/seek-clarification", json={"remarks": "Logs?"})
    assert response.json()["data"]["status"] == "Clarification Sought"


@pytest.mark.unit
def test_upload_returns_document_descriptors(client):
    response = client.post(
        "/api/uploads",
        files=[
            ("documents", ("invoice.pdf", b"%PDF-1.4", "application/pdf")),
            ("documents", ("screen.png", b"\x89PNG", "image/png")),
        ],
    )

    assert response.status_code == 201
    documents = response.json()["data"]
    assert [document["type"] for document in documents] == ["pdf", "image"]
    assert documents[0]["name"] == "invoice.pdf"
    assert documents[0]["size"] == 8
    assert documents[0]["id"].startswith("doc_")
    assert documents[0]["url"].startswith(f"{settings.upload_url_prefix}/documents-")
    assert documents[0]["url"].endswith(".pdf")

    ticket = create_ticket(client, documents=documents)
    assert ticket["auditTrail"][0]["documents"][0]["name"] == "invoice.pdf"


@pytest.mark.unit
def test_upload_rejects_disallowed_type(client):
    response = client.post(
        "/api/uploads", files=[("documents", ("run.sh", b"echo hi", "application/x-sh"))]
    )

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "File type application/x-sh is not allowed"


@pytest.mark.unit
def test_upload_rejects_too_many_files(client):
    files = [
        ("documents", (f"file{i}.json", b"{}", "application/json"))
        for i in range(settings.max_upload_files + 1)
    ]

    response = client.post("/api/uploads", files=files)

    assert response.status_code == 400


@pytest.mark.unit
def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.unit
def test_application_wiring(fake_db):
    from main import app

    client = TestClient(app, raise_server_exceptions=False)

    assert client.get("/").json()["name"] == "Helpdesk Ticket Service"
    assert client.get("/api/tickets").status_code == 200
    response = client.get("/api/tickets/unknown/nothing-here")
    assert response.status_code == 404
    assert response.json()["error"]["kind"] == "NotFound"
