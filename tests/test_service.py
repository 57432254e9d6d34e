"""Tests for the secretary REST service using FastAPI's TestClient."""
import pytest
from fastapi.testclient import TestClient

from secretary_server.config import Settings
from services.secretary_service.app import create_app


@pytest.fixture
def client(store, fake_assistant) -> TestClient:
    app = create_app(settings=Settings(default_recipient_email="team@example.com"), store=store,
                     assistant=fake_assistant)
    return TestClient(app)


def test_health(client) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_create_meeting_returns_conflicts(client) -> None:
    first = client.post("/meetings", json={"title": "Planning", "meeting_date": "2025-03-10T10:00:00Z"})
    assert first.status_code == 200
    assert first.json()["conflicts"] == []

    second = client.post(
        "/meetings",
        json={"title": "Design review", "meeting_date": "2025-03-10T10:30:00", "duration": 30},
    )
    body = second.json()
    assert second.status_code == 200
    assert body["meeting"]["id"] == 2
    assert [m["id"] for m in body["conflicts"]] == [1]


def test_back_to_back_slot_is_free(client) -> None:
    client.post("/meetings", json={"title": "Planning", "meeting_date": "2025-03-10T10:00:00Z"})
    response = client.post("/meetings/conflicts", json={"meeting_date": "2025-03-10T11:00:00Z", "duration": 30})
    assert response.status_code == 200
    assert response.json() == []


def test_reschedule_excludes_the_meeting_itself(client) -> None:
    client.post("/meetings", json={"title": "Planning", "meeting_date": "2025-03-10T10:00:00Z"})
    response = client.patch("/meetings/1", json={"meeting_date": "2025-03-10T10:15:00Z"})
    assert response.status_code == 200
    assert response.json()["conflicts"] == []


def test_invalid_duration_is_rejected(client) -> None:
    response = client.post(
        "/meetings", json={"title": "Planning", "meeting_date": "2025-03-10T10:00:00Z", "duration": 0}
    )
    assert response.status_code == 422


def test_unknown_meeting_is_404(client) -> None:
    response = client.get("/meetings/42")
    assert response.status_code == 404
    assert response.json()["detail"] == "Meeting with ID 42 not found"


def test_task_lifecycle(client) -> None:
    created = client.post("/tasks", json={"title": "Write report", "deadline": "2025-03-11T17:00:00Z"})
    assert created.status_code == 200
    task_id = created.json()["id"]

    updated = client.patch(f"/tasks/{task_id}", json={"priority": "high"})
    assert updated.json()["priority"] == "high"

    completed = client.post(f"/tasks/{task_id}/complete")
    assert completed.json()["status"] == "completed"

    assert client.get("/tasks", params={"status": "completed"}).json()[0]["id"] == task_id
    assert client.delete(f"/tasks/{task_id}").json() == {"success": True}
    assert client.get(f"/tasks/{task_id}").status_code == 404


def test_reminder_run_and_review_flow(client) -> None:
    client.post("/tasks", json={"title": "Due soon", "deadline": "2025-03-11T09:00:00Z"})
    client.post("/tasks", json={"title": "Far away", "deadline": "2025-03-20T09:00:00Z"})

    run = client.post("/tasks/reminders", json={"now": "2025-03-10T09:00:00Z"})
    assert run.status_code == 200
    body = run.json()
    assert body["reminders_generated"] == 1
    assert body["task_ids"] == [1]
    assert body["failed"] == []

    pending = client.get("/review/pending").json()
    assert [item["id"] for item in pending] == body["review_item_ids"]
    assert pending[0]["metadata"]["recipient_email"] == "team@example.com"

    item_id = pending[0]["id"]
    assert client.post(f"/review/{item_id}/send").status_code == 409

    approved = client.post(f"/review/{item_id}/approve", json={"reviewer_id": 3})
    assert approved.json()["status"] == "approved"

    sent = client.post(f"/review/{item_id}/send")
    assert sent.status_code == 200
    assert sent.json()["email_type"] == "reminder"

    tracking_id = sent.json()["tracking_id"]
    opened = client.post("/emails/status", json={"tracking_id": tracking_id, "status": "opened"})
    assert opened.json()[0]["status"] == "opened"


def test_reminder_run_respects_cooldown(client) -> None:
    client.post("/tasks", json={"title": "Due soon", "deadline": "2025-03-11T09:00:00Z"})
    client.post("/tasks/reminders", json={"now": "2025-03-10T09:00:00Z"})

    again = client.post("/tasks/reminders", json={"now": "2025-03-10T20:00:00Z"})
    assert again.json()["reminders_generated"] == 0

    eligible = client.get("/tasks/reminders/eligible")
    assert eligible.status_code == 200


def test_summary_and_chat(client) -> None:
    client.post("/meetings", json={"title": "Planning", "meeting_date": "2025-03-10T10:00:00Z"})

    summary = client.post("/meetings/1/summary", json={"transcript": "We agreed on the roadmap."})
    assert summary.status_code == 200
    assert summary.json()["type"] == "meeting_summary"
    assert client.get("/meetings/1").json()["summary_text"] == "## Summary of Planning"

    chat = client.post("/chat", json={"user_id": 2, "message": "Hello"})
    assert chat.json() == {"response": "You said: Hello"}
    assert len(client.get("/chat/2").json()) == 2


def test_translate(client) -> None:
    response = client.post("/translate", json={"text": "Bonjour"})
    assert response.json() == {"translated_text": "EN: Bonjour", "original_text": "Bonjour", "review_id": 1}


def test_assistant_endpoints_need_api_key(store) -> None:
    client = TestClient(create_app(settings=Settings(openai_api_key=None), store=store))
    response = client.post("/translate", json={"text": "Bonjour"})
    assert response.status_code == 503
