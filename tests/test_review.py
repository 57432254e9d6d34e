"""Tests for the review queue and the AI flows that feed it."""
import json
from datetime import datetime, timedelta, timezone

import pytest

from assistant import flows
from secretary_server import meetings, review, tasks
from secretary_server.errors import ReviewStateError
from secretary_server.models import ActionItem

START = datetime(2025, 3, 10, 14, 0, tzinfo=timezone.utc)


def test_enqueue_creates_pending_item(store) -> None:
    item = review.enqueue(store, "translation", "Hello", original_content="Hola")

    assert item.status == "pending"
    assert review.list_pending(store) == [item]
    assert review.list_completed(store) == []


def test_approve_with_edit_marks_edited(store) -> None:
    item = review.enqueue(store, "email_draft", "Draft")
    approved = review.approve(store, item.id, reviewer_id=5, edited_content="Better draft")

    assert approved.status == "edited"
    assert approved.content == "Better draft"
    assert approved.reviewed_by == 5
    assert approved.reviewed_at is not None


def test_reject_keeps_notes(store) -> None:
    item = review.enqueue(store, "email_draft", "Draft")
    rejected = review.reject(store, item.id, reviewer_id=5, notes="Wrong tone")

    assert rejected.status == "rejected"
    assert rejected.review_notes == "Wrong tone"
    assert review.list_completed(store) == [rejected]


def test_approving_action_items_creates_tasks_for_assigned_owners(store) -> None:
    meeting = meetings.create_meeting(store, "Planning", START).meeting
    assigned = store.action_items.insert(
        ActionItem(meeting_id=meeting.id, description="Send slides", owner_id=7, deadline=START + timedelta(days=1))
    )
    unassigned = store.action_items.insert(ActionItem(meeting_id=meeting.id, description="Book room"))
    item = review.enqueue(
        store, "action_items", review.action_items_to_json([assigned, unassigned]), reference_id=meeting.id
    )

    review.approve(store, item.id, reviewer_id=1)

    created = tasks.list_tasks(store)
    assert [task.title for task in created] == ["Send slides"]
    assert created[0].meeting_id == meeting.id
    assert created[0].deadline == START + timedelta(days=1)
    linked = store.action_items.require(assigned.id)
    assert (linked.status, linked.task_id) == ("assigned", created[0].id)
    assert store.action_items.require(unassigned.id).status == "pending"


def test_approving_malformed_action_items_still_approves(store) -> None:
    item = review.enqueue(store, "action_items", "[]")
    approved = review.approve(store, item.id, reviewer_id=1, edited_content="not json")
    assert approved.status == "edited"
    assert tasks.list_tasks(store) == []


@pytest.mark.parametrize("edited_content", ['{"note": "no items"}', '["a", "b"]', "null"])
def test_approving_action_items_of_the_wrong_shape_still_approves(store, edited_content) -> None:
    item = review.enqueue(store, "action_items", "[]")
    approved = review.approve(store, item.id, reviewer_id=1, edited_content=edited_content)
    assert approved.status == "edited"
    assert tasks.list_tasks(store) == []


def test_edited_deadlines_are_read_as_utc(store) -> None:
    item = review.enqueue(store, "action_items", "[]")
    edited = json.dumps([
        {"description": "Send slides", "owner_id": 7, "deadline": "2025-03-11T09:00:00"},
        {"description": "Book room", "owner_id": 8, "deadline": "2025-03-11T10:00:00Z"},
    ])
    review.approve(store, item.id, reviewer_id=1, edited_content=edited)

    assert [task.deadline for task in store.tasks.list()] == [
        datetime(2025, 3, 11, 9, 0, tzinfo=timezone.utc),
        datetime(2025, 3, 11, 10, 0, tzinfo=timezone.utc),
    ]
    assert [task.title for task in tasks.list_reminder_candidates(store, now=START)] == [
        "Send slides", "Book room",
    ]


def test_send_approved_reminder_records_email(store) -> None:
    item = review.enqueue(
        store, "email_draft", "Please finish",
        metadata={"task_id": 3, "recipient_email": "owner@example.com", "is_reminder": True},
    )
    review.approve(store, item.id, reviewer_id=1)

    log = review.send_approved(store, item.id)

    assert log.email_type == "reminder"
    assert log.subject == "Task Reminder"
    assert log.recipient_email == "owner@example.com"
    assert log.related_task_id == 3


def test_send_requires_approval(store) -> None:
    item = review.enqueue(store, "email_draft", "Draft", metadata={"recipient_email": "owner@example.com"})
    with pytest.raises(ReviewStateError):
        review.send_approved(store, item.id)


def test_send_requires_recipient(store) -> None:
    item = review.enqueue(store, "email_draft", "Draft", metadata={"is_escalation": True})
    review.approve(store, item.id, reviewer_id=1)
    with pytest.raises(ReviewStateError):
        review.send_approved(store, item.id)


# -----------------------------
# Flows
# -----------------------------

def test_generate_summary_stores_summary_and_queues_it(store, fake_assistant) -> None:
    meeting = meetings.create_meeting(store, "Planning", START).meeting

    item = flows.generate_summary(store, fake_assistant, meeting.id, "We agreed on the roadmap.")

    assert item.type == "meeting_summary"
    assert item.reference_id == meeting.id
    assert store.meetings.require(meeting.id).summary_text == "## Summary of Planning"


def test_draft_reminder_uses_default_recipient_without_owner(store, fake_assistant) -> None:
    task = tasks.create_task(store, "Quarterly report", deadline=START)

    item = flows.draft_reminder(store, fake_assistant, task.id, default_recipient="team@example.com")

    assert item.content == "Reminder: Quarterly report"
    assert item.metadata == {"task_id": task.id, "recipient_email": "team@example.com", "is_reminder": True}


def test_draft_escalation_targets_owner(store, fake_assistant) -> None:
    task = tasks.create_task(store, "Invoice", owner_email="owner@example.com")

    item = flows.draft_escalation(store, fake_assistant, task.id)

    assert item.metadata["is_escalation"] is True
    assert item.metadata["recipient_email"] == "owner@example.com"


def test_translate_keeps_original(store, fake_assistant) -> None:
    item = flows.translate(store, fake_assistant, "Bonjour")
    assert (item.type, item.content, item.original_content) == ("translation", "EN: Bonjour", "Bonjour")


def test_chat_stores_both_turns(store, fake_assistant) -> None:
    reply = flows.chat(store, fake_assistant, user_id=4, message="What is due today?")

    assert reply.role == "assistant"
    assert reply.content == "You said: What is due today?"
    history = flows.get_chat_history(store, user_id=4)
    assert [msg.role for msg in history] == ["assistant", "user"]
    assert flows.get_chat_history(store, user_id=5) == []


def test_action_items_json_is_parseable(store) -> None:
    item = store.action_items.insert(ActionItem(meeting_id=1, description="Send slides", deadline=START))
    decoded = json.loads(review.action_items_to_json([item]))
    assert decoded[0]["deadline"] == START.isoformat()
