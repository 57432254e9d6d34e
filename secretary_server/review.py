# -*- coding: utf-8 -*-
"""Human-in-the-loop review queue for AI-generated content.

Nothing the assistant writes reaches a recipient or becomes a task until a
reviewer approves it (optionally editing it first) in this queue.
"""
from __future__ import annotations

import json
import logging
import typing as t
from dataclasses import asdict
from datetime import datetime

from secretary_server.emails import record_email
from secretary_server.errors import NotFoundError, ReviewStateError
from secretary_server.models import ActionItem, EmailLog, ReviewItem, ReviewType
from secretary_server.scheduling import parse_timestamp, utc_now
from secretary_server.store import SecretaryStore
from secretary_server.tasks import create_task

logger = logging.getLogger(__name__)


def action_items_to_json(items: list[ActionItem]) -> str:
    """Serializes action items as the review content of an ``action_items`` item."""
    def _encode(value: t.Any) -> t.Any:
        if isinstance(value, datetime):
            return value.isoformat()
        raise TypeError(f"Cannot serialize {type(value).__name__}")

    return json.dumps([asdict(item) for item in items], default=_encode)


def enqueue(
        store: SecretaryStore,
        review_type: ReviewType,
        content: str,
        reference_id: t.Optional[int] = None,
        original_content: t.Optional[str] = None,
        metadata: t.Optional[dict[str, t.Any]] = None,
        created_by: int = 0,
) -> ReviewItem:
    """Adds AI-generated content to the queue as a pending item."""
    item = store.review_items.insert(
        ReviewItem(
            type=review_type,
            content=content,
            reference_id=reference_id,
            original_content=original_content,
            metadata=dict(metadata or {}),
            created_by=created_by,
        )
    )
    logger.info("Queued %s review item %s", review_type, item.id)
    return item


def list_pending(store: SecretaryStore) -> list[ReviewItem]:
    """Pending items, newest first."""
    pending = [item for item in store.review_items.list() if item.status == "pending"]
    return sorted(pending, key=lambda item: item.created_at, reverse=True)


def list_completed(store: SecretaryStore) -> list[ReviewItem]:
    """Approved, edited and rejected items, most recently reviewed first."""
    completed = [item for item in store.review_items.list() if item.status != "pending"]
    return sorted(completed, key=lambda item: item.reviewed_at, reverse=True)


def get_item(store: SecretaryStore, item_id: int) -> ReviewItem:
    return store.review_items.require(item_id)


def approve(
        store: SecretaryStore,
        item_id: int,
        reviewer_id: int,
        edited_content: t.Optional[str] = None,
) -> ReviewItem:
    """Approves an item, storing the reviewer's edit when one is given.

    Approving an ``action_items`` item turns every action item that has an
    ``owner_id`` into an open task linked to the meeting.

    :raises NotFoundError: If the item does not exist.
    """
    item = store.review_items.require(item_id)
    changes: dict[str, t.Any] = {
        "status": "edited" if edited_content else "approved",
        "reviewed_by": reviewer_id,
        "reviewed_at": utc_now(),
    }
    if edited_content:
        changes["content"] = edited_content

    if item.type == "action_items":
        try:
            _create_tasks_from_action_items(store, item, edited_content or item.content, reviewer_id)
        except (ValueError, TypeError, KeyError, AttributeError, NotFoundError):
            logger.exception("Failed to create tasks from action items of review item %s", item_id)

    return store.review_items.update(item_id, **changes)


def reject(store: SecretaryStore, item_id: int, reviewer_id: int, notes: str) -> ReviewItem:
    store.review_items.require(item_id)
    return store.review_items.update(
        item_id,
        status="rejected",
        reviewed_by=reviewer_id,
        reviewed_at=utc_now(),
        review_notes=notes,
    )


def delete_item(store: SecretaryStore, item_id: int) -> None:
    store.review_items.delete(item_id)


def send_approved(store: SecretaryStore, item_id: int) -> EmailLog:
    """Sends an approved email draft to the recipient named in its metadata.

    :raises ReviewStateError: If the item is not approved or has no recipient.
    """
    item = store.review_items.require(item_id)
    if item.status not in ("approved", "edited"):
        raise ReviewStateError(f"Review item {item_id} is not approved")
    recipient = item.metadata.get("recipient_email")
    if not recipient:
        raise ReviewStateError(f"Review item {item_id} has no recipient email")

    is_escalation = bool(item.metadata.get("is_escalation"))
    return record_email(
        store,
        recipient_email=recipient,
        subject="Task Escalation Notice" if is_escalation else "Task Reminder",
        body=item.content,
        email_type="escalation" if is_escalation else "reminder",
        related_task_id=item.metadata.get("task_id"),
    )


def _create_tasks_from_action_items(
        store: SecretaryStore,
        item: ReviewItem,
        content: str,
        reviewer_id: int,
) -> None:
    items = json.loads(content)
    if not isinstance(items, list):
        logger.warning("Action items of review item %s are not a list; no tasks created", item.id)
        return
    for action_item in items:
        if not isinstance(action_item, dict) or not action_item.get("owner_id"):
            continue
        deadline = action_item.get("deadline")
        task = create_task(
            store,
            title=action_item["description"],
            description=action_item["description"],
            owner_id=action_item["owner_id"],
            owner_email=action_item.get("owner_email"),
            deadline=parse_timestamp(deadline) if deadline else None,
            meeting_id=item.reference_id,
            created_by=reviewer_id,
        )
        if action_item.get("id"):
            store.action_items.update(
                action_item["id"],
                task_id=task.id,
                status="assigned",
                owner_id=action_item["owner_id"],
            )
