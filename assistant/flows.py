# -*- coding: utf-8 -*-
"""AI flows: every piece of generated content is stored as a pending review item."""
from __future__ import annotations

import logging
import typing as t

from assistant.client import Assistant
from secretary_server import review
from secretary_server.models import ActionItem, ChatMessage, ReviewItem
from secretary_server.store import SecretaryStore
from secretary_server.tasks import list_overdue_tasks, list_tasks_by_status

logger = logging.getLogger(__name__)

CHAT_HISTORY_LIMIT = 10


def generate_summary(
        store: SecretaryStore,
        assistant: Assistant,
        meeting_id: int,
        transcript: str,
        created_by: int = 0,
) -> ReviewItem:
    """Summarizes a meeting transcript and queues the summary for review.

    The summary is also kept on the meeting itself.

    :raises NotFoundError: If the meeting does not exist.
    :raises AssistantError: If the LLM call fails.
    """
    meeting = store.meetings.require(meeting_id)
    summary = assistant.summarize_meeting(meeting, transcript)
    store.meetings.update(meeting_id, summary_text=summary)
    return review.enqueue(
        store, "meeting_summary", summary,
        reference_id=meeting_id,
        metadata={"meeting_title": meeting.title, "meeting_id": meeting_id},
        created_by=created_by,
    )


def extract_action_items(
        store: SecretaryStore,
        assistant: Assistant,
        meeting_id: int,
        transcript: str,
        created_by: int = 0,
) -> tuple[list[ActionItem], ReviewItem]:
    """Extracts action items from a transcript, stores them and queues them for review.

    Owners are kept as ``owner_email`` until a reviewer assigns a user.

    :return: The stored action items and the review item covering them.
    """
    meeting = store.meetings.require(meeting_id)
    extracted = assistant.extract_action_items(transcript)
    created = [
        store.action_items.insert(
            ActionItem(
                meeting_id=meeting_id,
                description=item.description,
                owner_email=item.owner,
                deadline=item.deadline,
            )
        )
        for item in extracted
    ]
    logger.info("Extracted %d action item(s) from meeting %s", len(created), meeting_id)
    review_item = review.enqueue(
        store, "action_items", review.action_items_to_json(created),
        reference_id=meeting_id,
        metadata={"meeting_title": meeting.title, "meeting_id": meeting_id},
        created_by=created_by,
    )
    return created, review_item


def list_action_items(store: SecretaryStore, meeting_id: int) -> list[ActionItem]:
    return [item for item in store.action_items.list() if item.meeting_id == meeting_id]


def draft_reminder(
        store: SecretaryStore,
        assistant: Assistant,
        task_id: int,
        default_recipient: t.Optional[str] = None,
        created_by: int = 0,
) -> ReviewItem:
    """Drafts a reminder email for one task and queues it for review."""
    task = store.tasks.require(task_id)
    draft = assistant.draft_reminder(task)
    return review.enqueue(
        store, "email_draft", draft,
        reference_id=task.id,
        metadata={
            "task_id": task.id,
            "recipient_email": task.owner_email or default_recipient,
            "is_reminder": True,
        },
        created_by=created_by,
    )


def draft_escalation(
        store: SecretaryStore,
        assistant: Assistant,
        task_id: int,
        created_by: int = 0,
) -> ReviewItem:
    """Drafts an escalation email for an overdue or blocked task and queues it for review."""
    task = store.tasks.require(task_id)
    draft = assistant.draft_escalation(task)
    return review.enqueue(
        store, "email_draft", draft,
        reference_id=task.id,
        metadata={"task_id": task.id, "recipient_email": task.owner_email, "is_escalation": True},
        created_by=created_by,
    )


def translate(
        store: SecretaryStore,
        assistant: Assistant,
        text: str,
        created_by: int = 0,
) -> ReviewItem:
    """Translates text to English and queues the translation next to the original."""
    translated = assistant.translate(text)
    return review.enqueue(
        store, "translation", translated,
        original_content=text,
        created_by=created_by,
    )


def chat(store: SecretaryStore, assistant: Assistant, user_id: int, message: str) -> ChatMessage:
    """Answers a chat message, keeping both turns in the user's history.

    :return: The stored assistant reply.
    """
    store.chat_messages.insert(ChatMessage(user_id=user_id, role="user", content=message))

    history = [
        {"role": msg.role, "content": msg.content}
        for msg in get_chat_history(store, user_id, CHAT_HISTORY_LIMIT)
    ]
    history.reverse()

    scheduled = [m for m in store.meetings.list() if m.status == "scheduled"]
    context = (
        f"- Open tasks: {len(list_tasks_by_status(store, 'open'))}\n"
        f"- Overdue tasks: {len(list_overdue_tasks(store))}\n"
        f"- Upcoming meetings: {len(scheduled)}"
    )
    reply = assistant.chat_reply(history, context)
    return store.chat_messages.insert(ChatMessage(user_id=user_id, role="assistant", content=reply))


def get_chat_history(store: SecretaryStore, user_id: int, limit: int = 50) -> list[ChatMessage]:
    """A user's most recent chat messages, newest first."""
    messages = [msg for msg in store.chat_messages.list() if msg.user_id == user_id]
    messages.sort(key=lambda msg: msg.id, reverse=True)
    return messages[:limit]
