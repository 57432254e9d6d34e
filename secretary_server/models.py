"""
Data models for the secretary server meetings, tasks and review queue.

This module contains all the dataclasses used to represent the records the
secretary keeps: meetings, tasks, action items extracted from meetings,
review items awaiting human approval, email logs and chat messages.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
import typing as t


# Type literals for commonly used values
MeetingStatus = t.Literal["scheduled", "completed", "cancelled"]
TaskStatus = t.Literal["open", "in_progress", "completed", "blocked", "overdue"]
Priority = t.Literal["low", "medium", "high", "urgent"]
ActionItemStatus = t.Literal["pending", "assigned", "completed"]
ReviewType = t.Literal["meeting_summary", "action_items", "email_draft", "translation"]
ReviewStatus = t.Literal["pending", "approved", "rejected", "edited"]
EmailType = t.Literal[
    "reminder",
    "escalation",
    "meeting_invite",
    "meeting_cancellation",
    "status_update",
]
EmailStatus = t.Literal["sent", "failed", "delivered", "opened"]
ChatRole = t.Literal["user", "assistant"]


@dataclass
class Meeting:
    """Represents a meeting with its start instant, duration and lifecycle status."""
    title: str
    meeting_date: datetime
    duration: t.Optional[int] = None  # minutes, None means the default length
    status: MeetingStatus = "scheduled"
    description: str = ""
    location: str = ""
    meet_link: str = ""
    participants: list[str] = field(default_factory=list)
    summary_text: str = ""
    minutes_url: str = ""
    transcript_url: str = ""
    external_id: t.Optional[str] = None
    external_source: t.Optional[str] = None
    created_by: int = 0
    id: t.Optional[int] = None
    created_at: t.Optional[datetime] = None
    updated_at: t.Optional[datetime] = None


@dataclass
class ScheduledMeeting:
    """A created or updated meeting together with the meetings it clashes with."""
    meeting: Meeting
    conflicts: list[Meeting] = field(default_factory=list)


@dataclass
class Task:
    """Represents a task with an optional deadline and reminder bookkeeping."""
    title: str
    deadline: t.Optional[datetime] = None
    status: TaskStatus = "open"
    priority: Priority = "medium"
    description: str = ""
    owner_id: t.Optional[int] = None
    owner_email: t.Optional[str] = None
    meeting_id: t.Optional[int] = None
    last_reminder_sent: t.Optional[datetime] = None
    escalated_at: t.Optional[datetime] = None
    created_by: int = 0
    id: t.Optional[int] = None
    created_at: t.Optional[datetime] = None
    updated_at: t.Optional[datetime] = None


@dataclass
class ActionItem:
    """An action item extracted from a meeting transcript."""
    meeting_id: int
    description: str
    owner_id: t.Optional[int] = None
    owner_email: t.Optional[str] = None
    deadline: t.Optional[datetime] = None
    status: ActionItemStatus = "pending"
    task_id: t.Optional[int] = None
    id: t.Optional[int] = None
    created_at: t.Optional[datetime] = None
    updated_at: t.Optional[datetime] = None


@dataclass
class ReviewItem:
    """AI-generated content waiting for a human to approve, edit or reject it."""
    type: ReviewType
    content: str
    reference_id: t.Optional[int] = None
    original_content: t.Optional[str] = None
    metadata: dict[str, t.Any] = field(default_factory=dict)
    status: ReviewStatus = "pending"
    reviewed_by: t.Optional[int] = None
    review_notes: t.Optional[str] = None
    reviewed_at: t.Optional[datetime] = None
    created_by: int = 0
    id: t.Optional[int] = None
    created_at: t.Optional[datetime] = None
    updated_at: t.Optional[datetime] = None


@dataclass
class EmailLog:
    """A record of a notification email sent (or attempted) by the secretary."""
    recipient_email: str
    subject: str
    body: str
    email_type: EmailType
    related_task_id: t.Optional[int] = None
    related_meeting_id: t.Optional[int] = None
    status: EmailStatus = "sent"
    tracking_id: t.Optional[str] = None
    sent_at: t.Optional[datetime] = None
    delivered_at: t.Optional[datetime] = None
    opened_at: t.Optional[datetime] = None
    id: t.Optional[int] = None
    created_at: t.Optional[datetime] = None
    updated_at: t.Optional[datetime] = None


@dataclass
class ChatMessage:
    """One turn of a user's conversation with the assistant."""
    user_id: int
    role: ChatRole
    content: str
    metadata: dict[str, t.Any] = field(default_factory=dict)
    id: t.Optional[int] = None
    created_at: t.Optional[datetime] = None
    updated_at: t.Optional[datetime] = None
