"""
Shared Pydantic models for REST API serialization.

This module contains Pydantic equivalents of the dataclass models in
secretary_server.models, plus the request/response bodies of the secretary
service endpoints.
"""
from __future__ import annotations

import typing as t
from datetime import datetime, timezone

from pydantic import AfterValidator, BaseModel, Field

from secretary_server.models import (
    ActionItemStatus,
    ChatRole,
    EmailStatus,
    EmailType,
    MeetingStatus,
    Priority,
    ReviewStatus,
    ReviewType,
    TaskStatus,
)


def _as_utc(value: datetime) -> datetime:
    """Naive datetimes coming over the wire are read as UTC."""
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


UtcDatetime = t.Annotated[datetime, AfterValidator(_as_utc)]


# Record Models
class Meeting(BaseModel):
    """A meeting as returned by the API."""
    id: int
    title: str
    meeting_date: datetime
    duration: t.Optional[int] = None
    status: MeetingStatus = "scheduled"
    description: str = ""
    location: str = ""
    meet_link: str = ""
    participants: list[str] = Field(default_factory=list)
    summary_text: str = ""
    minutes_url: str = ""
    transcript_url: str = ""
    external_id: t.Optional[str] = None
    external_source: t.Optional[str] = None
    created_by: int = 0
    created_at: t.Optional[datetime] = None
    updated_at: t.Optional[datetime] = None


class Task(BaseModel):
    """A task as returned by the API."""
    id: int
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
    created_at: t.Optional[datetime] = None
    updated_at: t.Optional[datetime] = None


class ActionItem(BaseModel):
    """An action item extracted from a meeting."""
    id: int
    meeting_id: int
    description: str
    owner_id: t.Optional[int] = None
    owner_email: t.Optional[str] = None
    deadline: t.Optional[datetime] = None
    status: ActionItemStatus = "pending"
    task_id: t.Optional[int] = None
    created_at: t.Optional[datetime] = None
    updated_at: t.Optional[datetime] = None


class ReviewItem(BaseModel):
    """A review queue entry."""
    id: int
    type: ReviewType
    content: str
    reference_id: t.Optional[int] = None
    original_content: t.Optional[str] = None
    metadata: dict[str, t.Any] = Field(default_factory=dict)
    status: ReviewStatus = "pending"
    reviewed_by: t.Optional[int] = None
    review_notes: t.Optional[str] = None
    reviewed_at: t.Optional[datetime] = None
    created_by: int = 0
    created_at: t.Optional[datetime] = None
    updated_at: t.Optional[datetime] = None


class EmailLog(BaseModel):
    """A recorded notification email."""
    id: int
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


class ChatMessage(BaseModel):
    """One chat turn."""
    id: int
    user_id: int
    role: ChatRole
    content: str
    created_at: t.Optional[datetime] = None


# Meeting Request/Response Models
class CreateMeetingRequest(BaseModel):
    """Request model for scheduling a meeting."""
    title: str
    meeting_date: UtcDatetime
    duration: t.Optional[int] = Field(default=None, gt=0)
    description: str = ""
    location: str = ""
    participants: list[str] = Field(default_factory=list)


class UpdateMeetingRequest(BaseModel):
    """Request model for updating a meeting; omitted fields stay unchanged."""
    title: t.Optional[str] = None
    meeting_date: t.Optional[UtcDatetime] = None
    duration: t.Optional[int] = Field(default=None, gt=0)
    description: t.Optional[str] = None
    location: t.Optional[str] = None
    participants: t.Optional[list[str]] = None
    status: t.Optional[MeetingStatus] = None
    cancellation_reason: t.Optional[str] = None


class CheckConflictsRequest(BaseModel):
    """Request model for checking a time slot against existing meetings."""
    meeting_date: UtcDatetime
    duration: t.Optional[int] = Field(default=None, gt=0)
    exclude_meeting_id: t.Optional[int] = None


class ScheduledMeetingResponse(BaseModel):
    """A created or updated meeting with the meetings it overlaps."""
    meeting: Meeting
    conflicts: list[Meeting] = Field(default_factory=list)


class MeetLinkResponse(BaseModel):
    """Response model for a regenerated video-conference link."""
    meet_link: str


class TranscriptRequest(BaseModel):
    """Request model for AI processing of a meeting transcript."""
    transcript: str = Field(min_length=1)


class ActionItemsResponse(BaseModel):
    """Extracted action items and the review item that covers them."""
    action_items: list[ActionItem]
    review_item: ReviewItem


# Task Request/Response Models
class CreateTaskRequest(BaseModel):
    """Request model for creating a task."""
    title: str
    description: str = ""
    deadline: t.Optional[UtcDatetime] = None
    priority: Priority = "medium"
    owner_id: t.Optional[int] = None
    owner_email: t.Optional[str] = None
    meeting_id: t.Optional[int] = None


class UpdateTaskRequest(BaseModel):
    """Request model for updating a task; omitted fields stay unchanged."""
    title: t.Optional[str] = None
    description: t.Optional[str] = None
    deadline: t.Optional[UtcDatetime] = None
    priority: t.Optional[Priority] = None
    status: t.Optional[TaskStatus] = None
    owner_id: t.Optional[int] = None
    owner_email: t.Optional[str] = None


class GenerateRemindersRequest(BaseModel):
    """Request model for a reminder run; ``now`` defaults to the server clock."""
    now: t.Optional[UtcDatetime] = None


class ReminderFailure(BaseModel):
    task_id: int
    error: str


class ReminderRunResponse(BaseModel):
    """Response model summarizing a reminder run."""
    success: bool = True
    reminders_generated: int
    task_ids: list[int] = Field(default_factory=list)
    review_item_ids: list[int] = Field(default_factory=list)
    failed: list[ReminderFailure] = Field(default_factory=list)


# Review Queue Request Models
class ApproveRequest(BaseModel):
    """Request model for approving a review item, optionally with edits."""
    reviewer_id: int = 0
    edited_content: t.Optional[str] = None


class RejectRequest(BaseModel):
    """Request model for rejecting a review item."""
    reviewer_id: int = 0
    notes: str


# Email / Chat / Translation Models
class UpdateEmailStatusRequest(BaseModel):
    """Request model for delivery and open notifications."""
    tracking_id: str
    status: t.Literal["delivered", "opened"]


class ChatRequest(BaseModel):
    """Request model for sending a chat message."""
    user_id: int = 0
    message: str = Field(min_length=1)


class ChatResponse(BaseModel):
    """Response model with the assistant's reply."""
    response: str


class TranslateRequest(BaseModel):
    """Request model for translating text to English."""
    text: str = Field(min_length=1)


class TranslateResponse(BaseModel):
    """Response model with the translation and the queued review item id."""
    translated_text: str
    original_text: str
    review_id: int
