"""
FastAPI service for the AI secretary.

This service exposes meeting scheduling with conflict detection, task
management, reminder generation, the human review queue, email tracking and
the assistant chat as REST API endpoints. Endpoints that call the LLM are
plain ``def`` routes so FastAPI runs them in its thread pool.
"""
from __future__ import annotations

import logging
import typing as t
from contextlib import asynccontextmanager
from dataclasses import asdict

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from assistant import flows
from assistant.client import Assistant
from orchestrator.reminders import generate_reminders
from secretary_server import emails, meetings, review, tasks
from secretary_server.config import Settings, configure_logging
from secretary_server.errors import AssistantError, NotFoundError, ReviewStateError
from secretary_server.models import ScheduledMeeting
from secretary_server.scheduling import utc_now
from secretary_server.store import SecretaryStore
from services.shared.models import (
    ActionItem as PydanticActionItem,
    ActionItemsResponse,
    ApproveRequest,
    ChatMessage as PydanticChatMessage,
    ChatRequest,
    ChatResponse,
    CheckConflictsRequest,
    CreateMeetingRequest,
    CreateTaskRequest,
    EmailLog as PydanticEmailLog,
    GenerateRemindersRequest,
    Meeting as PydanticMeeting,
    MeetLinkResponse,
    RejectRequest,
    ReminderFailure as PydanticReminderFailure,
    ReminderRunResponse,
    ReviewItem as PydanticReviewItem,
    ScheduledMeetingResponse,
    Task as PydanticTask,
    TranscriptRequest,
    TranslateRequest,
    TranslateResponse,
    UpdateEmailStatusRequest,
    UpdateMeetingRequest,
    UpdateTaskRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# -----------------------------
# Dependencies
# -----------------------------

def get_store(request: Request) -> SecretaryStore:
    return request.app.state.store


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_assistant(request: Request) -> Assistant:
    """The app's assistant, created on first use from the OpenAI settings."""
    state = request.app.state
    if state.assistant is None:
        if not state.settings.openai_api_key:
            raise HTTPException(status_code=503, detail="Assistant is not configured: OPENAI_API_KEY is not set")
        state.assistant = Assistant.from_settings(state.settings)
    return state.assistant


# -----------------------------
# Conversions
# -----------------------------

def _scheduled(result: ScheduledMeeting) -> ScheduledMeetingResponse:
    return ScheduledMeetingResponse(
        meeting=PydanticMeeting(**asdict(result.meeting)),
        conflicts=[PydanticMeeting(**asdict(m)) for m in result.conflicts],
    )


# -----------------------------
# Health
# -----------------------------

@router.get("/health")
async def health_check():
    """Health check endpoint for container orchestration."""
    return {"status": "healthy", "service": "secretary-service"}


# -----------------------------
# Meetings
# -----------------------------

@router.get("/meetings", response_model=list[PydanticMeeting])
async def list_meetings(store: SecretaryStore = Depends(get_store)) -> list[PydanticMeeting]:
    return [PydanticMeeting(**asdict(m)) for m in meetings.list_meetings(store)]


@router.post("/meetings", response_model=ScheduledMeetingResponse)
async def create_meeting(
        request: CreateMeetingRequest,
        store: SecretaryStore = Depends(get_store),
) -> ScheduledMeetingResponse:
    """
    Schedule a meeting.

    The meeting is always created; meetings it overlaps are returned in
    ``conflicts`` so the caller can warn the user.
    """
    result = meetings.create_meeting(
        store,
        title=request.title,
        meeting_date=request.meeting_date,
        duration=request.duration,
        description=request.description,
        location=request.location,
        participants=request.participants,
    )
    return _scheduled(result)


@router.post("/meetings/conflicts", response_model=list[PydanticMeeting])
async def check_conflicts(
        request: CheckConflictsRequest,
        store: SecretaryStore = Depends(get_store),
) -> list[PydanticMeeting]:
    """Check a proposed time slot against all non-cancelled meetings."""
    conflicts = meetings.check_conflicts(
        store, request.meeting_date, request.duration, request.exclude_meeting_id
    )
    return [PydanticMeeting(**asdict(m)) for m in conflicts]


@router.get("/meetings/{meeting_id}", response_model=PydanticMeeting)
async def get_meeting(meeting_id: int, store: SecretaryStore = Depends(get_store)) -> PydanticMeeting:
    return PydanticMeeting(**asdict(meetings.get_meeting(store, meeting_id)))


@router.patch("/meetings/{meeting_id}", response_model=ScheduledMeetingResponse)
async def update_meeting(
        meeting_id: int,
        request: UpdateMeetingRequest,
        store: SecretaryStore = Depends(get_store),
) -> ScheduledMeetingResponse:
    """
    Update a meeting.

    When the date or duration changes, the new slot is checked for conflicts
    with every other meeting.
    """
    result = meetings.update_meeting(store, meeting_id, **request.model_dump(exclude_unset=True))
    return _scheduled(result)


@router.delete("/meetings/{meeting_id}")
async def delete_meeting(meeting_id: int, store: SecretaryStore = Depends(get_store)):
    meetings.delete_meeting(store, meeting_id)
    return {"success": True}


@router.post("/meetings/{meeting_id}/meet-link", response_model=MeetLinkResponse)
async def generate_meet_link(meeting_id: int, store: SecretaryStore = Depends(get_store)) -> MeetLinkResponse:
    return MeetLinkResponse(meet_link=meetings.generate_meet_link(store, meeting_id))


@router.post("/meetings/{meeting_id}/summary", response_model=PydanticReviewItem)
def generate_summary(
        meeting_id: int,
        request: TranscriptRequest,
        store: SecretaryStore = Depends(get_store),
        assistant: Assistant = Depends(get_assistant),
) -> PydanticReviewItem:
    """Summarize a transcript; the summary waits in the review queue."""
    item = flows.generate_summary(store, assistant, meeting_id, request.transcript)
    return PydanticReviewItem(**asdict(item))


@router.post("/meetings/{meeting_id}/action-items", response_model=ActionItemsResponse)
def extract_action_items(
        meeting_id: int,
        request: TranscriptRequest,
        store: SecretaryStore = Depends(get_store),
        assistant: Assistant = Depends(get_assistant),
) -> ActionItemsResponse:
    """Extract action items from a transcript and queue them for review."""
    items, review_item = flows.extract_action_items(store, assistant, meeting_id, request.transcript)
    return ActionItemsResponse(
        action_items=[PydanticActionItem(**asdict(item)) for item in items],
        review_item=PydanticReviewItem(**asdict(review_item)),
    )


@router.get("/meetings/{meeting_id}/action-items", response_model=list[PydanticActionItem])
async def list_action_items(meeting_id: int, store: SecretaryStore = Depends(get_store)) -> list[PydanticActionItem]:
    return [PydanticActionItem(**asdict(item)) for item in flows.list_action_items(store, meeting_id)]


# -----------------------------
# Tasks
# -----------------------------

@router.get("/tasks", response_model=list[PydanticTask])
async def list_tasks(
        status: t.Optional[str] = None,
        store: SecretaryStore = Depends(get_store),
) -> list[PydanticTask]:
    found = tasks.list_tasks_by_status(store, status) if status else tasks.list_tasks(store)
    return [PydanticTask(**asdict(task)) for task in found]


@router.post("/tasks", response_model=PydanticTask)
async def create_task(request: CreateTaskRequest, store: SecretaryStore = Depends(get_store)) -> PydanticTask:
    return PydanticTask(**asdict(tasks.create_task(store, **request.model_dump())))


@router.get("/tasks/overdue", response_model=list[PydanticTask])
async def list_overdue_tasks(store: SecretaryStore = Depends(get_store)) -> list[PydanticTask]:
    return [PydanticTask(**asdict(task)) for task in tasks.list_overdue_tasks(store)]


@router.get("/tasks/reminders/eligible", response_model=list[PydanticTask])
async def list_reminder_candidates(store: SecretaryStore = Depends(get_store)) -> list[PydanticTask]:
    """Tasks due within 48 hours that were not reminded in the last 24 hours."""
    return [PydanticTask(**asdict(task)) for task in tasks.list_reminder_candidates(store)]


@router.post("/tasks/reminders", response_model=ReminderRunResponse)
async def run_reminders(
        request: t.Optional[GenerateRemindersRequest] = None,
        store: SecretaryStore = Depends(get_store),
        settings: Settings = Depends(get_settings),
        assistant: Assistant = Depends(get_assistant),
) -> ReminderRunResponse:
    """
    Draft reminder emails for tasks with approaching deadlines.

    Each draft goes to the review queue. Tasks whose draft fails are listed
    in ``failed`` and do not affect the others.
    """
    now = request.now if request and request.now else utc_now()
    run = await generate_reminders(
        store,
        assistant,
        now=now,
        default_recipient=settings.default_recipient_email,
        max_concurrent=settings.max_concurrent_reminders,
    )
    return ReminderRunResponse(
        reminders_generated=run.reminders_generated,
        task_ids=run.task_ids,
        review_item_ids=run.review_item_ids,
        failed=[PydanticReminderFailure(**asdict(f)) for f in run.failed],
    )


@router.get("/tasks/{task_id}", response_model=PydanticTask)
async def get_task(task_id: int, store: SecretaryStore = Depends(get_store)) -> PydanticTask:
    return PydanticTask(**asdict(tasks.get_task(store, task_id)))


@router.patch("/tasks/{task_id}", response_model=PydanticTask)
async def update_task(
        task_id: int,
        request: UpdateTaskRequest,
        store: SecretaryStore = Depends(get_store),
) -> PydanticTask:
    return PydanticTask(**asdict(tasks.update_task(store, task_id, **request.model_dump(exclude_unset=True))))


@router.post("/tasks/{task_id}/complete", response_model=PydanticTask)
async def mark_complete(task_id: int, store: SecretaryStore = Depends(get_store)) -> PydanticTask:
    return PydanticTask(**asdict(tasks.mark_complete(store, task_id)))


@router.delete("/tasks/{task_id}")
async def delete_task(task_id: int, store: SecretaryStore = Depends(get_store)):
    tasks.delete_task(store, task_id)
    return {"success": True}


@router.post("/tasks/{task_id}/reminder-draft", response_model=PydanticReviewItem)
def draft_reminder(
        task_id: int,
        store: SecretaryStore = Depends(get_store),
        settings: Settings = Depends(get_settings),
        assistant: Assistant = Depends(get_assistant),
) -> PydanticReviewItem:
    item = flows.draft_reminder(store, assistant, task_id, settings.default_recipient_email)
    return PydanticReviewItem(**asdict(item))


@router.post("/tasks/{task_id}/escalation-draft", response_model=PydanticReviewItem)
def draft_escalation(
        task_id: int,
        store: SecretaryStore = Depends(get_store),
        assistant: Assistant = Depends(get_assistant),
) -> PydanticReviewItem:
    return PydanticReviewItem(**asdict(flows.draft_escalation(store, assistant, task_id)))


# -----------------------------
# Review queue
# -----------------------------

@router.get("/review/pending", response_model=list[PydanticReviewItem])
async def list_pending_reviews(store: SecretaryStore = Depends(get_store)) -> list[PydanticReviewItem]:
    return [PydanticReviewItem(**asdict(item)) for item in review.list_pending(store)]


@router.get("/review/completed", response_model=list[PydanticReviewItem])
async def list_completed_reviews(store: SecretaryStore = Depends(get_store)) -> list[PydanticReviewItem]:
    return [PydanticReviewItem(**asdict(item)) for item in review.list_completed(store)]


@router.get("/review/{item_id}", response_model=PydanticReviewItem)
async def get_review_item(item_id: int, store: SecretaryStore = Depends(get_store)) -> PydanticReviewItem:
    return PydanticReviewItem(**asdict(review.get_item(store, item_id)))


@router.post("/review/{item_id}/approve", response_model=PydanticReviewItem)
async def approve_review_item(
        item_id: int,
        request: ApproveRequest,
        store: SecretaryStore = Depends(get_store),
) -> PydanticReviewItem:
    item = review.approve(store, item_id, request.reviewer_id, request.edited_content)
    return PydanticReviewItem(**asdict(item))


@router.post("/review/{item_id}/reject", response_model=PydanticReviewItem)
async def reject_review_item(
        item_id: int,
        request: RejectRequest,
        store: SecretaryStore = Depends(get_store),
) -> PydanticReviewItem:
    return PydanticReviewItem(**asdict(review.reject(store, item_id, request.reviewer_id, request.notes)))


@router.post("/review/{item_id}/send", response_model=PydanticEmailLog)
async def send_approved(item_id: int, store: SecretaryStore = Depends(get_store)) -> PydanticEmailLog:
    """Send an approved reminder or escalation draft to its recipient."""
    return PydanticEmailLog(**asdict(review.send_approved(store, item_id)))


@router.delete("/review/{item_id}")
async def delete_review_item(item_id: int, store: SecretaryStore = Depends(get_store)):
    review.delete_item(store, item_id)
    return {"success": True}


# -----------------------------
# Email tracking
# -----------------------------

@router.get("/emails", response_model=list[PydanticEmailLog])
async def list_email_logs(store: SecretaryStore = Depends(get_store)) -> list[PydanticEmailLog]:
    return [PydanticEmailLog(**asdict(log)) for log in emails.list_email_logs(store)]


@router.post("/emails/status", response_model=list[PydanticEmailLog])
async def update_email_status(
        request: UpdateEmailStatusRequest,
        store: SecretaryStore = Depends(get_store),
) -> list[PydanticEmailLog]:
    updated = emails.update_email_status(store, request.tracking_id, request.status)
    return [PydanticEmailLog(**asdict(log)) for log in updated]


@router.get("/emails/{log_id}", response_model=PydanticEmailLog)
async def get_email_log(log_id: int, store: SecretaryStore = Depends(get_store)) -> PydanticEmailLog:
    return PydanticEmailLog(**asdict(emails.get_email_log(store, log_id)))


@router.delete("/emails/{log_id}")
async def delete_email_log(log_id: int, store: SecretaryStore = Depends(get_store)):
    emails.delete_email_log(store, log_id)
    return {"success": True}


# -----------------------------
# Chat and translation
# -----------------------------

@router.get("/chat/{user_id}", response_model=list[PydanticChatMessage])
async def get_chat_history(
        user_id: int,
        limit: int = 50,
        store: SecretaryStore = Depends(get_store),
) -> list[PydanticChatMessage]:
    return [PydanticChatMessage(**asdict(msg)) for msg in flows.get_chat_history(store, user_id, limit)]


@router.post("/chat", response_model=ChatResponse)
def send_chat_message(
        request: ChatRequest,
        store: SecretaryStore = Depends(get_store),
        assistant: Assistant = Depends(get_assistant),
) -> ChatResponse:
    reply = flows.chat(store, assistant, request.user_id, request.message)
    return ChatResponse(response=reply.content)


@router.post("/translate", response_model=TranslateResponse)
def translate(
        request: TranslateRequest,
        store: SecretaryStore = Depends(get_store),
        assistant: Assistant = Depends(get_assistant),
) -> TranslateResponse:
    item = flows.translate(store, assistant, request.text)
    return TranslateResponse(translated_text=item.content, original_text=request.text, review_id=item.id)


# -----------------------------
# Application
# -----------------------------

async def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


async def _bad_review_state(request: Request, exc: ReviewStateError) -> JSONResponse:
    return JSONResponse(status_code=409, content={"detail": str(exc)})


async def _assistant_failed(request: Request, exc: AssistantError) -> JSONResponse:
    logger.error("Assistant failure on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=502, content={"detail": str(exc)})


def create_app(
        settings: t.Optional[Settings] = None,
        store: t.Optional[SecretaryStore] = None,
        assistant: t.Optional[Assistant] = None,
) -> FastAPI:
    """Build the secretary service around explicit settings, store and assistant."""
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize resources on startup and cleanup on shutdown."""
        configure_logging(settings.log_level)
        logger.info("Secretary service starting (model %s)", settings.llm_model)
        yield

    app = FastAPI(
        title="Secretary Service",
        description="REST API for meetings, tasks, reminders and AI review workflows",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store if store is not None else SecretaryStore()
    app.state.assistant = assistant
    app.add_exception_handler(NotFoundError, _not_found)
    app.add_exception_handler(ReviewStateError, _bad_review_state)
    app.add_exception_handler(AssistantError, _assistant_failed)
    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.service_port)
