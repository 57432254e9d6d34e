"""Reminder generation for tasks with approaching deadlines.

This module selects the tasks that need a reminder, drafts one email per task
with the assistant, queues each draft for review and records when the task
was reminded. Tasks are processed concurrently and independently: a slow or
failing draft for one task never delays or cancels the others.
"""
from __future__ import annotations

import asyncio
import logging
import typing as t
from datetime import datetime

from assistant import flows
from assistant.client import Assistant
from orchestrator.models import ReminderFailure, ReminderRun
from secretary_server.models import ReviewItem, Task
from secretary_server.scheduling import select_reminder_eligible_tasks, utc_now
from secretary_server.store import SecretaryStore
from secretary_server.tasks import record_reminder_sent

logger = logging.getLogger(__name__)


async def generate_reminders(
    store: SecretaryStore,
    assistant: Assistant,
    now: t.Optional[datetime] = None,
    default_recipient: t.Optional[str] = None,
    created_by: int = 0,
    max_concurrent: t.Optional[int] = None,
) -> ReminderRun:
    """Draft reminders for every task that is due soon and not recently reminded.

    Args:
        store: Store holding the tasks and the review queue
        assistant: Assistant used to draft the reminder emails
        now: Reference instant (defaults to the current time)
        default_recipient: Recipient used for tasks without an owner email
        created_by: User id recorded on the queued review items
        max_concurrent: Optional limit on drafts in flight at once.
                       If None (default), all eligible tasks are drafted in parallel.

    Returns:
        A ReminderRun listing the reminded tasks and the ones that failed
    """
    now = now or utc_now()
    eligible = select_reminder_eligible_tasks(now, store.tasks.list())
    run = ReminderRun(ran_at=now, eligible=len(eligible))
    if not eligible:
        return run

    semaphore = asyncio.Semaphore(max_concurrent) if max_concurrent else None
    outcomes = await asyncio.gather(
        *(
            _remind(store, assistant, task, now, default_recipient, created_by, semaphore)
            for task in eligible
        ),
        return_exceptions=True,
    )

    for task, outcome in zip(eligible, outcomes):
        if isinstance(outcome, BaseException):
            if not isinstance(outcome, Exception):
                raise outcome
            logger.error("Failed to generate reminder for task %s: %s", task.id, outcome)
            run.failed.append(ReminderFailure(task_id=task.id, error=str(outcome)))
        else:
            run.task_ids.append(task.id)
            run.review_item_ids.append(outcome.id)

    logger.info(
        "Reminder run at %s: %d eligible, %d generated, %d failed",
        now.isoformat(), run.eligible, run.reminders_generated, len(run.failed),
    )
    return run


async def _remind(
    store: SecretaryStore,
    assistant: Assistant,
    task: Task,
    now: datetime,
    default_recipient: t.Optional[str],
    created_by: int,
    semaphore: t.Optional[asyncio.Semaphore],
) -> ReviewItem:
    """Draft, queue and record the reminder for a single task."""
    if semaphore:
        await semaphore.acquire()
    try:
        # Drafting is a blocking LLM call - run it in the thread pool
        item = await asyncio.to_thread(
            flows.draft_reminder, store, assistant, task.id, default_recipient, created_by,
        )
    finally:
        if semaphore:
            semaphore.release()

    # Only a task whose draft was queued counts as reminded
    record_reminder_sent(store, task.id, now)
    return item
