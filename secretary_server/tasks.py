# -*- coding: utf-8 -*-
"""Task operations."""
from __future__ import annotations

import typing as t
from datetime import datetime

from secretary_server.models import Priority, Task, TaskStatus
from secretary_server.scheduling import select_reminder_eligible_tasks, utc_now
from secretary_server.store import SecretaryStore


def create_task(
        store: SecretaryStore,
        title: str,
        description: str = "",
        deadline: t.Optional[datetime] = None,
        priority: Priority = "medium",
        status: TaskStatus = "open",
        owner_id: t.Optional[int] = None,
        owner_email: t.Optional[str] = None,
        meeting_id: t.Optional[int] = None,
        created_by: int = 0,
) -> Task:
    return store.tasks.insert(
        Task(
            title=title,
            description=description,
            deadline=deadline,
            priority=priority,
            status=status,
            owner_id=owner_id,
            owner_email=owner_email,
            meeting_id=meeting_id,
            created_by=created_by,
        )
    )


def get_task(store: SecretaryStore, task_id: int) -> Task:
    return store.tasks.require(task_id)


def list_tasks(store: SecretaryStore) -> list[Task]:
    """All tasks, newest first."""
    return sorted(store.tasks.list(), key=lambda task: task.id, reverse=True)


def list_tasks_by_status(store: SecretaryStore, status: TaskStatus) -> list[Task]:
    """Tasks with the given status, latest deadline first (tasks without one last)."""
    matching = [task for task in store.tasks.list() if task.status == status]
    with_deadline = sorted(
        (task for task in matching if task.deadline is not None),
        key=lambda task: task.deadline,
        reverse=True,
    )
    return with_deadline + [task for task in matching if task.deadline is None]


def list_overdue_tasks(store: SecretaryStore, now: t.Optional[datetime] = None) -> list[Task]:
    """Open or in-progress tasks whose deadline has passed, earliest deadline first."""
    now = now or utc_now()
    overdue = [
        task for task in store.tasks.list()
        if task.deadline is not None
        and task.deadline < now
        and task.status in ("open", "in_progress")
    ]
    return sorted(overdue, key=lambda task: task.deadline)


def list_reminder_candidates(store: SecretaryStore, now: t.Optional[datetime] = None) -> list[Task]:
    """Tasks that currently need a deadline reminder."""
    return select_reminder_eligible_tasks(now or utc_now(), store.tasks.list())


def update_task(store: SecretaryStore, task_id: int, **changes: t.Any) -> Task:
    """Applies the given field changes; None values are ignored.

    :raises NotFoundError: If the task does not exist.
    """
    return store.tasks.update(
        task_id, **{name: value for name, value in changes.items() if value is not None}
    )


def mark_complete(store: SecretaryStore, task_id: int) -> Task:
    return store.tasks.update(task_id, status="completed")


def record_reminder_sent(store: SecretaryStore, task_id: int, sent_at: datetime) -> Task:
    """Stamps the task so the reminder cooldown starts from ``sent_at``."""
    return store.tasks.update(task_id, last_reminder_sent=sent_at)


def delete_task(store: SecretaryStore, task_id: int) -> None:
    store.tasks.delete(task_id)
