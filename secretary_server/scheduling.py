# -*- coding: utf-8 -*-
"""Meeting conflict detection and task reminder eligibility.

Both filters are pure: they read a snapshot supplied by the caller, never
mutate it, and return the matching records in their original order.
"""
from __future__ import annotations

import typing as t
from datetime import datetime, timedelta, timezone

from secretary_server.models import Meeting, Task

DEFAULT_MEETING_DURATION_MINUTES = 60
REMINDER_WINDOW = timedelta(hours=48)
REMINDER_COOLDOWN = timedelta(hours=24)


def utc_now() -> datetime:
    """Current instant as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: t.Optional[datetime]) -> t.Optional[datetime]:
    """Treat naive datetimes as UTC; None passes through."""
    if value is None or value.tzinfo:
        return value
    return value.replace(tzinfo=timezone.utc)


def parse_timestamp(value: str) -> datetime:
    """Parses an ISO 8601 string into an aware datetime, reading naive values as UTC.

    :raises ValueError: If the string is not an ISO 8601 timestamp.
    """
    return as_utc(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))


def _duration(minutes: t.Optional[int]) -> timedelta:
    # a zero-minute duration falls back to the default as well
    return timedelta(minutes=minutes or DEFAULT_MEETING_DURATION_MINUTES)


def overlaps(
        start_a: datetime,
        duration_a: t.Optional[int],
        start_b: datetime,
        duration_b: t.Optional[int],
) -> bool:
    """Checks whether two time spans intersect.

    Spans are half-open, so a meeting that ends exactly when the other
    starts does not overlap it.

    :param start_a: Start of the first span.
    :param duration_a: Length of the first span in minutes (None means 60).
    :param start_b: Start of the second span.
    :param duration_b: Length of the second span in minutes (None means 60).
    :return: True if the spans share any instant.
    """
    end_a = start_a + _duration(duration_a)
    end_b = start_b + _duration(duration_b)
    return start_a < end_b and start_b < end_a


def find_conflicts(
        candidate_start: datetime,
        candidate_duration_minutes: t.Optional[int],
        exclude_meeting_id: t.Optional[int],
        meetings: t.Iterable[Meeting],
) -> list[Meeting]:
    """Finds the meetings that clash with a candidate time slot.

    Cancelled meetings are never reported. When an existing meeting is being
    edited, pass its id as ``exclude_meeting_id`` so it does not clash with
    itself.

    :param candidate_start: Start of the proposed meeting.
    :param candidate_duration_minutes: Length of the proposed meeting (None means 60).
    :param exclude_meeting_id: Id of a meeting to skip, or None.
    :param meetings: The meetings to check against.
    :return: The conflicting meetings, in input order.
    """
    return [
        meeting for meeting in meetings
        if meeting.status != "cancelled"
        and (exclude_meeting_id is None or meeting.id != exclude_meeting_id)
        and overlaps(
            candidate_start, candidate_duration_minutes,
            meeting.meeting_date, meeting.duration,
        )
    ]


def is_reminder_eligible(task: Task, now: datetime) -> bool:
    """Whether a task is due soon and has not been reminded recently."""
    if task.deadline is None or task.status == "completed":
        return False
    if not (now <= task.deadline <= now + REMINDER_WINDOW):
        return False
    if task.last_reminder_sent is not None:
        return now - task.last_reminder_sent >= REMINDER_COOLDOWN
    return True


def select_reminder_eligible_tasks(now: datetime, tasks: t.Iterable[Task]) -> list[Task]:
    """Selects the tasks that need a deadline reminder.

    A task qualifies when it is not completed, its deadline falls within
    the next 48 hours (inclusive at both ends), and no reminder was sent
    for it in the last 24 hours.

    :param now: The reference instant.
    :param tasks: The tasks to filter.
    :return: The eligible tasks, in input order.
    """
    return [task for task in tasks if is_reminder_eligible(task, now)]
