# -*- coding: utf-8 -*-
import typing as t
from datetime import datetime, timezone

from fastmcp import FastMCP

from secretary_server import meetings, tasks
from secretary_server.formatting import format_meetings, format_tasks
from secretary_server.models import Meeting, ScheduledMeeting, Task
from secretary_server.store import SecretaryStore

mcp = FastMCP("SecretaryServer")

store = SecretaryStore()


def _parse_datetime(iso_string: str) -> datetime:
    """Parses an ISO 8601 string; values without an offset are taken as UTC."""
    value = datetime.fromisoformat(iso_string.replace("Z", "+00:00"))
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


@mcp.tool()
def create_meeting(
        title: str,
        meeting_date: str,
        duration: t.Optional[int] = None,
        location: str = "",
        participants: t.Optional[list[str]] = None,
) -> ScheduledMeeting:
    """Schedules a meeting and reports the meetings it overlaps.

    The meeting is created even when it conflicts with others.

    :param title: Title of the meeting.
    :param meeting_date: Start time in ISO format.
    :param duration: Length in minutes (optional, defaults to 60).
    :param location: Location of the meeting (optional).
    :param participants: Participant email addresses (optional).
    :return: The created meeting and the list of conflicting meetings.
    """
    return meetings.create_meeting(
        store,
        title=title,
        meeting_date=_parse_datetime(meeting_date),
        duration=duration,
        location=location,
        participants=participants,
    )


@mcp.tool()
def check_meeting_conflicts(
        meeting_date: str,
        duration: t.Optional[int] = None,
        exclude_meeting_id: t.Optional[int] = None,
) -> list[Meeting]:
    """Checks a proposed time slot against all scheduled meetings.

    :param meeting_date: Start time of the slot in ISO format.
    :param duration: Length in minutes (optional, defaults to 60).
    :param exclude_meeting_id: A meeting to ignore, e.g. the one being moved (optional).
    :return: The meetings that overlap the slot.
    """
    return meetings.check_conflicts(store, _parse_datetime(meeting_date), duration, exclude_meeting_id)


@mcp.tool()
def list_meetings() -> list[Meeting]:
    """Lists all meetings, latest first.

    :return: A list of Meeting objects.
    """
    return meetings.list_meetings(store)


@mcp.tool()
def create_task(
        title: str,
        deadline: t.Optional[str] = None,
        priority: t.Literal["low", "medium", "high"] = "medium",
        owner_email: t.Optional[str] = None,
        description: str = "",
) -> Task:
    """Creates a task.

    :param title: Title of the task.
    :param deadline: Deadline in ISO format (optional).
    :param priority: One of low, medium or high.
    :param owner_email: Email of the person responsible (optional).
    :param description: Additional notes (optional).
    :return: A Task object.
    """
    return tasks.create_task(
        store,
        title=title,
        description=description,
        deadline=_parse_datetime(deadline) if deadline else None,
        priority=priority,
        owner_email=owner_email,
    )


@mcp.tool()
def complete_task(task_id: int) -> Task:
    """Marks a task as completed.

    :param task_id: Id of the task.
    :return: The updated Task object.
    """
    return tasks.mark_complete(store, task_id)


@mcp.tool()
def list_tasks() -> list[Task]:
    """Lists all tasks, newest first.

    :return: A list of Task objects.
    """
    return tasks.list_tasks(store)


@mcp.tool()
def list_reminder_eligible_tasks() -> list[Task]:
    """Lists the tasks that are due within 48 hours and were not reminded in the last 24.

    :return: A list of Task objects.
    """
    return tasks.list_reminder_candidates(store)


@mcp.tool()
def show_meetings() -> str:
    """Displays all meetings in a formatted table.

    Each row shows the meeting id, title, start and end time and status.

    :return: Formatted table of all meetings, or a message if there are none.
    """
    return format_meetings(meetings.list_meetings(store))


@mcp.tool()
def show_tasks() -> str:
    """Displays all tasks in a formatted table.

    :return: Formatted table of all tasks, or a message if there are none.
    """
    return format_tasks(tasks.list_tasks(store))


if __name__ == "__main__":
    mcp.run()
