# -*- coding: utf-8 -*-
"""Plain-text tables of meetings and tasks for MCP clients and the CLI."""
from __future__ import annotations

import typing as t
from datetime import datetime, timedelta

from secretary_server.models import Meeting, Task
from secretary_server.scheduling import DEFAULT_MEETING_DURATION_MINUTES

_RULE_WIDTH = 100


def format_datetime(value: t.Optional[datetime]) -> str:
    """Formats a datetime into a concise readable form such as 'Mon 1/15 2:30 PM'.

    :param value: The datetime to format, or None.
    :return: The formatted datetime, or a dash when there is none.
    """
    if value is None:
        return "—"
    return value.strftime("%a %-m/%-d %-I:%M %p")


def _clip(text: t.Optional[str], width: int) -> str:
    if not text:
        return "—"
    return text[:width - 1] if len(text) > width - 1 else text


def format_meetings(meetings: list[Meeting], heading: str = "MEETINGS") -> str:
    """Formats meetings as a table with their time span and status.

    :param meetings: The meetings to show, in display order.
    :param heading: Title line of the table.
    :return: Formatted table string.
    """
    if not meetings:
        return "📅 No meetings found."

    lines = [f"📅 {heading}", "=" * _RULE_WIDTH]
    lines.append(f"{'ID':<5} {'Title':<35} {'Start':<18} {'End':<18} {'Status':<12}")
    lines.append("-" * _RULE_WIDTH)
    for meeting in meetings:
        end = meeting.meeting_date + timedelta(
            minutes=meeting.duration or DEFAULT_MEETING_DURATION_MINUTES
        )
        lines.append(
            f"{meeting.id!s:<5} {_clip(meeting.title, 36):<35} "
            f"{format_datetime(meeting.meeting_date):<18} {format_datetime(end):<18} "
            f"{meeting.status:<12}"
        )
    lines.append("=" * _RULE_WIDTH)
    lines.append(f"Total: {len(meetings)} meeting(s)")
    return "\n".join(lines)


def format_tasks(tasks: list[Task], heading: str = "TASKS") -> str:
    """Formats tasks as a table with deadline, status and last reminder.

    :param tasks: The tasks to show, in display order.
    :param heading: Title line of the table.
    :return: Formatted table string.
    """
    if not tasks:
        return "✅ No tasks found."

    lines = [f"✅ {heading}", "=" * _RULE_WIDTH]
    lines.append(
        f"{'ID':<5} {'Title':<30} {'Deadline':<18} {'Status':<12} {'Priority':<9} {'Reminded':<18}"
    )
    lines.append("-" * _RULE_WIDTH)
    for task in tasks:
        lines.append(
            f"{task.id!s:<5} {_clip(task.title, 31):<30} {format_datetime(task.deadline):<18} "
            f"{task.status:<12} {task.priority:<9} {format_datetime(task.last_reminder_sent):<18}"
        )
    lines.append("=" * _RULE_WIDTH)
    lines.append(f"Total: {len(tasks)} task(s)")
    return "\n".join(lines)
