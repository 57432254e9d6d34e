"""Utility functions for the orchestrator CLI."""
from __future__ import annotations

import json
import typing as t
from dataclasses import replace
from datetime import datetime
from pathlib import Path

from pydantic import TypeAdapter
from rich.console import Console

from secretary_server.models import Meeting, Task
from secretary_server.scheduling import as_utc, parse_timestamp
from secretary_server.store import SecretaryStore

console = Console()
err_console = Console(stderr=True)

_MEETINGS = TypeAdapter(list[Meeting])
_TASKS = TypeAdapter(list[Task])


def load_snapshot(path: str) -> SecretaryStore:
    """Load meetings and tasks from a JSON snapshot into a fresh store.

    The file holds ``{"meetings": [...], "tasks": [...]}`` with ISO 8601
    timestamps. Records keep the ids they carry; records without one get
    fresh ids above the highest id in the file.

    Args:
        path: Path to the snapshot file

    Returns:
        A store holding the snapshot's meetings and tasks

    Raises:
        SystemExit: If the file cannot be read, does not validate or repeats an id
    """
    store = SecretaryStore()
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        meetings = _MEETINGS.validate_python(data.get("meetings", []))
        tasks = _TASKS.validate_python(data.get("tasks", []))
        store.meetings.load(
            replace(meeting, meeting_date=as_utc(meeting.meeting_date)) for meeting in meetings
        )
        store.tasks.load(
            replace(
                task,
                deadline=as_utc(task.deadline),
                last_reminder_sent=as_utc(task.last_reminder_sent),
                escalated_at=as_utc(task.escalated_at),
            )
            for task in tasks
        )
    except (OSError, ValueError, AttributeError) as e:
        err_console.print(f"[red]Error:[/red] Cannot load snapshot '{path}': {e}")
        raise SystemExit(1)
    return store


def save_snapshot(store: SecretaryStore, path: str) -> None:
    """Write the store's meetings and tasks back out in snapshot format."""
    data = {
        "meetings": _MEETINGS.dump_python(store.meetings.list(), mode="json"),
        "tasks": _TASKS.dump_python(store.tasks.list(), mode="json"),
    }
    Path(path).write_text(json.dumps(data, indent=2), encoding="utf-8")


def parse_instant(value: t.Optional[str]) -> t.Optional[datetime]:
    """Parse an ISO 8601 command-line value, reading naive values as UTC.

    Raises:
        SystemExit: If the value is not a valid timestamp
    """
    if value is None:
        return None
    try:
        return parse_timestamp(value)
    except ValueError:
        err_console.print(f"[red]Error:[/red] '{value}' is not an ISO 8601 timestamp.")
        raise SystemExit(1)
