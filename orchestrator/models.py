"""
Data models for reminder runs.

This module contains the dataclasses describing the outcome of one pass of
reminder generation over the task list.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class ReminderFailure:
    """A task whose reminder could not be drafted or recorded."""
    task_id: int
    error: str


@dataclass
class ReminderRun:
    """Outcome of one reminder pass."""
    ran_at: datetime
    eligible: int = 0
    task_ids: list[int] = field(default_factory=list)
    review_item_ids: list[int] = field(default_factory=list)
    failed: list[ReminderFailure] = field(default_factory=list)

    @property
    def reminders_generated(self) -> int:
        return len(self.task_ids)
