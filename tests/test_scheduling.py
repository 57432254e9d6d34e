"""Tests for meeting conflict detection and reminder eligibility."""
from datetime import datetime, timedelta, timezone

import pytest

from secretary_server.models import Meeting, Task
from secretary_server.scheduling import (
    find_conflicts,
    is_reminder_eligible,
    overlaps,
    select_reminder_eligible_tasks,
)

NOW = datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc)


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2025, 3, 10, hour, minute, tzinfo=timezone.utc)


def meeting(meeting_id: int, start: datetime, duration=60, status="scheduled") -> Meeting:
    return Meeting(title=f"Meeting {meeting_id}", meeting_date=start, duration=duration, status=status, id=meeting_id)


def task(task_id: int, deadline, status="open", last_reminder_sent=None) -> Task:
    return Task(
        title=f"Task {task_id}",
        deadline=deadline,
        status=status,
        last_reminder_sent=last_reminder_sent,
        id=task_id,
    )


# -----------------------------
# Conflict detection
# -----------------------------

def test_partial_overlap_is_a_conflict() -> None:
    existing = [meeting(1, at(10), 60)]
    assert find_conflicts(at(10, 30), 60, None, existing) == existing


def test_back_to_back_meetings_do_not_conflict() -> None:
    existing = [meeting(1, at(10), 60)]
    assert find_conflicts(at(11), 30, None, existing) == []
    assert find_conflicts(at(9), 60, None, existing) == []


def test_editing_a_meeting_excludes_itself() -> None:
    existing = [meeting(1, at(10), 60)]
    assert find_conflicts(at(10, 15), 60, 1, existing) == []


def test_cancelled_meetings_never_conflict() -> None:
    existing = [meeting(1, at(10), 60, status="cancelled")]
    assert find_conflicts(at(10), 60, None, existing) == []


def test_completed_meetings_still_conflict() -> None:
    existing = [meeting(1, at(10), 60, status="completed")]
    assert find_conflicts(at(10, 30), 60, None, existing) == existing


@pytest.mark.parametrize("duration", [None, 0])
def test_missing_duration_defaults_to_an_hour(duration) -> None:
    existing = [meeting(1, at(10), duration)]
    assert find_conflicts(at(10, 59), 15, None, existing) == existing
    assert find_conflicts(at(11), 15, None, existing) == []


def test_candidate_without_duration_defaults_to_an_hour() -> None:
    existing = [meeting(1, at(10, 59), 30)]
    assert find_conflicts(at(10), None, None, existing) == existing


def test_candidate_containing_an_existing_meeting() -> None:
    existing = [meeting(1, at(10, 15), 15)]
    assert find_conflicts(at(10), 120, None, existing) == existing


def test_conflicts_keep_input_order() -> None:
    existing = [meeting(3, at(10, 30)), meeting(1, at(9, 45)), meeting(2, at(14)), meeting(4, at(10))]
    found = find_conflicts(at(10), 60, None, existing)
    assert [m.id for m in found] == [3, 1, 4]


def test_find_conflicts_does_not_mutate_input() -> None:
    existing = [meeting(1, at(10)), meeting(2, at(12))]
    snapshot = [Meeting(**vars(m)) for m in existing]
    find_conflicts(at(10), 60, None, existing)
    assert existing == snapshot


def test_empty_meeting_list_has_no_conflicts() -> None:
    assert find_conflicts(at(10), 60, None, []) == []


@pytest.mark.parametrize(
    "start_a, duration_a, start_b, duration_b",
    [
        (at(10), 60, at(10, 30), 60),
        (at(10), 60, at(11), 60),
        (at(10), 30, at(10), 30),
        (at(8), None, at(8, 59), 1),
        (at(10), 15, at(12), 15),
    ],
)
def test_overlap_is_symmetric(start_a, duration_a, start_b, duration_b) -> None:
    assert overlaps(start_a, duration_a, start_b, duration_b) == overlaps(start_b, duration_b, start_a, duration_a)


def test_overlap_across_midnight() -> None:
    late = datetime(2025, 3, 10, 23, 30, tzinfo=timezone.utc)
    early = datetime(2025, 3, 11, 0, 15, tzinfo=timezone.utc)
    assert overlaps(late, 60, early, 30)


# -----------------------------
# Reminder eligibility
# -----------------------------

def test_task_due_tomorrow_without_reminder_is_eligible() -> None:
    tasks = [task(1, NOW + timedelta(hours=24))]
    assert select_reminder_eligible_tasks(NOW, tasks) == tasks


def test_recently_reminded_task_is_not_eligible() -> None:
    tasks = [task(1, NOW + timedelta(hours=24), last_reminder_sent=NOW - timedelta(hours=12))]
    assert select_reminder_eligible_tasks(NOW, tasks) == []


def test_cooldown_boundary_is_inclusive() -> None:
    deadline = NOW + timedelta(hours=10)
    just_short = task(1, deadline, last_reminder_sent=NOW - timedelta(hours=23, minutes=59))
    exactly = task(2, deadline, last_reminder_sent=NOW - timedelta(hours=24))
    assert not is_reminder_eligible(just_short, NOW)
    assert is_reminder_eligible(exactly, NOW)


def test_window_boundaries_are_inclusive() -> None:
    assert is_reminder_eligible(task(1, NOW), NOW)
    assert is_reminder_eligible(task(2, NOW + timedelta(hours=48)), NOW)
    assert not is_reminder_eligible(task(3, NOW + timedelta(hours=48, milliseconds=1)), NOW)


def test_past_deadline_is_not_eligible() -> None:
    assert not is_reminder_eligible(task(1, NOW - timedelta(seconds=1)), NOW)


def test_task_without_deadline_is_not_eligible() -> None:
    assert not is_reminder_eligible(task(1, None), NOW)


def test_completed_task_is_not_eligible() -> None:
    assert not is_reminder_eligible(task(1, NOW + timedelta(hours=2), status="completed"), NOW)


@pytest.mark.parametrize("status", ["open", "in_progress", "blocked", "overdue"])
def test_non_completed_statuses_are_eligible(status) -> None:
    assert is_reminder_eligible(task(1, NOW + timedelta(hours=2), status=status), NOW)


def test_selection_keeps_input_order() -> None:
    tasks = [
        task(5, NOW + timedelta(hours=30)),
        task(2, NOW + timedelta(hours=60)),
        task(9, NOW + timedelta(hours=1)),
        task(1, NOW + timedelta(hours=5), status="completed"),
        task(7, NOW + timedelta(hours=47)),
    ]
    assert [x.id for x in select_reminder_eligible_tasks(NOW, tasks)] == [5, 9, 7]


def test_selection_is_idempotent() -> None:
    tasks = [task(i, NOW + timedelta(hours=i * 10)) for i in range(1, 7)]
    once = select_reminder_eligible_tasks(NOW, tasks)
    assert select_reminder_eligible_tasks(NOW, once) == once
