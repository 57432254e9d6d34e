# -*- coding: utf-8 -*-
"""Meeting operations: scheduling with conflict checks, updates and cancellation."""
from __future__ import annotations

import logging
import secrets
import string
import typing as t
from datetime import datetime

from secretary_server.emails import record_email
from secretary_server.models import EmailLog, Meeting, MeetingStatus, ScheduledMeeting
from secretary_server.scheduling import find_conflicts
from secretary_server.store import SecretaryStore

logger = logging.getLogger(__name__)

_ROOM_ALPHABET = string.ascii_uppercase + string.digits


def generate_room_code(length: int = 12) -> str:
    """Random video-conference room code such as ``7KQ2ZJ0P4WXA``."""
    return "".join(secrets.choice(_ROOM_ALPHABET) for _ in range(length))


def check_conflicts(
        store: SecretaryStore,
        meeting_date: datetime,
        duration: t.Optional[int] = None,
        exclude_meeting_id: t.Optional[int] = None,
) -> list[Meeting]:
    """Checks a proposed slot against every stored meeting.

    :param store: The store holding the meetings.
    :param meeting_date: Start of the proposed slot.
    :param duration: Length in minutes (None means 60).
    :param exclude_meeting_id: A meeting to leave out, e.g. the one being edited.
    :return: The conflicting meetings.
    """
    return find_conflicts(meeting_date, duration, exclude_meeting_id, store.meetings.list())


def create_meeting(
        store: SecretaryStore,
        title: str,
        meeting_date: datetime,
        duration: t.Optional[int] = None,
        description: str = "",
        location: str = "",
        participants: t.Optional[list[str]] = None,
        created_by: int = 0,
) -> ScheduledMeeting:
    """Creates a meeting and reports the existing meetings it clashes with.

    Conflicts are reported, not enforced: the meeting is created either way.

    :return: The created meeting and its conflicts.
    """
    conflicts = check_conflicts(store, meeting_date, duration)
    meeting = store.meetings.insert(
        Meeting(
            title=title,
            meeting_date=meeting_date,
            duration=duration,
            description=description,
            location=location,
            participants=list(participants or []),
            meet_link=f"jitsi:{generate_room_code()}",
            created_by=created_by,
        )
    )
    if conflicts:
        logger.info(
            "Meeting %s overlaps %d existing meeting(s): %s",
            meeting.id, len(conflicts), [c.id for c in conflicts],
        )
    if meeting.participants:
        _log_meeting_email(
            store, meeting, "meeting_invite",
            subject=f"Meeting Invitation: {meeting.title}",
            body=f"Meeting invite sent for {meeting.title} on {meeting.meeting_date.isoformat()}",
        )
    return ScheduledMeeting(meeting=meeting, conflicts=conflicts)


def update_meeting(
        store: SecretaryStore,
        meeting_id: int,
        title: t.Optional[str] = None,
        meeting_date: t.Optional[datetime] = None,
        duration: t.Optional[int] = None,
        description: t.Optional[str] = None,
        location: t.Optional[str] = None,
        participants: t.Optional[list[str]] = None,
        status: t.Optional[MeetingStatus] = None,
        cancellation_reason: t.Optional[str] = None,
) -> ScheduledMeeting:
    """Updates a meeting, re-checking conflicts when its time slot changes.

    Only the arguments that are not None are applied. Participants are
    notified (an email log is recorded) when the date, duration or location
    changes, or when the meeting is cancelled.

    :raises NotFoundError: If the meeting does not exist.
    """
    existing = store.meetings.require(meeting_id)

    conflicts: list[Meeting] = []
    if meeting_date is not None or duration is not None:
        conflicts = check_conflicts(
            store,
            meeting_date if meeting_date is not None else existing.meeting_date,
            duration if duration is not None else existing.duration,
            exclude_meeting_id=meeting_id,
        )

    changes: dict[str, t.Any] = {
        "title": title,
        "meeting_date": meeting_date,
        "duration": duration,
        "description": description,
        "location": location,
        "participants": list(participants) if participants is not None else None,
        "status": status,
    }
    updated = store.meetings.update(
        meeting_id, **{name: value for name, value in changes.items() if value is not None}
    )

    rescheduled = (
        (meeting_date is not None and meeting_date != existing.meeting_date)
        or (duration is not None and duration != existing.duration)
        or (location is not None and location != existing.location)
    )
    if rescheduled and status != "cancelled" and updated.participants:
        _log_meeting_email(
            store, updated, "meeting_invite",
            subject=f"Meeting Updated: {updated.title}",
            body=f"Meeting invite updated for {updated.title} on {updated.meeting_date.isoformat()}",
        )

    if status == "cancelled" and existing.status != "cancelled" and existing.participants:
        reason = cancellation_reason or "Not specified"
        _log_meeting_email(
            store, existing, "meeting_cancellation",
            subject=f"Meeting Cancelled: {existing.title}",
            body=f"Cancellation notification sent for {existing.title}. Reason: {reason}",
        )

    return ScheduledMeeting(meeting=updated, conflicts=conflicts)


def list_meetings(store: SecretaryStore) -> list[Meeting]:
    """All meetings, latest start first."""
    return sorted(store.meetings.list(), key=lambda m: m.meeting_date, reverse=True)


def get_meeting(store: SecretaryStore, meeting_id: int) -> Meeting:
    return store.meetings.require(meeting_id)


def delete_meeting(store: SecretaryStore, meeting_id: int) -> None:
    store.meetings.delete(meeting_id)


def generate_meet_link(store: SecretaryStore, meeting_id: int) -> str:
    """Assigns a fresh video-conference room to the meeting and returns its link."""
    store.meetings.require(meeting_id)
    meet_link = f"jitsi:{generate_room_code()}"
    store.meetings.update(meeting_id, meet_link=meet_link)
    return meet_link


def _log_meeting_email(
        store: SecretaryStore,
        meeting: Meeting,
        email_type: t.Literal["meeting_invite", "meeting_cancellation"],
        subject: str,
        body: str,
) -> EmailLog:
    return record_email(
        store,
        recipient_email=", ".join(meeting.participants),
        subject=subject,
        body=body,
        email_type=email_type,
        related_meeting_id=meeting.id,
    )
