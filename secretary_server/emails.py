# -*- coding: utf-8 -*-
"""Email log tracking.

Delivering mail is left to an external mail client; the secretary records
what was sent and tracks delivery and open notifications by tracking id.
"""
from __future__ import annotations

import logging
import secrets
import typing as t

from secretary_server.models import EmailLog, EmailType
from secretary_server.scheduling import utc_now
from secretary_server.store import SecretaryStore

logger = logging.getLogger(__name__)


def record_email(
        store: SecretaryStore,
        recipient_email: str,
        subject: str,
        body: str,
        email_type: EmailType,
        related_task_id: t.Optional[int] = None,
        related_meeting_id: t.Optional[int] = None,
) -> EmailLog:
    """Records a sent email with a fresh tracking id."""
    log = store.email_logs.insert(
        EmailLog(
            recipient_email=recipient_email,
            subject=subject,
            body=body,
            email_type=email_type,
            related_task_id=related_task_id,
            related_meeting_id=related_meeting_id,
            tracking_id=secrets.token_hex(8),
            sent_at=utc_now(),
        )
    )
    logger.info("Recorded %s email %s to %s", email_type, log.tracking_id, recipient_email)
    return log


def list_email_logs(store: SecretaryStore) -> list[EmailLog]:
    """All email logs, most recently sent first."""
    return sorted(store.email_logs.list(), key=lambda log: log.sent_at, reverse=True)


def get_email_log(store: SecretaryStore, log_id: int) -> EmailLog:
    return store.email_logs.require(log_id)


def list_email_logs_for_task(store: SecretaryStore, task_id: int) -> list[EmailLog]:
    return [log for log in list_email_logs(store) if log.related_task_id == task_id]


def update_email_status(
        store: SecretaryStore,
        tracking_id: str,
        status: t.Literal["delivered", "opened"],
) -> list[EmailLog]:
    """Marks every log carrying ``tracking_id`` as delivered or opened.

    :return: The updated logs; empty when the tracking id is unknown.
    """
    now = utc_now()
    stamp = {"delivered_at": now} if status == "delivered" else {"opened_at": now}
    return [
        store.email_logs.update(log.id, status=status, **stamp)
        for log in store.email_logs.list()
        if log.tracking_id == tracking_id
    ]


def delete_email_log(store: SecretaryStore, log_id: int) -> None:
    store.email_logs.delete(log_id)
