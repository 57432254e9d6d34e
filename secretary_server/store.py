# -*- coding: utf-8 -*-
"""In-memory storage for the secretary records.

Each entity lives in its own ``Repository``. ``insert`` returns the stored
row itself, so the insert and the read-back of the created record are one
atomic step; a database-backed repository must keep that contract by
returning the created row rather than re-selecting it by id.
"""
from __future__ import annotations

import copy
import threading
import typing as t
from dataclasses import replace

from secretary_server.errors import NotFoundError
from secretary_server.models import ActionItem, ChatMessage, EmailLog, Meeting, ReviewItem, Task
from secretary_server.scheduling import utc_now

RecordT = t.TypeVar("RecordT")


class Repository(t.Generic[RecordT]):
    """Id-keyed storage for one kind of dataclass record.

    Records handed out are copies, so callers work on snapshots and only
    ``update`` changes what is stored.
    """

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self._rows: dict[int, RecordT] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def insert(self, record: RecordT) -> RecordT:
        """Stores a new record, assigning its id and timestamps.

        :param record: The record to store; its ``id`` is ignored.
        :return: A copy of the stored record.
        """
        now = utc_now()
        with self._lock:
            stored = replace(record, id=self._next_id, created_at=now, updated_at=now)
            self._rows[stored.id] = stored
            self._next_id += 1
            return copy.deepcopy(stored)

    def load(self, records: t.Iterable[RecordT]) -> list[RecordT]:
        """Stores existing records, keeping the ids they carry.

        Records without an id get fresh ids above every loaded one, so later
        inserts never reuse an id from the batch.

        :param records: Records to store, in the order they should be listed.
        :return: Copies of the stored records.
        :raises ValueError: If two records share an id or an id is already stored.
        """
        records = list(records)
        now = utc_now()
        with self._lock:
            carried = [record.id for record in records if record.id is not None]
            clashing = {i for i in carried if carried.count(i) > 1 or i in self._rows}
            if clashing:
                raise ValueError(f"Duplicate {self.kind} id(s): {sorted(clashing)}")
            self._next_id = max([self._next_id, *(i + 1 for i in carried)])

            stored = []
            for record in records:
                record_id = record.id
                if record_id is None:
                    record_id = self._next_id
                    self._next_id += 1
                row = replace(
                    record,
                    id=record_id,
                    created_at=record.created_at or now,
                    updated_at=record.updated_at or now,
                )
                self._rows[record_id] = row
                stored.append(copy.deepcopy(row))
            return stored

    def get_by_id(self, record_id: int) -> t.Optional[RecordT]:
        with self._lock:
            row = self._rows.get(record_id)
            return copy.deepcopy(row) if row is not None else None

    def require(self, record_id: int) -> RecordT:
        """Like ``get_by_id`` but raises ``NotFoundError`` for unknown ids."""
        record = self.get_by_id(record_id)
        if record is None:
            raise NotFoundError(self.kind, record_id)
        return record

    def list(self) -> list[RecordT]:
        """All records in insertion order."""
        with self._lock:
            return [copy.deepcopy(row) for row in self._rows.values()]

    def update(self, record_id: int, **changes: t.Any) -> RecordT:
        """Applies field changes to a stored record.

        :param record_id: Id of the record to change.
        :param changes: Field names and their new values.
        :return: A copy of the updated record.
        :raises NotFoundError: If no record has this id.
        :raises TypeError: If a change names a field the record does not have.
        """
        with self._lock:
            row = self._rows.get(record_id)
            if row is None:
                raise NotFoundError(self.kind, record_id)
            updated = replace(row, **changes, updated_at=utc_now())
            self._rows[record_id] = updated
            return copy.deepcopy(updated)

    def upsert(self, record: RecordT, key: str) -> RecordT:
        """Inserts the record, or updates the stored one sharing its ``key`` value.

        Lookup and write happen under one lock, so two concurrent upserts
        with the same key never create two rows.
        """
        value = getattr(record, key)
        now = utc_now()
        with self._lock:
            for row_id, row in self._rows.items():
                if getattr(row, key) == value:
                    updated = replace(record, id=row_id, created_at=row.created_at, updated_at=now)
                    self._rows[row_id] = updated
                    return copy.deepcopy(updated)
            stored = replace(record, id=self._next_id, created_at=now, updated_at=now)
            self._rows[stored.id] = stored
            self._next_id += 1
            return copy.deepcopy(stored)

    def delete(self, record_id: int) -> None:
        with self._lock:
            if self._rows.pop(record_id, None) is None:
                raise NotFoundError(self.kind, record_id)

    def clear(self) -> None:
        with self._lock:
            self._rows.clear()
            self._next_id = 1


class SecretaryStore:
    """All the repositories one secretary instance works with."""

    def __init__(self) -> None:
        self.meetings: Repository[Meeting] = Repository("Meeting")
        self.tasks: Repository[Task] = Repository("Task")
        self.action_items: Repository[ActionItem] = Repository("Action item")
        self.review_items: Repository[ReviewItem] = Repository("Review item")
        self.email_logs: Repository[EmailLog] = Repository("Email log")
        self.chat_messages: Repository[ChatMessage] = Repository("Chat message")

    def clear(self) -> None:
        for repository in (
                self.meetings, self.tasks, self.action_items,
                self.review_items, self.email_logs, self.chat_messages,
        ):
            repository.clear()
