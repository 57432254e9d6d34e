"""Shared fixtures: a fresh store and stand-ins for the LLM."""
import threading
import time
import typing as t
from types import SimpleNamespace

import pytest

from secretary_server.errors import AssistantError
from secretary_server.models import Meeting, Task
from secretary_server.store import SecretaryStore


class FakeCompletions:
    """Mimics ``client.chat.completions`` and records every request."""

    def __init__(self, replies: list[str]) -> None:
        self.replies = list(replies)
        self.requests: list[dict[str, t.Any]] = []

    def create(self, **kwargs: t.Any) -> SimpleNamespace:
        self.requests.append(kwargs)
        content = self.replies.pop(0) if self.replies else ""
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class FakeOpenAI:
    """Mock OpenAI client returning canned replies in order."""

    def __init__(self, *replies: str) -> None:
        self.chat = SimpleNamespace(completions=FakeCompletions(list(replies)))

    @property
    def requests(self) -> list[dict[str, t.Any]]:
        return self.chat.completions.requests


class FakeAssistant:
    """Assistant stand-in that drafts canned text and can fail for chosen tasks."""

    def __init__(self, failing_titles: t.Iterable[str] = (), delay: float = 0.0) -> None:
        self.failing_titles = set(failing_titles)
        self.delay = delay
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def draft_reminder(self, task: Task) -> str:
        with self._lock:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                time.sleep(self.delay)
            if task.title in self.failing_titles:
                raise AssistantError(f"LLM request failed for {task.title}")
            return f"Reminder: {task.title}"
        finally:
            with self._lock:
                self.in_flight -= 1

    def draft_escalation(self, task: Task) -> str:
        return f"Escalation: {task.title}"

    def summarize_meeting(self, meeting: Meeting, transcript: str) -> str:
        return f"## Summary of {meeting.title}"

    def translate(self, text: str) -> str:
        return f"EN: {text}"

    def chat_reply(self, history: list[dict[str, str]], context: str) -> str:
        return f"You said: {history[-1]['content']}"


@pytest.fixture
def store() -> SecretaryStore:
    return SecretaryStore()


@pytest.fixture
def fake_assistant() -> FakeAssistant:
    return FakeAssistant()


@pytest.fixture
def make_assistant() -> t.Callable[..., FakeAssistant]:
    return FakeAssistant


@pytest.fixture
def make_openai() -> t.Callable[..., FakeOpenAI]:
    return FakeOpenAI
