# -*- coding: utf-8 -*-
"""LLM-backed drafting for the secretary: emails, summaries, action items, chat."""
from __future__ import annotations

import json
import logging
import typing as t
from datetime import datetime, timezone

from openai import OpenAI, OpenAIError

from assistant.models import ExtractedActionItem
from prompts import load_prompt, render_prompt
from secretary_server.config import Settings
from secretary_server.errors import AssistantError
from secretary_server.models import Meeting, Task

logger = logging.getLogger(__name__)

CHAT_FALLBACK_REPLY = "I'm sorry, I couldn't process that request."
_UNSPECIFIED = {"", "not specified", "none", "n/a"}


def parse_deadline(value: t.Optional[str]) -> t.Optional[datetime]:
    """Parses an ISO date or datetime from LLM output; anything else gives None.

    Naive values are read as UTC.
    """
    if not value or value.strip().lower() in _UNSPECIFIED:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Could not parse deadline: %s", value)
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _format_deadline(deadline: t.Optional[datetime]) -> str:
    return deadline.strftime("%a %b %-d %Y %-I:%M %p %Z").strip() if deadline else "No deadline"


class Assistant:
    """Drafts content with an OpenAI chat model.

    Every call is a single blocking chat completion; callers that need to
    draft for many records at once run calls in worker threads.
    """

    def __init__(self, client: OpenAI, model: str = "gpt-4o") -> None:
        self.client = client
        self.model = model

    @classmethod
    def from_settings(cls, settings: Settings) -> "Assistant":
        return cls(OpenAI(api_key=settings.require_openai_api_key()), model=settings.llm_model)

    def _complete(
            self,
            system_prompt: str,
            messages: list[dict[str, str]],
            json_mode: bool = False,
    ) -> str:
        kwargs: dict[str, t.Any] = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        try:
            completion = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "system", "content": system_prompt}, *messages],
                **kwargs,
            )
        except OpenAIError as e:
            raise AssistantError(f"LLM request failed: {e}") from e
        return completion.choices[0].message.content or ""

    def draft_reminder(self, task: Task) -> str:
        """Drafts a reminder email body for a task approaching its deadline."""
        return self._complete(
            load_prompt("reminder_email_system_prompt"),
            [{
                "role": "user",
                "content": (
                    "Draft a reminder email for this task:\n"
                    f"Title: {task.title}\n"
                    f"Description: {task.description or 'No description'}\n"
                    f"Deadline: {_format_deadline(task.deadline)}\n"
                    f"Priority: {task.priority}"
                ),
            }],
        )

    def draft_escalation(self, task: Task) -> str:
        """Drafts an escalation email body for an overdue or blocked task."""
        return self._complete(
            load_prompt("escalation_email_system_prompt"),
            [{
                "role": "user",
                "content": (
                    "Draft an escalation email for this overdue task:\n"
                    f"Title: {task.title}\n"
                    f"Description: {task.description or 'No description'}\n"
                    f"Deadline: {_format_deadline(task.deadline)}\n"
                    f"Status: {task.status}\n"
                    f"Priority: {task.priority}"
                ),
            }],
        )

    def summarize_meeting(self, meeting: Meeting, transcript: str) -> str:
        """Writes a Markdown summary of a meeting transcript."""
        return self._complete(
            load_prompt("meeting_summary_system_prompt"),
            [{
                "role": "user",
                "content": (
                    f"Meeting: {meeting.title}\n"
                    f"Date: {meeting.meeting_date.isoformat()}\n\n"
                    f"Transcript:\n{transcript}"
                ),
            }],
        )

    def extract_action_items(self, transcript: str) -> list[ExtractedActionItem]:
        """Extracts one entry per distinct action item mentioned in a transcript.

        :raises AssistantError: If the model does not return valid JSON.
        """
        raw = self._complete(
            load_prompt("action_items_system_prompt"),
            [{"role": "user", "content": f"Transcript:\n{transcript}"}],
            json_mode=True,
        )
        try:
            data = json.loads(raw or "{}")
        except json.JSONDecodeError as e:
            raise AssistantError(f"Invalid JSON response from LLM: {e}") from e

        items: list[ExtractedActionItem] = []
        for item in data.get("items", []) or []:
            description = (item.get("description") or "").strip()
            if not description:
                continue
            owner = (item.get("owner") or "").strip()
            items.append(
                ExtractedActionItem(
                    description=description,
                    owner=None if owner.lower() in _UNSPECIFIED else owner,
                    deadline=parse_deadline(item.get("deadline")),
                )
            )
        return items

    def translate(self, text: str) -> str:
        """Translates text to English; falls back to the input if the model returns nothing."""
        translated = self._complete(
            load_prompt("translation_system_prompt"),
            [{"role": "user", "content": f"Translate this text to English:\n\n{text}"}],
        )
        return translated or text

    def chat_reply(self, history: list[dict[str, str]], context: str) -> str:
        """Answers the latest user message given prior turns and a system-state summary."""
        reply = self._complete(render_prompt("chat_system_prompt", context=context), history)
        return reply or CHAT_FALLBACK_REPLY
