"""Runtime settings for the secretary services.

Settings are read from the environment once, at startup, and passed to the
components that need them instead of being looked up ad hoc.
"""
from __future__ import annotations

import logging
import os
import typing as t
from dataclasses import dataclass

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


@dataclass(frozen=True)
class Settings:
    """Configuration shared by the REST service, MCP tools and CLI."""
    openai_api_key: t.Optional[str] = None
    llm_model: str = "gpt-4o"
    default_recipient_email: str = "secretary@example.com"
    organizer_email: str = "noreply@ai-secretary.com"
    max_concurrent_reminders: t.Optional[int] = None
    log_level: str = "INFO"
    service_port: int = 8003

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables, keeping defaults for unset keys."""
        max_concurrent = os.getenv("SECRETARY_MAX_CONCURRENT_REMINDERS")
        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            llm_model=os.getenv("SECRETARY_LLM_MODEL", cls.llm_model),
            default_recipient_email=os.getenv("SECRETARY_DEFAULT_RECIPIENT", cls.default_recipient_email),
            organizer_email=os.getenv("SECRETARY_ORGANIZER_EMAIL", cls.organizer_email),
            max_concurrent_reminders=int(max_concurrent) if max_concurrent else None,
            log_level=os.getenv("SECRETARY_LOG_LEVEL", cls.log_level),
            service_port=int(os.getenv("SECRETARY_SERVICE_PORT", str(cls.service_port))),
        )

    def require_openai_api_key(self) -> str:
        """Return the OpenAI key or fail the way the LLM services do at startup."""
        if not self.openai_api_key:
            raise RuntimeError("OPENAI_API_KEY environment variable is not set.")
        return self.openai_api_key


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for an entry point (service or CLI)."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
