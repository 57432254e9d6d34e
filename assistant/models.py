# -*- coding: utf-8 -*-
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import typing as t


@dataclass
class ExtractedActionItem:
    """An action item as read out of a transcript, before it is stored."""
    description: str
    owner: t.Optional[str] = None  # name or email as mentioned, None if not specified
    deadline: t.Optional[datetime] = None  # None when the transcript gives no concrete date
