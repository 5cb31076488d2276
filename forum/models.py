"""
forum/models.py -- Domain dataclasses for forum content.

Pure data containers. Ownership (user_id) and, for answers, the parent
question are bound at creation and never change; only content is mutable.

id is the internal primary key (None before insert); uuid is the opaque
public identifier.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Question:
    uuid: str
    user_id: int
    content: str
    created_at: datetime
    id: int | None = None


@dataclass
class Answer:
    """An answer to a question.

    question_content is filled in by list queries that join the parent
    question, so callers can render both without a second round-trip.
    """

    uuid: str
    user_id: int
    question_id: int
    content: str
    created_at: datetime
    id: int | None = None
    question_content: str | None = None
