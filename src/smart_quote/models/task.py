from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Sequence

from pydantic import BaseModel, Field


class TaskKind(str, Enum):
    company_lookup = "company_lookup"
    client_lookup = "client_lookup"
    description = "description"
    logo_color = "logo_color"


class TaskStatus(str, Enum):
    queued = "QUEUED"
    in_progress = "IN_PROGRESS"
    completed = "COMPLETED"
    superseded = "SUPERSEDED"
    skipped = "SKIPPED"
    failed = "FAILED"


class FieldTask(BaseModel):
    id: str
    session_id: str
    field: str
    kind: TaskKind
    status: TaskStatus = TaskStatus.queued
    applied: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    errors: Sequence[str] = Field(default_factory=list)


__all__ = ["FieldTask", "TaskKind", "TaskStatus"]
