from __future__ import annotations

import logging
import threading
import uuid
from datetime import datetime
from typing import Dict, Tuple

from .models.task import FieldTask, TaskKind, TaskStatus

logger = logging.getLogger(__name__)


class FieldTaskRegistry:
    """Tracks fire-and-forget calls that write back into a single session field.

    Starting a task makes it the newest one for its ``(session_id, field)``
    key. Older tasks keep running (nothing is cancelled) but once a newer task
    exists they are no longer current, so their results must be discarded.
    """

    def __init__(self) -> None:
        self._tasks: Dict[str, FieldTask] = {}
        self._latest: Dict[Tuple[str, str], str] = {}
        self._lock = threading.Lock()

    def create_task(self, *, session_id: str, field: str, kind: TaskKind) -> FieldTask:
        with self._lock:
            task = FieldTask(id=f"task_{uuid.uuid4().hex[:12]}", session_id=session_id, field=field, kind=kind)
            self._tasks[task.id] = task
            self._latest[(session_id, field)] = task.id
            return task

    def get_task(self, task_id: str) -> FieldTask | None:
        with self._lock:
            return self._tasks.get(task_id)

    def is_current(self, task_id: str) -> bool:
        with self._lock:
            task = self._tasks.get(task_id)
            if task is None:
                return False
            return self._latest.get((task.session_id, task.field)) == task_id

    def update_task(
        self,
        task_id: str,
        *,
        status: TaskStatus | None = None,
        applied: bool | None = None,
        errors: list[str] | None = None,
    ) -> FieldTask | None:
        """Apply changes to a task; returns None when the task was discarded with its session."""
        with self._lock:
            task = self._tasks.get(task_id)
            if task is None:
                return None
            if status is not None:
                task.status = status
            if applied is not None:
                task.applied = applied
            if errors is not None:
                task.errors = list(errors)
            task.updated_at = datetime.utcnow()
            return task

    def finish(self, task_id: str, *, applied: bool) -> FieldTask | None:
        """Close a task, recording SUPERSEDED when a newer task took over its field."""
        status = TaskStatus.completed if self.is_current(task_id) else TaskStatus.superseded
        task = self.update_task(task_id, status=status, applied=applied)
        if task is not None and status is TaskStatus.superseded:
            logger.info(
                "Discarded result of superseded task",
                extra={"task_id": task_id, "session_id": task.session_id, "field": task.field},
            )
        return task

    def discard_session(self, session_id: str) -> int:
        """Forget every task of a deleted session; returns how many were dropped."""
        with self._lock:
            task_ids = [task_id for task_id, task in self._tasks.items() if task.session_id == session_id]
            for task_id in task_ids:
                del self._tasks[task_id]
            for key in [key for key in self._latest if key[0] == session_id]:
                del self._latest[key]
            return len(task_ids)


__all__ = ["FieldTaskRegistry"]
