from __future__ import annotations

import logging
import math
import threading
from collections.abc import Callable, Sequence
from dataclasses import replace
from datetime import date, datetime
from pathlib import Path
from typing import Any

from todo_engine.config import SETTINGS
from todo_engine.domain.entities import TaskEntity, datetime_to_ms, new_task_id, now_ms
from todo_engine.domain.enums import Priority
from todo_engine.domain.errors import ImportFormatError, ValidationError
from todo_engine.domain.filters import ViewOptions
from todo_engine.domain.normalizer import normalize_tasks
from todo_engine.domain.reorder import reconcile_order
from todo_engine.domain.view import build_view, count_tasks, is_overdue, needs_periodic_refresh
from todo_engine.infra.repository import TaskStore

from . import transfer

logger = logging.getLogger(__name__)


class TaskService:
    """Mutation API over a ``TaskStore``.

    Every public call runs under one lock, so operations never interleave.
    Each mutation persists the whole collection before returning.
    """

    def __init__(
        self,
        store: TaskStore,
        *,
        clock: Callable[[], int] = now_ms,
        id_factory: Callable[[], str] = new_task_id,
    ) -> None:
        self._store = store
        self._clock = clock
        self._id_factory = id_factory
        self._lock = threading.RLock()

    def load(self) -> list[TaskEntity]:
        with self._lock:
            return self._store.load()

    def list_tasks(self, options: ViewOptions | None = None) -> list[TaskEntity]:
        with self._lock:
            return build_view(self._store.tasks, options or ViewOptions())

    def get_task(self, task_id: str) -> TaskEntity | None:
        with self._lock:
            return next((t for t in self._store.tasks if t.id == task_id), None)

    def get_stats(self) -> dict[str, int]:
        with self._lock:
            return count_tasks(self._store.tasks)

    def overdue_ids(self, now: int | None = None) -> set[str]:
        now = self._clock() if now is None else now
        with self._lock:
            return {t.id for t in self._store.tasks if is_overdue(t, now)}

    def needs_refresh(self) -> bool:
        with self._lock:
            return needs_periodic_refresh(self._store.tasks)

    def add(
        self,
        text: str,
        priority: Priority | str = Priority.MEDIUM,
        due_at: int | datetime | None = None,
    ) -> TaskEntity:
        cleaned = (text or "").strip()
        if not cleaned:
            raise ValidationError("Task cannot be empty.")
        try:
            priority = Priority(priority)
        except ValueError as exc:
            raise ValidationError(f"Unknown priority: {priority!r}") from exc

        with self._lock:
            tasks = list(self._store.tasks)
            max_order = max([0, *(t.order for t in tasks)])
            task = TaskEntity(
                id=self._id_factory(),
                text=cleaned,
                completed=False,
                priority=priority,
                due_at=self._coerce_due(due_at),
                order=math.floor(max_order) + 1,
                created_at=self._clock(),
            )
            tasks.append(task)
            self._store.save(tasks)
            logger.debug("Task added id=%s order=%s", task.id, task.order)
            return task

    def toggle_complete(self, task_id: str) -> TaskEntity | None:
        with self._lock:
            task = self.get_task(task_id)
            if task is None:
                self._store.save()
                return None
            return self._put(replace(task, completed=not task.completed))

    def edit(self, task_id: str, new_text: str) -> TaskEntity | None:
        with self._lock:
            task = self.get_task(task_id)
            if task is None:
                self._store.save()
                return None
            cleaned = (new_text or "").strip()
            if cleaned:
                task = replace(task, text=cleaned)
            # Blank text cancels the edit, but the list is still written back.
            return self._put(task)

    def delete(self, task_id: str) -> None:
        with self._lock:
            self._store.save([t for t in self._store.tasks if t.id != task_id])
            logger.debug("Task deleted id=%s", task_id)

    def clear_completed(self) -> int:
        with self._lock:
            tasks = self._store.tasks
            remaining = [t for t in tasks if not t.completed]
            removed = len(tasks) - len(remaining)
            if not removed:
                return 0
            self._store.save(remaining)
            logger.info("Cleared %s completed tasks", removed)
            return removed

    def reorder(self, task_ids: Sequence[str]) -> None:
        with self._lock:
            self._store.save(reconcile_order(self._store.tasks, list(task_ids)))

    def import_replace(self, raw_list: Any) -> list[TaskEntity]:
        if not isinstance(raw_list, (list, tuple)):
            raise ImportFormatError("Import failed: expected a JSON array of tasks.")
        tasks = normalize_tasks(raw_list, id_factory=self._id_factory, clock=self._clock)
        with self._lock:
            self._store.replace(tasks)
        logger.info("Imported %s tasks", len(tasks))
        return tasks

    def import_json(self, payload: str | bytes) -> list[TaskEntity]:
        return self.import_replace(transfer.parse_import(payload))

    def import_file(self, path: str | Path) -> list[TaskEntity]:
        return self.import_replace(transfer.read_import_file(path))

    def export_json(self) -> str:
        with self._lock:
            return transfer.serialize_tasks(self._store.tasks)

    def export_to(self, directory: str | Path | None = None, today: date | None = None) -> Path:
        directory = directory or SETTINGS.export_dir or Path.cwd()
        with self._lock:
            path = transfer.write_export(self._store.tasks, directory, today)
        logger.info("Exported tasks to %s", path)
        return path

    def _put(self, task: TaskEntity) -> TaskEntity:
        self._store.save([task if t.id == task.id else t for t in self._store.tasks])
        return task

    @staticmethod
    def _coerce_due(due_at: int | datetime | None) -> int | None:
        if due_at is None:
            return None
        if isinstance(due_at, datetime):
            return datetime_to_ms(due_at)
        if isinstance(due_at, int) and not isinstance(due_at, bool):
            return due_at
        raise ValidationError(f"Invalid due date: {due_at!r}")
