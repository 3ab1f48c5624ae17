"""Defensive coercion of untrusted task records (imports, persisted blobs).

``normalize_task`` is total: any input, however malformed, yields a
well-formed ``TaskEntity``. Every field falls back to its own default
independently of the others.
"""
from __future__ import annotations

import math
from collections.abc import Callable, Mapping
from dataclasses import replace
from datetime import datetime
from typing import Any

from .entities import TaskEntity, datetime_to_ms, new_task_id, now_ms
from .enums import Priority

_PRIORITY_VALUES = frozenset(p.value for p in Priority)


def _finite_number(value: Any) -> int | float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return int(value) if value.is_integer() else value
    return None


def _parse_due(value: Any) -> int | None:
    number = _finite_number(value)
    if number is not None:
        return int(number)
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return datetime_to_ms(datetime.fromisoformat(value.strip()))
    except (ValueError, OverflowError, OSError):
        return None


def _coerce_text(value: Any) -> str:
    try:
        return str(value).strip() if value else ""
    except Exception:  # noqa: BLE001
        return ""


def _coerce_priority(value: Any) -> Priority:
    if isinstance(value, str) and value in _PRIORITY_VALUES:
        return Priority(value)
    return Priority.MEDIUM


def _coerce_completed(value: Any) -> bool:
    try:
        return bool(value)
    except Exception:  # noqa: BLE001
        return False


def normalize_task(
    raw: Any,
    *,
    id_factory: Callable[[], str] = new_task_id,
    clock: Callable[[], int] = now_ms,
) -> TaskEntity:
    data: Mapping[str, Any] = raw if isinstance(raw, Mapping) else {}

    task_id = data.get("id")
    order = _finite_number(data.get("order"))
    created_at = _finite_number(data.get("createdAt"))

    return TaskEntity(
        id=task_id if isinstance(task_id, str) else id_factory(),
        text=_coerce_text(data.get("text")),
        completed=_coerce_completed(data.get("completed")),
        priority=_coerce_priority(data.get("priority")),
        due_at=_parse_due(data.get("dueAt")),
        order=order if order is not None else 0,
        created_at=int(created_at) if created_at is not None else clock(),
    )


def normalize_tasks(
    raw_items: list[Any] | tuple[Any, ...],
    *,
    id_factory: Callable[[], str] = new_task_id,
    clock: Callable[[], int] = now_ms,
) -> list[TaskEntity]:
    """Normalize a batch, regenerating ids that repeat within it."""
    tasks: list[TaskEntity] = []
    seen: set[str] = set()
    for raw in raw_items:
        task = normalize_task(raw, id_factory=id_factory, clock=clock)
        while task.id in seen:
            task = replace(task, id=id_factory())
        seen.add(task.id)
        tasks.append(task)
    return tasks
