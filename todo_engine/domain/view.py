from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from typing import Any

from .entities import TaskEntity
from .enums import SortMode, TaskFilter
from .filters import ViewOptions

_NO_DUE = (1, 0)


def _due_key(task: TaskEntity) -> tuple[int, int]:
    # Tasks without a due date sort after every task that has one.
    if task.due_at is None:
        return _NO_DUE
    return (0, task.due_at)


def _priority_key(task: TaskEntity) -> tuple[Any, ...]:
    return (task.priority.rank, *_due_key(task))


def _alpha_key(task: TaskEntity) -> tuple[str]:
    return (task.text.lower(),)


def _manual_key(task: TaskEntity) -> tuple[()]:
    return ()


_SECONDARY_KEYS: dict[SortMode, Callable[[TaskEntity], tuple[Any, ...]]] = {
    SortMode.DEFAULT: _manual_key,
    SortMode.PRIORITY: _priority_key,
    SortMode.DUE: _due_key,
    SortMode.ALPHA: _alpha_key,
}


def _apply_search(tasks: Iterable[TaskEntity], search: str | None) -> list[TaskEntity]:
    term = (search or "").strip().lower()
    if not term:
        return list(tasks)
    return [task for task in tasks if term in task.text.lower()]


def _apply_filter(tasks: list[TaskEntity], filter_key: TaskFilter) -> list[TaskEntity]:
    if filter_key == TaskFilter.ACTIVE:
        return [task for task in tasks if not task.completed]
    if filter_key == TaskFilter.COMPLETED:
        return [task for task in tasks if task.completed]
    return tasks


def build_view(tasks: Sequence[TaskEntity], options: ViewOptions) -> list[TaskEntity]:
    """Search, filter, then order ``tasks`` for display.

    Incomplete tasks always precede completed ones; inside each group the
    sort mode decides, and ``order`` breaks whatever ties remain. ``sorted``
    is stable, so equal keys keep their collection order.
    """
    visible = _apply_filter(_apply_search(tasks, options.search), TaskFilter(options.filter_key))
    secondary = _SECONDARY_KEYS[SortMode(options.sort_mode)]
    return sorted(
        visible,
        key=lambda task: (task.completed, *secondary(task), task.order),
    )


def count_tasks(tasks: Sequence[TaskEntity]) -> dict[str, int]:
    completed = sum(1 for task in tasks if task.completed)
    return {
        "total": len(tasks),
        "active": len(tasks) - completed,
        "completed": completed,
    }


def is_overdue(task: TaskEntity, now: int) -> bool:
    return task.due_at is not None and task.due_at < now and not task.completed


def needs_periodic_refresh(tasks: Iterable[TaskEntity]) -> bool:
    """True when overdue markers can change just by time passing."""
    return any(task.due_at is not None and not task.completed for task in tasks)
