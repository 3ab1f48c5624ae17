from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace

from .entities import TaskEntity


def reconcile_order(tasks: Sequence[TaskEntity], task_ids: Sequence[str]) -> list[TaskEntity]:
    """Rewrite ``order`` to follow the on-screen position of ``task_ids``.

    Position ``i`` becomes ``order = i + 1``. Tasks missing from ``task_ids``
    (filtered out of the view) keep their previous order. Unknown ids still
    occupy their position. A repeated id counts at its first position only.
    """
    positions = dict.fromkeys(task_ids)
    order_map = {task_id: index for index, task_id in enumerate(positions, start=1)}
    return [
        replace(task, order=order_map[task.id]) if task.id in order_map else task
        for task in tasks
    ]
