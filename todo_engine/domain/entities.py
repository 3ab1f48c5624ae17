from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from .enums import Priority


def now_ms() -> int:
    return int(time.time() * 1000)


def new_task_id() -> str:
    return uuid.uuid4().hex


def datetime_to_ms(value: datetime) -> int:
    """Epoch milliseconds for ``value``; naive datetimes are read as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp() * 1000)


@dataclass(frozen=True)
class TaskEntity:
    id: str
    text: str
    completed: bool = False
    priority: Priority = Priority.MEDIUM
    due_at: Optional[int] = None
    order: int | float = 0
    created_at: int = 0

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "completed": self.completed,
            "priority": self.priority.value,
            "dueAt": self.due_at,
            "order": self.order,
            "createdAt": self.created_at,
        }
