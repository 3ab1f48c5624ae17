from __future__ import annotations

from enum import StrEnum


class Priority(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


class TaskFilter(StrEnum):
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"


class SortMode(StrEnum):
    DEFAULT = "default"
    PRIORITY = "priority"
    DUE = "due"
    ALPHA = "alpha"


class Theme(StrEnum):
    LIGHT = "light"
    DARK = "dark"
