from __future__ import annotations

from dataclasses import dataclass

from .enums import SortMode, TaskFilter


@dataclass(frozen=True)
class ViewOptions:
    filter_key: TaskFilter | str = TaskFilter.ALL
    sort_mode: SortMode | str = SortMode.DEFAULT
    search: str | None = None

    def __post_init__(self) -> None:
        # Unknown keys raise ValueError from the enum constructors.
        object.__setattr__(self, "filter_key", TaskFilter(self.filter_key))
        object.__setattr__(self, "sort_mode", SortMode(self.sort_mode))
