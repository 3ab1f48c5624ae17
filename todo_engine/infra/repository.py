from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError

from todo_engine.config import SETTINGS
from todo_engine.domain.entities import TaskEntity
from todo_engine.domain.enums import Theme
from todo_engine.domain.errors import PersistenceError
from todo_engine.domain.normalizer import normalize_tasks

from .db import SessionLocal
from .models import KeyValueModel

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class KeyValueRepository:
    """Durable string blobs keyed by name, one row per key."""

    def __init__(self, session_factory=SessionLocal) -> None:
        self._session_factory = session_factory

    def get(self, key: str) -> str | None:
        try:
            with self._session_factory() as session:
                row = session.get(KeyValueModel, key)
                return row.value if row else None
        except SQLAlchemyError as exc:
            logger.exception("Failed to read key=%s", key)
            raise PersistenceError(f"Could not read {key!r}") from exc

    def set(self, key: str, value: str) -> None:
        try:
            with self._session_factory() as session:
                row = session.get(KeyValueModel, key)
                if row is None:
                    session.add(KeyValueModel(key=key, value=value))
                else:
                    row.value = value
                session.commit()
        except SQLAlchemyError as exc:
            logger.exception("Failed to write key=%s", key)
            raise PersistenceError(f"Could not write {key!r}") from exc


def serialize_records(tasks: Iterable[TaskEntity], indent: int | None = None) -> str:
    return json.dumps([task.to_record() for task in tasks], ensure_ascii=False, indent=indent)


class TaskStore:
    """Authoritative in-memory task list mirrored to one key-value record.

    Writes update memory first; when the backend then fails, memory stays
    authoritative and the caller gets ``PersistenceError``.
    """

    def __init__(self, kv: KeyValueStore | None = None, key: str | None = None) -> None:
        self._kv = kv if kv is not None else KeyValueRepository()
        self._key = key or SETTINGS.storage_key
        self._tasks: list[TaskEntity] = []

    @property
    def tasks(self) -> tuple[TaskEntity, ...]:
        return tuple(self._tasks)

    def load(self) -> list[TaskEntity]:
        raw = self._kv.get(self._key)
        self._tasks = self._decode(raw)
        logger.info("Loaded %s tasks from key=%s", len(self._tasks), self._key)
        return list(self._tasks)

    def save(self, tasks: Iterable[TaskEntity] | None = None) -> None:
        if tasks is not None:
            self._tasks = list(tasks)
        self._kv.set(self._key, serialize_records(self._tasks))

    def replace(self, tasks: Iterable[TaskEntity]) -> None:
        self.save(list(tasks))

    def _decode(self, raw: str | None) -> list[TaskEntity]:
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except (ValueError, RecursionError):
            logger.warning("Stored tasks under key=%s are not valid JSON; starting empty", self._key)
            return []
        if not isinstance(data, list):
            logger.warning("Stored tasks under key=%s are not a list; starting empty", self._key)
            return []
        return normalize_tasks(data)


class ThemePreference:
    def __init__(self, kv: KeyValueStore | None = None, key: str | None = None) -> None:
        self._kv = kv if kv is not None else KeyValueRepository()
        self._key = key or SETTINGS.theme_key

    def load(self) -> Theme:
        return Theme.DARK if self._kv.get(self._key) == Theme.DARK.value else Theme.LIGHT

    def save(self, theme: Theme) -> None:
        self._kv.set(self._key, Theme(theme).value)

    def toggle(self) -> Theme:
        theme = Theme.LIGHT if self.load() == Theme.DARK else Theme.DARK
        self.save(theme)
        return theme
