from __future__ import annotations

import json

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from todo_engine.domain.entities import TaskEntity
from todo_engine.domain.enums import Priority, Theme
from todo_engine.domain.errors import PersistenceError
from todo_engine.infra.repository import KeyValueRepository, TaskStore, ThemePreference

from conftest import FakeKeyValue


def test_key_value_roundtrip(session_factory) -> None:
    repo = KeyValueRepository(session_factory)

    assert repo.get("missing") is None

    repo.set("todos", "[]")
    repo.set("todos", '[{"id": "a"}]')

    assert repo.get("todos") == '[{"id": "a"}]'


def test_backend_failure_raises_persistence_error() -> None:
    engine = create_engine("sqlite://", poolclass=StaticPool)  # no tables created
    repo = KeyValueRepository(sessionmaker(bind=engine))

    with pytest.raises(PersistenceError):
        repo.get("todos")
    with pytest.raises(PersistenceError):
        repo.set("todos", "[]")


def test_task_store_survives_restart(session_factory) -> None:
    task = TaskEntity(id="a", text="Walk", priority=Priority.LOW, due_at=5, order=1, created_at=2)
    TaskStore(KeyValueRepository(session_factory), key="todos").replace([task])

    reopened = TaskStore(KeyValueRepository(session_factory), key="todos")

    assert reopened.tasks == ()
    assert reopened.load() == [task]
    assert reopened.tasks == (task,)


DEEPLY_NESTED = "[" * 200_000 + "]" * 200_000


@pytest.mark.parametrize(
    "blob",
    [None, "", "{not json", '{"id": "a"}', "42", "null", pytest.param(DEEPLY_NESTED, id="deeply-nested")],
)
def test_load_recovers_from_missing_or_corrupt_data(blob) -> None:
    kv = FakeKeyValue({} if blob is None else {"todos": blob})

    assert TaskStore(kv, key="todos").load() == []


def test_load_normalizes_stored_records() -> None:
    kv = FakeKeyValue({"todos": json.dumps([{"id": "a", "text": " x ", "priority": "??"}, "junk"])})

    tasks = TaskStore(kv, key="todos").load()

    assert tasks[0].text == "x"
    assert tasks[0].priority is Priority.MEDIUM
    assert tasks[1].text == ""
    assert len({t.id for t in tasks}) == 2


def test_save_writes_persisted_field_names() -> None:
    kv = FakeKeyValue()
    store = TaskStore(kv, key="todos")

    store.save([TaskEntity(id="a", text="t", due_at=None, order=1, created_at=3)])

    assert json.loads(kv.data["todos"]) == [
        {
            "id": "a",
            "text": "t",
            "completed": False,
            "priority": "medium",
            "dueAt": None,
            "order": 1,
            "createdAt": 3,
        }
    ]


def test_theme_defaults_to_light_and_toggles(session_factory) -> None:
    theme = ThemePreference(KeyValueRepository(session_factory), key="theme")

    assert theme.load() is Theme.LIGHT
    assert theme.toggle() is Theme.DARK
    assert ThemePreference(KeyValueRepository(session_factory), key="theme").load() is Theme.DARK
    assert theme.toggle() is Theme.LIGHT


def test_unknown_theme_value_reads_as_light() -> None:
    assert ThemePreference(FakeKeyValue({"theme": "sepia"}), key="theme").load() is Theme.LIGHT
