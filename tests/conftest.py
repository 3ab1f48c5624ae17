from __future__ import annotations

import itertools
import os

# Keep the default engine off the developer's database file.
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from todo_engine.domain.errors import PersistenceError
from todo_engine.infra.db import init_db
from todo_engine.infra.repository import TaskStore
from todo_engine.services.task_service import TaskService

BASE_TIME = 1_700_000_000_000


class FakeKeyValue:
    def __init__(self, data: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(data or {})
        self.writes = 0

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value
        self.writes += 1


class BrokenKeyValue(FakeKeyValue):
    def set(self, key: str, value: str) -> None:
        raise PersistenceError(f"Could not write {key!r}")


class FakeClock:
    def __init__(self, start: int = BASE_TIME) -> None:
        self.now = start

    def __call__(self) -> int:
        self.now += 1
        return self.now


@pytest.fixture()
def kv() -> FakeKeyValue:
    return FakeKeyValue()


@pytest.fixture()
def store(kv: FakeKeyValue) -> TaskStore:
    return TaskStore(kv, key="todos")


@pytest.fixture()
def service(store: TaskStore) -> TaskService:
    ids = itertools.count(1)
    return TaskService(store, clock=FakeClock(), id_factory=lambda: f"t{next(ids)}")


@pytest.fixture()
def broken_service() -> TaskService:
    ids = itertools.count(1)
    store = TaskStore(BrokenKeyValue(), key="todos")
    return TaskService(store, clock=FakeClock(), id_factory=lambda: f"t{next(ids)}")


@pytest.fixture()
def sql_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(sql_engine):
    return sessionmaker(bind=sql_engine, autoflush=False, autocommit=False)
