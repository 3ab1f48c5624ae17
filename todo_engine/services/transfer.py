"""JSON export/import documents for the task list."""
from __future__ import annotations

import json
from collections.abc import Iterable
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

from todo_engine.domain.entities import TaskEntity
from todo_engine.domain.errors import ImportFormatError
from todo_engine.infra.repository import serialize_records

EXPORT_INDENT = 2


def serialize_tasks(tasks: Iterable[TaskEntity]) -> str:
    return serialize_records(tasks, indent=EXPORT_INDENT)


def export_filename(today: date | None = None) -> str:
    today = today or datetime.now(timezone.utc).date()
    return f"todos-{today.isoformat()}.json"


def write_export(tasks: Iterable[TaskEntity], directory: str | Path, today: date | None = None) -> Path:
    target_dir = Path(directory)
    target_dir.mkdir(parents=True, exist_ok=True)
    path = target_dir / export_filename(today)
    path.write_text(serialize_tasks(tasks), encoding="utf-8")
    return path


def parse_import(payload: str | bytes) -> Any:
    try:
        return json.loads(payload)
    except (ValueError, RecursionError) as exc:
        raise ImportFormatError("Import failed: invalid file.") from exc


def read_import_file(path: str | Path) -> Any:
    try:
        payload = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ImportFormatError(f"Import failed: cannot read {path}.") from exc
    return parse_import(payload)
