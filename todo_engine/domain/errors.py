from __future__ import annotations


class TodoError(Exception):
    """Base class for errors raised by the task engine."""


class ValidationError(TodoError, ValueError):
    """User-correctable input problem, e.g. a blank task text."""


class ImportFormatError(TodoError, ValueError):
    """Import payload is not a JSON array of tasks."""


class PersistenceError(TodoError):
    """The durable key-value store could not be read or written."""
