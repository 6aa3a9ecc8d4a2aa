"""
Error type shared by the Task Store and the HTTP adapter.
"""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Discriminates the failures a Store operation can report."""

    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"
    INVALID_ID = "invalid_id"
    INTERNAL = "internal"


class TaskError(Exception):
    """
    Failure raised by Store operations and request parsing.

    Attributes:
        kind: Which failure this is.
        message: Human-readable description.
        fields: For INVALID_INPUT, offending field name -> reason.
        task_id: For NOT_FOUND, the id that was looked up.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        fields: dict[str, str] | None = None,
        task_id: Any = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.fields = dict(fields or {})
        self.task_id = task_id

    @classmethod
    def not_found(cls, task_id: Any) -> "TaskError":
        return cls(ErrorKind.NOT_FOUND, f"Task not found with id: {task_id}", task_id=task_id)

    @classmethod
    def invalid(cls, fields: dict[str, str]) -> "TaskError":
        message = ", ".join(f"{name}: {reason}" for name, reason in fields.items())
        return cls(ErrorKind.INVALID_INPUT, message or "Invalid input", fields=fields)

    @classmethod
    def invalid_id(cls, raw: str) -> "TaskError":
        return cls(ErrorKind.INVALID_ID, f"Invalid ID format: {raw!r}")

    @classmethod
    def internal(cls) -> "TaskError":
        return cls(ErrorKind.INTERNAL, "An unexpected error occurred")

    def __repr__(self) -> str:
        return f"TaskError({self.kind.value!r}, {self.message!r})"
