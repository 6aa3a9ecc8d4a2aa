"""
Data models for the Task Estimation API.

Two layers live here:
- Task / TaskInput: the Store's canonical values (duration in minutes).
- TaskRecord: the SQLModel table used by the persisted store.

Wire schemas are in schemas.py.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel

# Largest value the tasks table can hold in an INTEGER column (signed 64-bit).
MAX_DURATION_MINUTES = 2**63 - 1
MAX_TASK_ID = 2**63 - 1


@dataclass(frozen=True)
class Task:
    """
    A task as returned by the Store.

    Instances are immutable copies; the Store never hands out its own storage.

    Attributes:
        id: Store-assigned identifier, never reused.
        title: Trimmed, non-empty title.
        description: Optional free text. None means "not given".
        duration: Estimated time in minutes.
        created_at: When the task was created (UTC).
        updated_at: When the task was last changed (UTC).
    """

    id: int
    title: str
    description: str | None
    duration: int
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class TaskInput:
    """
    Mutable fields of a task, used for both create and update.

    Values are not trusted: the Store validates them before storing.
    """

    title: Any
    duration: Any
    description: Any = None


class TaskRecord(SQLModel, table=True):
    """Row in the tasks table."""

    __tablename__ = "tasks"
    # Ids must never be reused after deletion.
    __table_args__ = {"sqlite_autoincrement": True}

    id: int | None = Field(default=None, primary_key=True)
    title: str = Field(index=True, max_length=255)
    description: str | None = Field(default=None)
    duration: int = Field(default=0)  # minutes
    created_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
