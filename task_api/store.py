"""
In-memory Task Store.

The store owns the canonical collection of tasks and is the only code that
allocates ids. Every mutation goes through it and is validated here.

Thread-safety:
- one ReadWriteLock guards the whole collection
- list_all/get/count run concurrently under the read side
- create/update/delete are serialized under the write side
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timezone
from typing import Protocol

from .errors import TaskError
from .models import MAX_DURATION_MINUTES, Task, TaskInput

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 255


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TaskRepository(Protocol):
    """Contract shared by every Store backend."""

    def list_all(self) -> list[Task]: ...

    def create(self, data: TaskInput) -> Task: ...

    def get(self, task_id: int) -> Task: ...

    def update(self, task_id: int, data: TaskInput) -> Task: ...

    def delete(self, task_id: int) -> None: ...

    def count(self) -> int: ...

    def close(self) -> None: ...


class ReadWriteLock:
    """
    Many readers or one writer.

    Waiting writers block new readers so a steady stream of reads cannot
    starve mutations. Not reentrant.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


def validate_task_input(
    data: TaskInput,
    *,
    min_duration: int = 0,
    max_duration: int | None = None,
) -> TaskInput:
    """
    Check every field of a create/update payload.

    Args:
        data: Untrusted input.
        min_duration: Smallest accepted duration in minutes.
        max_duration: Largest accepted duration in minutes, None for no limit.

    Returns:
        A cleaned copy (title trimmed).

    Raises:
        TaskError: INVALID_INPUT naming every offending field.
    """
    errors: dict[str, str] = {}

    title = data.title
    if title is None:
        errors["title"] = "is required"
    elif not isinstance(title, str):
        errors["title"] = "must be a string"
    else:
        title = title.strip()
        if not title:
            errors["title"] = "must not be blank"
        elif len(title) > TITLE_MAX_LENGTH:
            errors["title"] = f"must be at most {TITLE_MAX_LENGTH} characters"

    description = data.description
    if description is not None and not isinstance(description, str):
        errors["description"] = "must be a string"

    duration = data.duration
    if duration is None:
        errors["duration"] = "is required"
    elif isinstance(duration, bool) or not isinstance(duration, int):
        errors["duration"] = "must be a whole number of minutes"
    elif duration < min_duration:
        errors["duration"] = f"must be at least {min_duration} minutes"
    elif max_duration is not None and duration > max_duration:
        errors["duration"] = f"must be at most {max_duration} minutes"
    elif duration > MAX_DURATION_MINUTES:
        errors["duration"] = f"must be at most {MAX_DURATION_MINUTES} minutes"

    if errors:
        raise TaskError.invalid(errors)

    return TaskInput(title=title, duration=duration, description=description)


class TaskStore:
    """
    Task Store backed by a dict.

    Tasks are frozen dataclasses, so the values handed to callers can never
    alias mutable internal state.
    """

    def __init__(
        self,
        *,
        min_duration: int = 0,
        max_duration: int | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.min_duration = min_duration
        self.max_duration = max_duration
        self._clock = clock
        self._tasks: dict[int, Task] = {}
        self._next_id = 1
        self._lock = ReadWriteLock()

    def close(self) -> None:
        """Nothing to release; present for parity with SQLTaskStore."""
        return

    def _validate(self, data: TaskInput) -> TaskInput:
        return validate_task_input(
            data, min_duration=self.min_duration, max_duration=self.max_duration
        )

    def list_all(self) -> list[Task]:
        with self._lock.read():
            return list(self._tasks.values())

    def count(self) -> int:
        with self._lock.read():
            return len(self._tasks)

    def get(self, task_id: int) -> Task:
        with self._lock.read():
            task = self._tasks.get(task_id)
        if task is None:
            raise TaskError.not_found(task_id)
        logger.debug("Task read id=%s", task_id)
        return task

    def create(self, data: TaskInput) -> Task:
        clean = self._validate(data)
        with self._lock.write():
            now = self._clock()
            task = Task(
                id=self._next_id,
                title=clean.title,
                description=clean.description,
                duration=clean.duration,
                created_at=now,
                updated_at=now,
            )
            self._tasks[task.id] = task
            self._next_id += 1
        logger.info("Task created id=%s duration=%s", task.id, task.duration)
        return task

    def update(self, task_id: int, data: TaskInput) -> Task:
        with self._lock.write():
            current = self._tasks.get(task_id)
            if current is None:
                raise TaskError.not_found(task_id)
            clean = self._validate(data)
            task = replace(
                current,
                title=clean.title,
                description=clean.description,
                duration=clean.duration,
                updated_at=max(self._clock(), current.updated_at),
            )
            self._tasks[task_id] = task
        logger.info("Task updated id=%s duration=%s", task_id, task.duration)
        return task

    def delete(self, task_id: int) -> None:
        with self._lock.write():
            if self._tasks.pop(task_id, None) is None:
                raise TaskError.not_found(task_id)
        logger.info("Task deleted id=%s", task_id)
