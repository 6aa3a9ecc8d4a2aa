"""
Persisted Task Store on SQLModel.

Same contract as TaskStore. Each operation runs in its own session and a
single short transaction. Mutations are serialized through a ReadWriteLock so
SQLite never sees two writers at once.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime, timezone

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, create_engine, func, select

from .errors import TaskError
from .models import Task, TaskInput, TaskRecord
from .store import ReadWriteLock, utcnow, validate_task_input

logger = logging.getLogger(__name__)


def make_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine; SQLite connections are shared across request threads."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(database_url, echo=echo, connect_args=connect_args)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything stored is UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_task(record: TaskRecord) -> Task:
    return Task(
        id=int(record.id),
        title=record.title,
        description=record.description,
        duration=int(record.duration),
        created_at=_as_utc(record.created_at),
        updated_at=_as_utc(record.updated_at),
    )


class SQLTaskStore:
    """
    Task Store backed by a relational table.

    Args:
        engine: Engine or database URL.
        min_duration: Smallest accepted duration in minutes.
        max_duration: Largest accepted duration in minutes, None for no limit.
        clock: Source of timestamps.
    """

    def __init__(
        self,
        engine: Engine | str,
        *,
        min_duration: int = 0,
        max_duration: int | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._engine = make_engine(engine) if isinstance(engine, str) else engine
        self.min_duration = min_duration
        self.max_duration = max_duration
        self._clock = clock
        self._lock = ReadWriteLock()
        SQLModel.metadata.create_all(self._engine)
        logger.info("SQLTaskStore ready url=%s", self._engine.url.render_as_string(hide_password=True))

    def close(self) -> None:
        self._engine.dispose()

    @contextmanager
    def _session(self) -> Iterator[Session]:
        session = Session(self._engine)
        try:
            yield session
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("Database error in task store")
            raise TaskError.internal() from exc
        finally:
            session.close()

    def _validate(self, data: TaskInput) -> TaskInput:
        return validate_task_input(
            data, min_duration=self.min_duration, max_duration=self.max_duration
        )

    def list_all(self) -> list[Task]:
        with self._lock.read(), self._session() as session:
            records = session.exec(select(TaskRecord).order_by(TaskRecord.id)).all()
            return [_to_task(r) for r in records]

    def count(self) -> int:
        with self._lock.read(), self._session() as session:
            return int(session.exec(select(func.count()).select_from(TaskRecord)).one())

    def get(self, task_id: int) -> Task:
        with self._lock.read(), self._session() as session:
            record = session.get(TaskRecord, task_id)
            if record is None:
                raise TaskError.not_found(task_id)
            return _to_task(record)

    def create(self, data: TaskInput) -> Task:
        clean = self._validate(data)
        with self._lock.write(), self._session() as session:
            now = self._clock()
            record = TaskRecord(
                title=clean.title,
                description=clean.description,
                duration=clean.duration,
                created_at=now,
                updated_at=now,
            )
            session.add(record)
            session.commit()
            session.refresh(record)
            task = _to_task(record)
        logger.info("Task created id=%s duration=%s", task.id, task.duration)
        return task

    def update(self, task_id: int, data: TaskInput) -> Task:
        with self._lock.write(), self._session() as session:
            record = session.get(TaskRecord, task_id)
            if record is None:
                raise TaskError.not_found(task_id)
            clean = self._validate(data)

            record.title = clean.title
            record.description = clean.description
            record.duration = clean.duration
            record.updated_at = max(self._clock(), _as_utc(record.updated_at))
            session.add(record)
            session.commit()
            session.refresh(record)
            task = _to_task(record)
        logger.info("Task updated id=%s duration=%s", task_id, task.duration)
        return task

    def delete(self, task_id: int) -> None:
        with self._lock.write(), self._session() as session:
            record = session.get(TaskRecord, task_id)
            if record is None:
                raise TaskError.not_found(task_id)
            session.delete(record)
            session.commit()
        logger.info("Task deleted id=%s", task_id)
