"""
Task Estimation API: a task store with an HTTP adapter.
"""

from .errors import ErrorKind, TaskError
from .models import Task, TaskInput
from .sql_store import SQLTaskStore
from .store import TaskStore

__all__ = ["ErrorKind", "SQLTaskStore", "Task", "TaskError", "TaskInput", "TaskStore"]
