"""
FastAPI application for the Task Estimation API.

This module:
- Builds the configured task store and injects it into the app
- Exposes CRUD endpoints under /api/tasks and health probes under /api/health
- Maps store errors to HTTP responses through a single lookup table
"""

import json
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from .config import Settings, get_settings
from .errors import ErrorKind, TaskError
from .mapper import parse_task_id, parse_task_request, to_error_response, to_response
from .models import Task
from .schemas import ErrorResponse, HealthResponse, TaskResponse
from .sql_store import SQLTaskStore
from .store import TaskRepository, TaskStore

logger = logging.getLogger(__name__)

# ErrorKind -> (HTTP status, error code)
ERROR_STATUS = {
    ErrorKind.NOT_FOUND: (404, "TASK_NOT_FOUND"),
    ErrorKind.INVALID_INPUT: (400, "VALIDATION_ERROR"),
    ErrorKind.INVALID_ID: (400, "INVALID_ID_FORMAT"),
    ErrorKind.INTERNAL: (500, "INTERNAL_ERROR"),
}


def build_store(settings: Settings) -> TaskRepository:
    """Construct the store backend named in settings."""
    if settings.store == "sql":
        return SQLTaskStore(
            settings.database_url,
            min_duration=settings.min_duration,
            max_duration=settings.max_duration,
        )
    return TaskStore(min_duration=settings.min_duration, max_duration=settings.max_duration)


def get_store(request: Request) -> TaskRepository:
    """Dependency returning the store injected at startup."""
    return request.app.state.store


async def read_json(request: Request) -> Any:
    """Decode the request body; malformed or empty bodies come back as None."""
    body = await request.body()
    if not body:
        return None
    try:
        return json.loads(body)
    except ValueError:
        logger.debug("Malformed JSON body on %s %s", request.method, request.url.path)
        return None


def replace_task(store: TaskRepository, task_id: int, payload: Any) -> Task:
    """Full replacement of a task. A missing task outranks a bad payload."""
    try:
        data = parse_task_request(payload)
    except TaskError:
        store.get(task_id)
        raise
    return store.update(task_id, data)


tasks_router = APIRouter(prefix="/api/tasks", tags=["tasks"])
health_router = APIRouter(prefix="/api/health", tags=["health"])


@tasks_router.get("", response_model=list[TaskResponse])
def list_tasks(store: TaskRepository = Depends(get_store)):
    """Get all tasks."""
    tasks = store.list_all()
    logger.debug("Found %d task(s)", len(tasks))
    return [to_response(t) for t in tasks]


@tasks_router.get(
    "/{task_id}",
    response_model=TaskResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def get_task(task_id: str, store: TaskRepository = Depends(get_store)):
    """Get a single task."""
    return to_response(store.get(parse_task_id(task_id)))


@tasks_router.post(
    "",
    response_model=TaskResponse,
    status_code=201,
    responses={400: {"model": ErrorResponse}},
)
async def create_task(request: Request, store: TaskRepository = Depends(get_store)):
    """Create a task from {title, description?, estimatedTime}."""
    payload = await read_json(request)
    data = parse_task_request(payload)
    task = await run_in_threadpool(store.create, data)
    return to_response(task)


@tasks_router.put(
    "/{task_id}",
    response_model=TaskResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_task(task_id: str, request: Request, store: TaskRepository = Depends(get_store)):
    """Replace every mutable field of a task."""
    tid = parse_task_id(task_id)
    payload = await read_json(request)
    task = await run_in_threadpool(replace_task, store, tid, payload)
    return to_response(task)


@tasks_router.delete(
    "/{task_id}",
    status_code=204,
    response_class=Response,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def delete_task(task_id: str, store: TaskRepository = Depends(get_store)):
    """Delete a task."""
    store.delete(parse_task_id(task_id))
    return Response(status_code=204)


def _now() -> datetime:
    return datetime.now(timezone.utc)


@health_router.get("", response_model=HealthResponse, response_model_exclude_none=True)
def health():
    """Health check endpoint."""
    return HealthResponse(status="UP", timestamp=_now())


@health_router.get("/ready", response_model=HealthResponse)
def ready(store: TaskRepository = Depends(get_store)):
    """Readiness: the store answers queries."""
    return HealthResponse(status="READY", timestamp=_now(), tasks=store.count())


@health_router.get("/live", response_model=HealthResponse, response_model_exclude_none=True)
def live():
    """Liveness: the process is serving requests."""
    return HealthResponse(status="ALIVE", timestamp=_now())


async def handle_task_error(request: Request, exc: TaskError) -> JSONResponse:
    status, code = ERROR_STATUS[exc.kind]
    if exc.kind is ErrorKind.INTERNAL:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.warning("%s %s -> %s: %s", request.method, request.url.path, code, exc.message)
    body = to_error_response(exc, code)
    return JSONResponse(status_code=status, content=body.model_dump(exclude_none=True))


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unexpected error on %s %s", request.method, request.url.path)
    body = ErrorResponse(message="An unexpected error occurred", code="INTERNAL_ERROR")
    return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))


def create_app(store: TaskRepository | None = None, settings: Settings | None = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        store: Store to serve. Built from settings when omitted.
        settings: Settings used when no store is given. Read from the
            environment when omitted.

    Returns:
        Configured FastAPI app.
    """
    if store is None:
        store = build_store(settings or get_settings())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan - release the store on shutdown."""
        total = await run_in_threadpool(store.count)
        logger.info("Serving %s with %d task(s)", type(store).__name__, total)
        yield
        await run_in_threadpool(store.close)

    app = FastAPI(
        title="Task Estimation API",
        description="Create, read, update and delete task estimates",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.store = store
    app.include_router(tasks_router)
    app.include_router(health_router)
    app.add_exception_handler(TaskError, handle_task_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
    return app
