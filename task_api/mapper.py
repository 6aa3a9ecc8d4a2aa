"""
Translation between the wire schemas and the Store's values.

The Store keeps durations in whole minutes. The API speaks hours, so the
conversion happens here and only here:
- read:  hours = minutes / 60.0
- write: minutes = round_half_up(hours * 60)
"""

import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from pydantic import ValidationError

from .errors import TaskError
from .models import MAX_DURATION_MINUTES, MAX_TASK_ID, Task, TaskInput
from .schemas import ErrorResponse, TaskRequest, TaskResponse

MINUTES_PER_HOUR = 60.0

# Store field name -> wire field name
WIRE_FIELDS = {
    "title": "title",
    "description": "description",
    "duration": "estimatedTime",
}


def hours_to_minutes(hours: float) -> int:
    """
    Convert hours to whole minutes, rounding halves up.

    Raises:
        TaskError: INVALID_INPUT when the result does not fit a stored duration.
    """
    minutes = hours * MINUTES_PER_HOUR
    if not math.isfinite(minutes) or abs(minutes) > MAX_DURATION_MINUTES:
        raise TaskError.invalid({"duration": f"must be at most {MAX_DURATION_MINUTES} minutes"})
    try:
        return int(Decimal(repr(minutes)).quantize(Decimal(1), rounding=ROUND_HALF_UP))
    except (InvalidOperation, OverflowError, ValueError):
        raise TaskError.invalid({"duration": "is not a valid number of minutes"}) from None


def minutes_to_hours(minutes: int) -> float:
    return minutes / MINUTES_PER_HOUR


def parse_task_id(raw: str) -> int:
    """
    Parse a task id taken from the URL path.

    Only plain ASCII digits are accepted ("1_0", "+5", " 7 " are rejected).

    Raises:
        TaskError: INVALID_ID when the value is not an unsigned integer.
    """
    if not isinstance(raw, str) or not (raw.isascii() and raw.isdigit()):
        raise TaskError.invalid_id(raw)
    task_id = int(raw)
    if task_id > MAX_TASK_ID:
        raise TaskError.invalid_id(raw)
    return task_id


def parse_task_request(payload: Any) -> TaskInput:
    """
    Validate a JSON payload and turn it into Store input.

    Raises:
        TaskError: INVALID_INPUT naming the offending wire fields.
    """
    if not isinstance(payload, dict):
        raise TaskError.invalid({"body": "must be a JSON object"})

    try:
        request = TaskRequest.model_validate(payload)
    except ValidationError as exc:
        fields: dict[str, str] = {}
        for error in exc.errors():
            name = ".".join(str(part) for part in error["loc"]) or "body"
            fields.setdefault(name, error["msg"])
        raise TaskError.invalid(fields) from None

    return TaskInput(
        title=request.title,
        description=request.description,
        duration=hours_to_minutes(request.estimated_time),
    )


def to_response(task: Task) -> TaskResponse:
    return TaskResponse(
        id=str(task.id),
        title=task.title,
        description=task.description,
        estimated_time=minutes_to_hours(task.duration),
        created_at=task.created_at,
        updated_at=task.updated_at,
    )


def to_error_response(error: TaskError, code: str | None = None) -> ErrorResponse:
    """Build the error body, renaming Store fields to their wire names."""
    if not error.fields:
        return ErrorResponse(message=error.message, code=code)

    fields = {WIRE_FIELDS.get(name, name): reason for name, reason in error.fields.items()}
    message = ", ".join(f"{name}: {reason}" for name, reason in fields.items())
    return ErrorResponse(message=message, code=code, fields=fields)
