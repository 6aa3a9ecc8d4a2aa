# tests/test_mapper.py

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from task_api.errors import ErrorKind, TaskError
from task_api.mapper import (
    hours_to_minutes,
    minutes_to_hours,
    parse_task_id,
    parse_task_request,
    to_error_response,
    to_response,
)
from task_api.models import Task
from task_api.schemas import MAX_ESTIMATED_HOURS


@pytest.mark.parametrize(
    ("hours", "minutes"),
    [
        (0, 0),
        (1, 60),
        (2.5, 150),
        (0.0125, 1),  # 0.75 min
        (0.0075, 0),  # 0.45 min
        (0.125, 8),  # 7.5 min rounds up
        (0.375, 23),  # 22.5 min rounds up, not to even
    ],
)
def test_hours_to_minutes(hours: float, minutes: int) -> None:
    assert hours_to_minutes(hours) == minutes


def test_minutes_to_hours() -> None:
    assert minutes_to_hours(90) == 1.5
    assert minutes_to_hours(0) == 0.0


def test_parse_task_id() -> None:
    assert parse_task_id("12") == 12

    with pytest.raises(TaskError) as excinfo:
        parse_task_id("12abc")
    assert excinfo.value.kind is ErrorKind.INVALID_ID


def test_parse_task_request_converts_hours() -> None:
    data = parse_task_request({"title": "A", "description": None, "estimatedTime": 1.25})

    assert data.title == "A"
    assert data.description is None
    assert data.duration == 75


def test_parse_task_request_rejects_non_object() -> None:
    with pytest.raises(TaskError) as excinfo:
        parse_task_request([1, 2])

    assert excinfo.value.fields == {"body": "must be a JSON object"}


def test_parse_task_request_names_wire_fields() -> None:
    with pytest.raises(TaskError) as excinfo:
        parse_task_request({"title": 3, "estimatedTime": "x"})

    assert set(excinfo.value.fields) == {"title", "estimatedTime"}


def test_to_response_uses_hours_and_string_id() -> None:
    ts = datetime(2024, 5, 1, tzinfo=timezone.utc)
    task = Task(id=3, title="T", description="d", duration=45, created_at=ts, updated_at=ts)

    body = to_response(task).model_dump(by_alias=True)

    assert body["id"] == "3"
    assert body["estimatedTime"] == 0.75
    assert body["createdAt"] == ts


def test_to_error_response_renames_duration() -> None:
    err = TaskError.invalid({"duration": "must be at least 0 minutes"})

    body = to_error_response(err, "VALIDATION_ERROR")

    assert body.fields == {"estimatedTime": "must be at least 0 minutes"}
    assert body.message == "estimatedTime: must be at least 0 minutes"
    assert body.code == "VALIDATION_ERROR"


@pytest.mark.parametrize("hours", [MAX_ESTIMATED_HOURS, 1e27, 1e300])
def test_hours_to_minutes_out_of_range_is_invalid(hours: float) -> None:
    with pytest.raises(TaskError) as excinfo:
        hours_to_minutes(hours)

    assert excinfo.value.kind is ErrorKind.INVALID_INPUT
    assert "duration" in excinfo.value.fields


@pytest.mark.parametrize("raw", ["1_0", "+5", " 7 ", "-1", "", "٣", "99999999999999999999"])
def test_parse_task_id_rejects_non_plain_digits(raw: str) -> None:
    with pytest.raises(TaskError) as excinfo:
        parse_task_id(raw)

    assert excinfo.value.kind is ErrorKind.INVALID_ID
