# tests/test_config.py

from __future__ import annotations

from pathlib import Path

import pytest

from task_api.config import get_settings
from task_api.main import build_store
from task_api.sql_store import SQLTaskStore
from task_api.store import TaskStore


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for suffix in ("STORE", "DATABASE_URL", "HOST", "PORT", "LOG_LEVEL", "MIN_DURATION", "MAX_DURATION"):
        monkeypatch.delenv(f"TASK_API_{suffix}", raising=False)


def test_defaults() -> None:
    settings = get_settings(load_env_file=False)

    assert settings.store == "memory"
    assert settings.port == 8080
    assert settings.log_level == "INFO"
    assert settings.min_duration == 0
    assert settings.max_duration is None


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TASK_API_STORE", "SQL")
    monkeypatch.setenv("TASK_API_PORT", "9000")
    monkeypatch.setenv("TASK_API_MIN_DURATION", "1")
    monkeypatch.setenv("TASK_API_MAX_DURATION", "10080")
    monkeypatch.setenv("TASK_API_LOG_LEVEL", "debug")

    settings = get_settings(load_env_file=False)

    assert settings.store == "sql"
    assert settings.port == 9000
    assert settings.min_duration == 1
    assert settings.max_duration == 10080
    assert settings.log_level == "DEBUG"


def test_bad_numbers_fall_back_to_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TASK_API_PORT", "eighty")
    monkeypatch.setenv("TASK_API_MAX_DURATION", "lots")

    settings = get_settings(load_env_file=False)

    assert settings.port == 8080
    assert settings.max_duration is None


def test_unknown_store_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TASK_API_STORE", "redis")

    with pytest.raises(ValueError):
        get_settings(load_env_file=False)


def test_build_store_picks_backend(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TASK_API_MAX_DURATION", "10080")
    memory = build_store(get_settings(load_env_file=False))
    assert isinstance(memory, TaskStore)
    assert memory.max_duration == 10080

    monkeypatch.setenv("TASK_API_STORE", "sql")
    monkeypatch.setenv("TASK_API_DATABASE_URL", f"sqlite:///{tmp_path / 'cfg.sqlite3'}")
    sql = build_store(get_settings(load_env_file=False))
    try:
        assert isinstance(sql, SQLTaskStore)
        assert sql.count() == 0
    finally:
        sql.close()
