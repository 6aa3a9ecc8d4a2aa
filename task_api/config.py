"""
Settings loaded from environment variables (+ optional .env).

Every variable is prefixed with TASK_API_.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

ENV_PREFIX = "TASK_API"

STORE_BACKENDS = ("memory", "sql")


def _k(suffix: str) -> str:
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str) -> str:
    value = os.getenv(name)
    return default if value is None or value.strip() == "" else value.strip()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_optional_int(name: str) -> int | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError:
        return None


@dataclass(frozen=True)
class Settings:
    store: str
    database_url: str
    host: str
    port: int
    log_level: str
    min_duration: int
    max_duration: int | None


def get_settings(load_env_file: bool = True) -> Settings:
    """
    Read settings from the environment.

    Args:
        load_env_file: Read .env first (existing variables win).

    Returns:
        Settings instance.

    Raises:
        ValueError: If TASK_API_STORE names an unknown backend.
    """
    if load_env_file:
        load_dotenv(override=False)

    store = _env(_k("STORE"), "memory").lower()
    if store not in STORE_BACKENDS:
        raise ValueError(f"{_k('STORE')} must be one of {STORE_BACKENDS}, got {store!r}")

    return Settings(
        store=store,
        database_url=_env(_k("DATABASE_URL"), "sqlite:///./task_api.db"),
        host=_env(_k("HOST"), "0.0.0.0"),
        port=_env_int(_k("PORT"), 8080),
        log_level=_env(_k("LOG_LEVEL"), "INFO").upper(),
        min_duration=_env_int(_k("MIN_DURATION"), 0),
        max_duration=_env_optional_int(_k("MAX_DURATION")),
    )
