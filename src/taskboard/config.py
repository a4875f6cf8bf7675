# src/taskboard/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time (the store URL/key are only needed
  when the HTTP store is actually built).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

ENV_PREFIX = "TASKBOARD"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path

    # ---- Record store ----
    store_url: Optional[str]
    project_id: Optional[str]
    public_key: Optional[str]
    table_name: str
    connect_timeout_seconds: float
    read_timeout_seconds: float

    # ---- Initial view ----
    default_filter: str
    default_sort: str

    @property
    def store_configured(self) -> bool:
        return bool(self.store_url and self.store_url.strip())

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskboard") or "taskboard"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskboard"))

        # Accept the vendor-style names too, so an existing .env keeps working.
        store_url = _first_env(_k("STORE_URL"), "APPER_STORE_URL", default=None)
        project_id = _first_env(_k("PROJECT_ID"), "APPER_PROJECT_ID", default=None)
        public_key = _first_env(_k("PUBLIC_KEY"), "APPER_PUBLIC_KEY", default=None)
        table_name = _env(_k("TABLE_NAME"), "task1").strip() or "task1"

        connect_timeout_seconds = _env_float(_k("CONNECT_TIMEOUT_SECONDS"), 5.0)
        read_timeout_seconds = _env_float(_k("READ_TIMEOUT_SECONDS"), 25.0)

        default_filter = _env(_k("DEFAULT_FILTER"), "all").strip() or "all"
        default_sort = _env(_k("DEFAULT_SORT"), "dueDate").strip() or "dueDate"

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            store_url=(store_url or "").strip() or None,
            project_id=(project_id or "").strip() or None,
            public_key=(public_key or "").strip() or None,
            table_name=table_name,
            connect_timeout_seconds=connect_timeout_seconds,
            read_timeout_seconds=max(read_timeout_seconds, connect_timeout_seconds),
            default_filter=default_filter,
            default_sort=default_sort,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
