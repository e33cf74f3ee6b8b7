"""Settings loaded from environment variables (and a local .env if present).

Every variable carries the TODO_PB_ prefix, e.g. TODO_PB_BASE_URL.
Module-level constants mirror the Settings fields for the GUI and scripts.
"""
from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TODO_PB"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    # ---- PocketBase ----
    base_url: str
    identity: str
    password: str
    request_timeout: float
    tasks_collection: str

    # ---- bootstrap (admin) ----
    admin_email: str
    admin_password: str

    # ---- UI ----
    sync_interval_ms: int
    topmost: bool
    window_geometry: str

    # ---- logging ----
    log_level: str
    log_dir: Path

    @staticmethod
    def from_env() -> "Settings":
        return Settings(
            base_url=_env(_k("BASE_URL"), "http://127.0.0.1:8090").rstrip("/"),
            identity=_env(_k("IDENTITY")).strip(),
            password=_env(_k("PASSWORD")),
            request_timeout=_env_float(_k("REQUEST_TIMEOUT"), 10.0),
            tasks_collection=_env(_k("TASKS_COLLECTION"), "tasks"),
            admin_email=_env(_k("ADMIN_EMAIL")).strip(),
            admin_password=_env(_k("ADMIN_PASSWORD")),
            sync_interval_ms=_env_int(_k("SYNC_INTERVAL_MS"), 60_000),
            topmost=_env_bool(_k("TOPMOST"), False),
            window_geometry=_env(_k("WINDOW_GEOMETRY"), "520x640"),
            log_level=_env(_k("LOG_LEVEL"), "INFO").upper(),
            log_dir=Path(_env(_k("LOG_DIR"), ".local/todo_pb")).expanduser(),
        )


SETTINGS = Settings.from_env()

BASE_URL = SETTINGS.base_url
IDENTITY = SETTINGS.identity
PASSWORD = SETTINGS.password
REQUEST_TIMEOUT = SETTINGS.request_timeout
TASKS_COLLECTION = SETTINGS.tasks_collection
SYNC_INTERVAL_MS = SETTINGS.sync_interval_ms  # pull fallback; realtime does most of the work
TOPMOST = SETTINGS.topmost
WINDOW_GEOMETRY = SETTINGS.window_geometry
LOG_LEVEL = SETTINGS.log_level
LOG_DIR = SETTINGS.log_dir
