# src/taskgrid/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing required at import time; every value has a local-dev default.
- The app wires Settings explicitly into AppState (see cli/bootstrap.py).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKGRID"

LAYOUT_STRATEGIES = ("pairwise", "sweep")

# Real environment variables always win over .env values.
load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


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


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def _env_choice(name: str, default: str, choices: tuple[str, ...]) -> str:
    raw = _env(name, default).strip().lower()
    return raw if raw in choices else default


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    log_dir: Path

    # ---- Remote API ----
    api_base_url: str
    api_timeout_seconds: float
    api_connect_timeout_seconds: float

    # ---- Layout / calendar ----
    layout_strategy: str
    week_starts_on: int

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskgrid").strip() or "taskgrid"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        log_dir = _env_path(_k("LOG_DIR"), Path(".local/taskgrid"))

        api_base_url = _env(_k("API_BASE_URL"), "http://127.0.0.1:3000").strip().rstrip("/")

        # keep the overall timeout >= connect timeout
        api_connect_timeout_seconds = max(0.1, _env_float(_k("API_CONNECT_TIMEOUT_SECONDS"), 5.0))
        api_timeout_seconds = max(
            api_connect_timeout_seconds,
            _env_float(_k("API_TIMEOUT_SECONDS"), 10.0),
        )

        layout_strategy = _env_choice(_k("LAYOUT_STRATEGY"), "pairwise", LAYOUT_STRATEGIES)

        # 0 = Monday ... 6 = Sunday (datetime.weekday() convention)
        week_starts_on = _env_int(_k("WEEK_STARTS_ON"), 0) % 7

        return Settings(
            app_name=app_name,
            log_level=log_level,
            log_dir=log_dir,
            api_base_url=api_base_url,
            api_timeout_seconds=api_timeout_seconds,
            api_connect_timeout_seconds=api_connect_timeout_seconds,
            layout_strategy=layout_strategy,
            week_starts_on=week_starts_on,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
