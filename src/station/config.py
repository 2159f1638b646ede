# src/station/config.py

"""Process settings loaded from environment variables (+ optional .env).

These are deployment knobs (paths, log level, tick cadence). User-facing
dashboard preferences live in station.preferences and are persisted with the
rest of the app state.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "STATION"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


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


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def _env_optional_path(name: str) -> Path | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    state_path: Path

    # ---- Calendar ----
    ics_path: Path | None
    calendar_window_days: int

    # ---- Ticker ----
    tick_seconds: int

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "station") or "station"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/station"))
        state_path = _env_path(_k("STATE_PATH"), data_dir / "state.json")

        ics_path = _env_optional_path(_k("ICS_PATH"))
        calendar_window_days = max(1, _env_int(_k("CALENDAR_WINDOW_DAYS"), 30))

        tick_seconds = max(1, _env_int(_k("TICK_SECONDS"), 60))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            state_path=state_path,
            ics_path=ics_path,
            calendar_window_days=calendar_window_days,
            tick_seconds=tick_seconds,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
