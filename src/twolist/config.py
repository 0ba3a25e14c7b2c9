# src/twolist/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Nothing required at import time; every value has a default.
- Local overrides via an optional, gitignored config_local.py.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import time
from pathlib import Path

logger = logging.getLogger(__name__)

ENV_PREFIX = "TWOLIST"

DEFAULT_REMINDER_TIMES = ["09:00", "20:00"]


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


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_list(name: str, default: list[str]) -> list[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [p.strip() for p in raw.replace(",", " ").split() if p.strip()]


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def parse_times(raw: list[str]) -> list[time]:
    """Parse "HH:MM" strings; invalid entries are skipped."""
    out: list[time] = []
    for value in raw:
        try:
            hh, mm = value.split(":", 1)
            out.append(time(hour=int(hh), minute=int(mm)))
        except ValueError:
            logger.warning("Ignoring invalid reminder time %r", value)
    return out


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Front-ends ----
    console_enabled: bool
    ticker_enabled: bool

    # ---- Engine timing ----
    tick_interval_seconds: float
    save_debounce_seconds: float
    daily_reminder_times: list[time]

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    state_path: Path

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "twolist") or "twolist"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)
        ticker_enabled = _env_bool(_k("TICKER_ENABLED"), True)

        tick_interval_seconds = max(1.0, _env_float(_k("TICK_INTERVAL_SECONDS"), 60.0))
        save_debounce_seconds = max(0.0, _env_float(_k("SAVE_DEBOUNCE_SECONDS"), 0.3))
        daily_reminder_times = parse_times(
            _env_list(_k("DAILY_REMINDER_TIMES"), DEFAULT_REMINDER_TIMES)
        ) or parse_times(DEFAULT_REMINDER_TIMES)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/twolist"))
        state_path = _env_path(_k("STATE_PATH"), data_dir / "state.json")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            console_enabled=console_enabled,
            ticker_enabled=ticker_enabled,
            tick_interval_seconds=tick_interval_seconds,
            save_debounce_seconds=save_debounce_seconds,
            daily_reminder_times=daily_reminder_times,
            data_dir=data_dir,
            state_path=state_path,
        )


SETTINGS = Settings.from_env()

# ---- Optional local overrides (never committed) ----
try:
    import config_local as _config_local  # type: ignore

    # Simple overrides for selected names. Keep it explicit.
    if hasattr(_config_local, "CONSOLE_ENABLED"):
        object.__setattr__(SETTINGS, "console_enabled", bool(_config_local.CONSOLE_ENABLED))  # type: ignore[misc]
    if hasattr(_config_local, "TICKER_ENABLED"):
        object.__setattr__(SETTINGS, "ticker_enabled", bool(_config_local.TICKER_ENABLED))  # type: ignore[misc]
    if hasattr(_config_local, "DAILY_REMINDER_TIMES"):
        object.__setattr__(  # type: ignore[misc]
            SETTINGS, "daily_reminder_times", parse_times(list(_config_local.DAILY_REMINDER_TIMES))
        )
except ImportError:
    pass


def get_settings() -> Settings:
    return SETTINGS
