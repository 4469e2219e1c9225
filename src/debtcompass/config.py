"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "DebtCompass"
    DB_FILENAME = "debtcompass.db"

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("DEBTCOMPASS_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("DEBTCOMPASS_DATABASE_URL", self._build_sqlite_url())
        self.DEFAULT_STRATEGY = os.getenv("DEBTCOMPASS_DEFAULT_STRATEGY", "snowball").lower()
        self.REMINDER_DAYS_BEFORE = _env_int("DEBTCOMPASS_REMINDER_DAYS_BEFORE", 3)
        self.REMINDER_HOUR = _env_int("DEBTCOMPASS_REMINDER_HOUR", 9)
        if self.REMINDER_DAYS_BEFORE < 0:
            raise ValueError("DEBTCOMPASS_REMINDER_DAYS_BEFORE cannot be negative.")
        if not 0 <= self.REMINDER_HOUR <= 23:
            raise ValueError("DEBTCOMPASS_REMINDER_HOUR must be between 0 and 23.")

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv("DEBTCOMPASS_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        return f"sqlite:///{self.DATA_DIR / self.DB_FILENAME}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        if self.DATABASE_URL.startswith("sqlite"):
            return {"connect_args": {"check_same_thread": False}}
        return {}


class TestingConfig(BaseConfig):
    """Configuration for automated tests using an in-memory database."""

    DEBUG = False
    TESTING = True

    def __init__(self) -> None:
        super().__init__()
        self.DATABASE_URL = "sqlite://"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        from sqlalchemy.pool import StaticPool

        return {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
