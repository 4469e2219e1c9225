"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session

from .config import BaseConfig
from .infra.database import create_db_engine, create_session_factory, init_database
from .infra.repositories import SQLModelDebtRepository
from .services.reminders import ReminderScheduler, log_reminder


@dataclass
class AppContext:
    """Configuration plus the repositories and scheduler wired to one database."""

    config: BaseConfig
    engine: Engine
    session_factory: Callable[[], Session]
    debt_repo: SQLModelDebtRepository
    reminders: ReminderScheduler


def build_reminders(
    config: BaseConfig, notify: Callable[[Any, Any], None] = log_reminder
) -> ReminderScheduler:
    """Reminder scheduler using the configured lead time and hour."""

    return ReminderScheduler(
        notify,
        days_before=config.REMINDER_DAYS_BEFORE,
        hour=config.REMINDER_HOUR,
    )


def create_app_context(config: Optional[BaseConfig] = None) -> AppContext:
    """Create the engine, ensure the schema exists and build repositories."""

    if config is None:
        config = BaseConfig()

    engine = create_db_engine(config)
    init_database(engine)
    session_factory = create_session_factory(engine)

    return AppContext(
        config=config,
        engine=engine,
        session_factory=session_factory,
        debt_repo=SQLModelDebtRepository(session_factory),
        reminders=build_reminders(config),
    )
