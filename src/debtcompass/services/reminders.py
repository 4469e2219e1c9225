"""Upcoming payment dates and reminder scheduling."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any, Callable, Iterable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.date import DateTrigger

from ..logging_config import get_logger

logger = get_logger(__name__)


def _on_day(year: int, month: int, day: int) -> date:
    """Return the given day of the month, clamped to the month's last day."""

    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day, last_day))


def next_payment_date(due_day: int, today: Optional[date] = None) -> date:
    """Return the first due date on or after *today*."""

    if not 1 <= due_day <= 31:
        raise ValueError(f"due_day must be between 1 and 31, got {due_day}")
    today = today or date.today()
    if today.day <= due_day:
        return _on_day(today.year, today.month, due_day)
    month = today.month + 1
    year = today.year + (month - 1) // 12
    month = ((month - 1) % 12) + 1
    return _on_day(year, month, due_day)


def days_until_payment(due_day: int, today: Optional[date] = None) -> int:
    today = today or date.today()
    return (next_payment_date(due_day, today) - today).days


@dataclass(frozen=True, slots=True)
class UpcomingPayment:
    debt: Any
    due_date: date
    days_until: int

    @property
    def amount(self) -> float:
        """Amount expected on the due date."""
        return self.debt.monthly_payment or self.debt.min_payment or 0.0


def upcoming_payments(
    debts: Iterable[Any], today: Optional[date] = None, *, limit: Optional[int] = None
) -> list[UpcomingPayment]:
    """List debts with a due day, soonest first."""

    today = today or date.today()
    upcoming = [
        UpcomingPayment(
            debt=debt,
            due_date=next_payment_date(debt.payment_due_day, today),
            days_until=days_until_payment(debt.payment_due_day, today),
        )
        for debt in debts
        if getattr(debt, "payment_due_day", None)
    ]
    upcoming.sort(key=lambda item: item.days_until)
    return upcoming[:limit] if limit is not None else upcoming


def reminder_datetime(due_date: date, days_before: int, hour: int = 9) -> datetime:
    """Local time at which to remind the user of a payment."""

    return datetime.combine(due_date - timedelta(days=days_before), time(hour=hour))


class ReminderScheduler:
    """Fires a callback ahead of each debt's next due date."""

    def __init__(
        self,
        notify: Callable[[Any, date], None],
        *,
        days_before: int = 3,
        hour: int = 9,
        scheduler: Optional[BackgroundScheduler] = None,
    ):
        """Initialize the reminder scheduler.

        Args:
            notify: Called with ``(debt, due_date)`` when a reminder fires
            days_before: How many days ahead of the due date to remind
            hour: Hour of day (local time) at which reminders fire
            scheduler: APScheduler instance to use; a new one by default
        """
        self.notify = notify
        self.days_before = days_before
        self.hour = hour
        self.scheduler = scheduler or BackgroundScheduler()

    @staticmethod
    def job_id(debt: Any, days_before: int) -> str:
        return f"reminder-{debt.id}-{days_before}"

    def start(self) -> None:
        if self.scheduler.running:
            logger.warning("Reminder scheduler already running")
            return
        self.scheduler.start()
        logger.info("Reminder scheduler started")

    def stop(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Reminder scheduler stopped")

    def schedule(
        self, debts: Iterable[Any], *, today: Optional[date] = None, now: Optional[datetime] = None
    ) -> list[str]:
        """Add one reminder job per debt with a due day.

        Reminders whose fire time is already past are skipped. Returns the
        ids of the scheduled jobs.
        """
        now = now or datetime.now()
        today = today or now.date()
        scheduled: list[str] = []
        for item in upcoming_payments(debts, today):
            run_at = reminder_datetime(item.due_date, self.days_before, self.hour)
            if run_at <= now:
                logger.debug(
                    "Skipping reminder in the past",
                    extra={"debt_id": item.debt.id, "run_at": run_at.isoformat()},
                )
                continue
            job_id = self.job_id(item.debt, self.days_before)
            if self.scheduler.get_job(job_id) is not None:
                self.scheduler.remove_job(job_id)
            self.scheduler.add_job(
                func=self._fire,
                trigger=DateTrigger(run_date=run_at),
                args=[item.debt, item.due_date],
                id=job_id,
                name=f"Payment reminder: {item.debt.name}",
            )
            scheduled.append(job_id)
        logger.info("Scheduled payment reminders", extra={"count": len(scheduled)})
        return scheduled

    def cancel(self, debt: Any) -> None:
        job_id = self.job_id(debt, self.days_before)
        if self.scheduler.get_job(job_id) is not None:
            self.scheduler.remove_job(job_id)
            logger.info(f"Removed job: {job_id}")

    def _fire(self, debt: Any, due_date: date) -> None:
        try:
            self.notify(debt, due_date)
        except Exception as exc:
            logger.error(f"Reminder for debt {debt.id} failed: {exc}", exc_info=True)


def log_reminder(debt: Any, due_date: date) -> None:
    """Default notifier: write the reminder to the application log."""

    logger.info(
        f"Payment reminder: {debt.name} is due {due_date.isoformat()}",
        extra={"debt_id": debt.id, "due_date": due_date.isoformat()},
    )
