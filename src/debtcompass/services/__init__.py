"""Service module exports."""

from . import amortization, debts, payments, reminders

__all__ = [
    "amortization",
    "debts",
    "payments",
    "reminders",
]
