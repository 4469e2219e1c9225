"""Recording payments against debts and tracking payoff progress."""

from __future__ import annotations

import math
from datetime import date, datetime, timezone
from typing import Any, Optional

from ..domain.repositories import DebtRepository
from ..errors import DebtNotFoundError, InvalidPaymentError
from ..logging_config import get_logger
from ..models.debt import Debt, DebtStatus, Payment
from .amortization import round_currency

logger = get_logger(__name__)


def apply_payment(debt: Debt, amount: float, *, now: Optional[datetime] = None) -> Debt:
    """Reduce the balance by ``amount`` and advance the months-paid counter.

    The balance is clamped at zero; a debt that reaches zero is marked
    completed. The record is modified in place and returned.
    """
    if not math.isfinite(amount) or amount <= 0:
        raise InvalidPaymentError(f"Payment amount must be positive, got {amount}")
    if debt.status == DebtStatus.COMPLETED.value:
        raise InvalidPaymentError(f"Debt {debt.id} is already paid off")

    debt.balance = max(0.0, round_currency(debt.balance - amount))
    debt.months_paid = (debt.months_paid or 0) + 1
    if debt.balance == 0:
        debt.status = DebtStatus.COMPLETED.value
        debt.completed_at = now or datetime.now(timezone.utc)
    return debt


def record_payment(
    repo: DebtRepository,
    debt_id: int,
    amount: float,
    *,
    note: Optional[str] = None,
    paid_on: Optional[date] = None,
) -> tuple[Payment, Debt]:
    """Apply a payment to a stored debt and persist both records."""

    debt = repo.get_by_id(debt_id)
    if debt is None:
        raise DebtNotFoundError(debt_id)

    apply_payment(debt, amount)
    payment = Payment(
        debt_id=debt_id,
        amount=amount,
        payment_date=paid_on or date.today(),
        note=note,
    )
    payment = repo.save_payment(payment, debt)
    logger.info(
        "Payment recorded",
        extra={
            "debt_id": debt_id,
            "amount": amount,
            "remaining_balance": debt.balance,
            "completed": debt.status == DebtStatus.COMPLETED.value,
        },
    )
    return payment, debt


def paid_off_percent(debt: Any) -> float:
    """Share of the original amount already repaid, 0-100 with one decimal."""

    original = getattr(debt, "original_amount", None)
    if not original or original <= 0:
        return 0.0
    percent = (original - debt.balance) / original * 100
    return round(min(100.0, max(0.0, percent)), 1)
