"""Debt payoff strategies (snowball and avalanche) and what-if projections."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Hashable, Iterable, Optional, Protocol, Sequence, TypeVar

from ..logging_config import get_logger
from ..models.debt import PaymentType
from .amortization import round_currency

logger = get_logger(__name__)


class PayoffStrategy(str, Enum):
    SNOWBALL = "snowball"
    AVALANCHE = "avalanche"

    @classmethod
    def parse(cls, value: "PayoffStrategy | str") -> "PayoffStrategy":
        """Accept a member or its (case-insensitive) string value."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise ValueError(f"Invalid debt payoff strategy: {value!r}")


class DebtLike(Protocol):
    balance: float
    apr: float


D = TypeVar("D", bound=DebtLike)


@dataclass(slots=True)
class DebtAccount:
    """In-memory debt record consumed by the calculators."""

    id: Optional[int]
    name: str
    balance: float
    apr: float
    min_payment: float = 0.0
    payment_type: str = PaymentType.LUMP_SUM.value
    total_months: Optional[int] = None
    monthly_payment: Optional[float] = None
    original_amount: Optional[float] = None
    payment_due_day: Optional[int] = None
    months_paid: int = 0


def to_accounts(records: Iterable[Any]) -> list[DebtAccount]:
    """Copy persisted debt rows into detached ``DebtAccount`` values."""

    return [
        DebtAccount(
            id=record.id,
            name=record.name,
            balance=float(record.balance or 0.0),
            apr=float(record.apr or 0.0),
            min_payment=float(record.min_payment or 0.0),
            payment_type=record.payment_type or PaymentType.LUMP_SUM.value,
            total_months=record.total_months,
            monthly_payment=record.monthly_payment,
            original_amount=record.original_amount,
            payment_due_day=record.payment_due_day,
            months_paid=record.months_paid or 0,
        )
        for record in records
    ]


def sort_debts(debts: Iterable[D], strategy: PayoffStrategy | str) -> list[D]:
    """Return a new list with the debt to attack first at index 0.

    Snowball orders by ascending balance, avalanche by descending APR. Ties
    keep their input order.
    """
    strategy = PayoffStrategy.parse(strategy)
    if strategy is PayoffStrategy.SNOWBALL:
        return sorted(debts, key=lambda d: d.balance)
    # reverse=True keeps equal keys in input order
    return sorted(debts, key=lambda d: d.apr, reverse=True)


def current_target(debts: Iterable[D], strategy: PayoffStrategy | str) -> Optional[D]:
    """Return the debt the strategy says to prioritize, if any."""
    ordered = sort_debts(debts, strategy)
    return ordered[0] if ordered else None


def total_debt(debts: Iterable[DebtLike]) -> float:
    return round_currency(sum(max(d.balance, 0.0) for d in debts))


def weighted_apr(debts: Iterable[DebtLike]) -> float:
    """Balance-weighted average APR, 0 when nothing is owed."""
    debts = list(debts)
    total_balance = sum(d.balance for d in debts)
    if total_balance <= 0:
        return 0.0
    weighted_sum = sum(d.balance * d.apr for d in debts)
    return round(weighted_sum / total_balance, 2)


@dataclass(frozen=True, slots=True)
class ProjectionMonth:
    """Aggregate state after one simulated month."""

    month: int
    total_balance: float
    interest: float
    payments: dict[Hashable, float] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class PayoffProjection:
    strategy: PayoffStrategy
    extra_payment: float
    months: tuple[ProjectionMonth, ...]
    total_interest: float
    payoff_order: tuple[Hashable, ...]
    converged: bool

    @property
    def months_to_payoff(self) -> Optional[int]:
        return len(self.months) if self.converged else None


@dataclass(frozen=True, slots=True)
class WhatIfComparison:
    baseline: PayoffProjection
    accelerated: PayoffProjection
    interest_saved: float
    months_saved: Optional[int]


def _debt_key(debt: Any, index: int) -> Hashable:
    debt_id = getattr(debt, "id", None)
    return debt_id if debt_id is not None else index


def project_payoff(
    debts: Sequence[Any],
    strategy: PayoffStrategy | str,
    *,
    extra_payment: float = 0.0,
    max_months: int = 600,
) -> PayoffProjection:
    """Simulate month-by-month payoff of every debt under a strategy.

    Each month interest accrues at ``apr / 1200`` and every open debt gets its
    minimum payment, never less than interest plus one dollar so balances
    always fall. The extra payment, plus minimums freed by debts already paid
    off, goes to the current target; money left over after a payoff spills to
    the next debt in the same month.
    """
    strategy = PayoffStrategy.parse(strategy)
    if extra_payment < 0:
        raise ValueError("extra_payment cannot be negative")

    open_debts = [(index, d) for index, d in enumerate(debts) if d.balance > 0]
    ordered = sort_debts((d for _, d in open_debts), strategy)
    keys = [_debt_key(d, index) for index, d in open_debts]
    key_by_debt = {id(d): key for (_, d), key in zip(open_debts, keys)}

    balances = [float(d.balance) for d in ordered]
    rolled_minimums = 0.0
    total_interest = 0.0
    months: list[ProjectionMonth] = []
    payoff_order: list[Hashable] = []

    while any(b > 0 for b in balances) and len(months) < max_months:
        pool = extra_payment + rolled_minimums
        month_interest = 0.0
        payments: dict[Hashable, float] = {}

        for i, debt in enumerate(ordered):
            if balances[i] <= 0:
                continue
            key = key_by_debt[id(debt)]
            interest = round_currency(balances[i] * debt.apr / 1200)
            month_interest += interest

            payment = max(float(debt.min_payment or 0.0), interest + 1.0) + pool
            pool = 0.0
            owed = balances[i] + interest
            if payment >= owed:
                pool = payment - owed
                payment = owed
                balances[i] = 0.0
                rolled_minimums += float(debt.min_payment or 0.0)
                payoff_order.append(key)
            else:
                balances[i] = round_currency(owed - payment)
            payments[key] = round_currency(payment)

        total_interest += month_interest
        months.append(
            ProjectionMonth(
                month=len(months) + 1,
                total_balance=round_currency(sum(balances)),
                interest=round_currency(month_interest),
                payments=payments,
            )
        )

    converged = not any(b > 0 for b in balances)
    if not converged:
        logger.warning(
            "Payoff projection stopped before all debts were cleared",
            extra={"strategy": strategy.value, "max_months": max_months},
        )
    return PayoffProjection(
        strategy=strategy,
        extra_payment=extra_payment,
        months=tuple(months),
        total_interest=round_currency(total_interest),
        payoff_order=tuple(payoff_order),
        converged=converged,
    )


def compare_extra_payment(
    debts: Sequence[Any],
    strategy: PayoffStrategy | str,
    extra_payment: float,
    *,
    max_months: int = 600,
) -> WhatIfComparison:
    """Compare paying only minimums against adding ``extra_payment`` monthly."""
    baseline = project_payoff(debts, strategy, max_months=max_months)
    accelerated = project_payoff(
        debts, strategy, extra_payment=extra_payment, max_months=max_months
    )
    months_saved = None
    if baseline.converged and accelerated.converged:
        months_saved = len(baseline.months) - len(accelerated.months)
    return WhatIfComparison(
        baseline=baseline,
        accelerated=accelerated,
        interest_saved=round_currency(baseline.total_interest - accelerated.total_interest),
        months_saved=months_saved,
    )
