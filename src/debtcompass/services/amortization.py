"""Installment loan calculator.

Computes the fixed monthly payment, the totals and a month-by-month schedule
for an installment debt. The rate can come from a known APR, from a known
monthly payment (the APR is then estimated), or be zero.

Input that cannot produce a schedule (non-positive principal or term, a
payment that does not cover straight-line principal) yields ``None`` rather
than an exception, so callers can render an empty state.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Any, Optional, Union

from ..logging_config import get_logger
from ..models.debt import PaymentType

logger = get_logger(__name__)

_CENT = Decimal("0.01")


@dataclass(frozen=True, slots=True)
class KnownApr:
    """Nominal annual rate in percent, e.g. ``24.0`` for 24%."""

    annual_percent: float


@dataclass(frozen=True, slots=True)
class KnownPayment:
    """Fixed monthly payment; the APR is estimated from it."""

    monthly_amount: float


@dataclass(frozen=True, slots=True)
class NoInterest:
    """Zero-rate installment plan."""


RateSource = Union[KnownApr, KnownPayment, NoInterest]


@dataclass(frozen=True, slots=True)
class AmortizationRow:
    """One month of an amortization schedule."""

    month: int
    payment: float
    principal: float
    interest: float
    balance: float


@dataclass(frozen=True, slots=True)
class CalculationResult:
    """Totals and schedule for a single calculation request."""

    monthly_payment: float
    total_paid: float
    total_interest: float
    estimated_apr: Optional[float]
    schedule: tuple[AmortizationRow, ...]

    @property
    def term_months(self) -> int:
        return len(self.schedule)


def round_currency(amount: float) -> float:
    """Round to cents, half away from zero.

    Non-finite values are returned unchanged.
    """
    if not math.isfinite(amount):
        return amount
    value = Decimal(repr(amount))
    with localcontext() as ctx:
        # quantize needs every integer digit plus two decimals
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        return float(value.quantize(_CENT, rounding=ROUND_HALF_UP))


def _build_schedule(
    *, principal: float, months: int, payment: float, monthly_rate: float
) -> tuple[AmortizationRow, ...]:
    rows: list[AmortizationRow] = []
    running = principal
    for month in range(1, months + 1):
        # Both parts are clamped; the running balance itself stays unrounded.
        interest = max(0.0, running * monthly_rate)
        principal_part = max(0.0, payment - interest)
        running = max(0.0, running - principal_part)
        rows.append(
            AmortizationRow(
                month=month,
                payment=payment,
                principal=principal_part,
                interest=interest,
                balance=round_currency(running),
            )
        )
    return tuple(rows)


def _no_interest(principal: float, months: int) -> CalculationResult:
    payment = principal / months
    return CalculationResult(
        monthly_payment=round_currency(payment),
        total_paid=round_currency(principal),
        total_interest=0.0,
        estimated_apr=None,
        schedule=_build_schedule(
            principal=principal, months=months, payment=payment, monthly_rate=0.0
        ),
    )


def _known_apr(principal: float, months: int, annual_percent: float) -> Optional[CalculationResult]:
    if not math.isfinite(annual_percent) or annual_percent < 0:
        return None
    monthly_rate = annual_percent / 100 / 12
    if monthly_rate == 0:
        return _no_interest(principal, months)

    try:
        # (1 + r)^n - 1 without cancellation for tiny rates
        growth_minus_one = math.expm1(months * math.log1p(monthly_rate))
    except OverflowError:
        logger.debug(
            "Rate too large to amortize",
            extra={"apr": annual_percent, "months": months},
        )
        return None
    payment = principal * (monthly_rate / growth_minus_one) * (growth_minus_one + 1)
    total_paid = payment * months
    if not math.isfinite(total_paid):
        return None
    return CalculationResult(
        monthly_payment=round_currency(payment),
        total_paid=round_currency(total_paid),
        total_interest=max(0.0, round_currency(total_paid - principal)),
        estimated_apr=None,
        schedule=_build_schedule(
            principal=principal, months=months, payment=payment, monthly_rate=monthly_rate
        ),
    )


def _known_payment(principal: float, months: int, payment: float) -> Optional[CalculationResult]:
    # A payment at or below straight-line principal would imply zero or negative interest.
    if not math.isfinite(payment) or payment <= principal / months:
        return None

    total_paid = payment * months
    if not math.isfinite(total_paid):
        return None
    total_interest = total_paid - principal
    # Linear estimate: interest spread evenly over the original principal.
    simple_rate = (total_interest / principal) / months
    return CalculationResult(
        monthly_payment=round_currency(payment),
        total_paid=round_currency(total_paid),
        total_interest=round_currency(total_interest),
        estimated_apr=round_currency(simple_rate * 12 * 100),
        schedule=_build_schedule(
            principal=principal, months=months, payment=payment, monthly_rate=simple_rate
        ),
    )


def compute(
    principal: float, term_months: int, rate_source: RateSource
) -> Optional[CalculationResult]:
    """Return payment totals and schedule, or ``None`` when undetermined.

    Args:
        principal: Amount borrowed.
        term_months: Number of monthly payments.
        rate_source: ``KnownApr``, ``KnownPayment`` or ``NoInterest``.
    """
    if not (math.isfinite(principal) and principal > 0) or term_months <= 0:
        return None

    if isinstance(rate_source, NoInterest):
        return _no_interest(principal, term_months)
    if isinstance(rate_source, KnownApr):
        return _known_apr(principal, term_months, rate_source.annual_percent)
    if isinstance(rate_source, KnownPayment):
        return _known_payment(principal, term_months, rate_source.monthly_amount)
    raise TypeError(f"Unsupported rate source: {rate_source!r}")


def rate_source_for(debt: Any) -> Optional[RateSource]:
    """Pick the rate source implied by a debt's payment type.

    Lump-sum debts have no fixed schedule. Interest-bearing installments
    prefer a known APR and fall back to the recorded monthly payment.
    """
    payment_type = PaymentType(debt.payment_type)
    if payment_type is PaymentType.INSTALLMENTS_NO_INTEREST:
        return NoInterest()
    if payment_type is PaymentType.INSTALLMENTS_WITH_INTEREST:
        if debt.apr and debt.apr > 0:
            return KnownApr(annual_percent=debt.apr)
        if debt.monthly_payment:
            return KnownPayment(monthly_amount=debt.monthly_payment)
    return None


def calculate_for_debt(debt: Any) -> Optional[CalculationResult]:
    """Run the calculator for an installment debt record."""

    source = rate_source_for(debt)
    if source is None or not debt.total_months:
        return None
    principal = debt.original_amount if debt.original_amount else debt.balance
    return compute(principal, debt.total_months, source)
