"""Tests for the installment loan calculator.

Covers the three rate sources (known APR, known payment, no interest), the
undetermined cases, and schedule invariants across a range of loans.
"""

from __future__ import annotations

import pytest

from debtcompass.models import PaymentType
from debtcompass.services.amortization import (
    KnownApr,
    KnownPayment,
    NoInterest,
    calculate_for_debt,
    compute,
    rate_source_for,
    round_currency,
)
from tests.conftest import assert_float_equal, make_account


class TestKnownApr:
    """Fixed-payment loans where the APR is known."""

    def test_annuity_payment_and_interest(self):
        """1000 over 10 months at 24% APR (2% monthly)."""
        result = compute(1000, 10, KnownApr(24))

        assert result is not None
        assert result.monthly_payment == 111.33
        assert_float_equal(result.total_interest, 113.30, tolerance=0.05)
        assert result.total_paid == 1113.27
        assert result.estimated_apr is None

    def test_first_row_splits_interest_and_principal(self):
        result = compute(1000, 10, KnownApr(24))

        first = result.schedule[0]
        assert first.month == 1
        assert_float_equal(first.interest, 20.00)
        assert_float_equal(first.principal, 91.33)
        assert first.balance == 908.67

    def test_final_balance_is_zero(self):
        result = compute(5000, 36, KnownApr(12))

        assert len(result.schedule) == 36
        assert result.schedule[-1].balance == 0.0

    def test_zero_apr_falls_back_to_no_interest(self):
        result = compute(1200, 12, KnownApr(0))

        assert result.monthly_payment == 100.00
        assert result.total_interest == 0.0
        assert result.total_paid == 1200.00
        assert all(row.interest == 0 for row in result.schedule)

    def test_negative_apr_is_undetermined(self):
        assert compute(1000, 12, KnownApr(-5)) is None

    def test_single_month_loan(self):
        result = compute(1000, 1, KnownApr(12))

        assert result.monthly_payment == 1010.00
        assert result.total_interest == 10.00
        (row,) = result.schedule
        assert row.month == 1
        assert_float_equal(row.principal, 1000.0)
        assert_float_equal(row.interest, 10.0)
        assert row.balance == 0.0

    def test_tiny_apr_still_pays_off(self):
        """A rate near zero behaves like an even split, not a short payment."""
        result = compute(1000, 12, KnownApr(1e-12))

        assert result.monthly_payment == 83.33
        assert result.total_paid == 1000.00
        assert result.total_interest >= 0
        assert result.schedule[-1].balance == 0.0


class TestNoInterest:
    def test_even_split(self):
        result = compute(1200, 12, NoInterest())

        assert result.monthly_payment == 100.00
        assert result.total_interest == 0.0
        assert result.total_paid == 1200.00
        assert [row.balance for row in result.schedule][:3] == [1100.0, 1000.0, 900.0]
        assert result.schedule[-1].balance == 0.0

    def test_payment_is_exact_division_before_rounding(self):
        result = compute(100, 3, NoInterest())

        assert result.schedule[0].payment == 100 / 3
        assert result.monthly_payment == 33.33
        assert [row.balance for row in result.schedule] == [66.67, 33.33, 0.0]
        assert all(row.principal == row.payment for row in result.schedule)


class TestKnownPayment:
    """APR estimated from a known monthly payment."""

    def test_linear_apr_estimate(self):
        result = compute(1000, 10, KnownPayment(110))

        assert result.total_interest == 100.00
        assert result.total_paid == 1100.00
        assert result.monthly_payment == 110.00
        assert result.estimated_apr == 12.00

    def test_schedule_pays_off_within_term(self):
        result = compute(1000, 10, KnownPayment(110))

        balances = [row.balance for row in result.schedule]
        assert balances[0] == 900.00
        assert balances[-1] == 0.0
        assert all(row.interest >= 0 and row.principal >= 0 for row in result.schedule)

    @pytest.mark.parametrize("payment", [100.0, 50.0, 0.0, -10.0])
    def test_payment_not_covering_principal_is_undetermined(self, payment):
        assert compute(1000, 10, KnownPayment(payment)) is None

    def test_long_term_estimate_stays_non_negative(self):
        result = compute(10000, 360, KnownPayment(60))

        assert result is not None
        assert result.estimated_apr == round_currency((21600 - 10000) / 10000 / 360 * 12 * 100)
        assert all(row.interest >= 0 for row in result.schedule)
        assert all(row.principal >= 0 for row in result.schedule)


class TestUndeterminedInput:
    @pytest.mark.parametrize("source", [KnownApr(10), KnownPayment(200), NoInterest()])
    def test_zero_principal(self, source):
        assert compute(0, 12, source) is None

    @pytest.mark.parametrize("months", [0, -3])
    def test_non_positive_term(self, months):
        assert compute(1000, months, KnownApr(10)) is None

    def test_negative_principal(self):
        assert compute(-500, 12, NoInterest()) is None

    def test_unknown_rate_source_is_a_programming_error(self):
        with pytest.raises(TypeError):
            compute(1000, 12, "24%")


class TestLargeAmounts:
    @pytest.mark.parametrize(
        ("principal", "source"),
        [
            (1e27, NoInterest()),
            (1e27, KnownApr(12)),
            (1e26, KnownPayment(1e26)),
        ],
    )
    def test_large_principal_is_calculated(self, principal, source):
        result = compute(principal, 12, source)

        assert result is not None
        assert result.total_paid >= principal
        assert result.monthly_payment >= principal / 12
        assert len(result.schedule) == 12

    @pytest.mark.parametrize("source", [KnownApr(12), KnownPayment(1e308)])
    def test_totals_beyond_float_range_are_undetermined(self, source):
        assert compute(1.7e308, 12, source) is None


@pytest.mark.parametrize("principal", [500.0, 1234.56, 25000.0])
@pytest.mark.parametrize("months", [1, 12, 60, 360])
@pytest.mark.parametrize("apr", [1.0, 7.5, 24.0, 36.0])
def test_interest_bearing_schedule_invariants(principal, months, apr):
    """Balances never increase, never go negative and end at zero."""
    result = compute(principal, months, KnownApr(apr))

    balances = [row.balance for row in result.schedule]
    assert len(balances) == months
    assert all(b >= 0 for b in balances)
    assert all(later <= earlier for earlier, later in zip(balances, balances[1:]))
    assert balances[-1] == 0.0
    assert result.total_paid == round_currency(result.schedule[0].payment * months)
    assert_float_equal(result.total_interest, result.total_paid - principal, tolerance=0.011)


@pytest.mark.parametrize(
    "source",
    [KnownApr(19.99), KnownPayment(95.5), NoInterest()],
)
def test_repeated_calls_are_identical(source):
    assert compute(1000, 12, source) == compute(1000, 12, source)


class TestCalculateForDebt:
    """Mapping a debt's payment type onto a rate source."""

    def test_lump_sum_has_no_schedule(self):
        debt = make_account(payment_type=PaymentType.LUMP_SUM.value, total_months=12)
        assert rate_source_for(debt) is None
        assert calculate_for_debt(debt) is None

    def test_no_interest_installments(self):
        debt = make_account(
            balance=600.0,
            apr=0.0,
            payment_type=PaymentType.INSTALLMENTS_NO_INTEREST.value,
            total_months=6,
        )
        result = calculate_for_debt(debt)
        assert result.monthly_payment == 100.00
        assert result.total_interest == 0.0

    def test_known_apr_takes_precedence_over_payment(self):
        debt = make_account(
            balance=1000.0,
            apr=24.0,
            monthly_payment=150.0,
            payment_type=PaymentType.INSTALLMENTS_WITH_INTEREST.value,
            total_months=10,
        )
        assert isinstance(rate_source_for(debt), KnownApr)
        assert calculate_for_debt(debt).monthly_payment == 111.33

    def test_monthly_payment_used_when_apr_unknown(self):
        debt = make_account(
            balance=1000.0,
            apr=0.0,
            monthly_payment=110.0,
            payment_type=PaymentType.INSTALLMENTS_WITH_INTEREST.value,
            total_months=10,
        )
        result = calculate_for_debt(debt)
        assert result.estimated_apr == 12.00

    def test_interest_bearing_without_apr_or_payment_is_undetermined(self):
        debt = make_account(
            apr=0.0,
            payment_type=PaymentType.INSTALLMENTS_WITH_INTEREST.value,
            total_months=10,
        )
        assert calculate_for_debt(debt) is None

    def test_missing_term_is_undetermined(self):
        debt = make_account(payment_type=PaymentType.INSTALLMENTS_NO_INTEREST.value)
        assert calculate_for_debt(debt) is None

    def test_original_amount_is_the_principal(self):
        debt = make_account(
            balance=400.0,
            original_amount=1200.0,
            payment_type=PaymentType.INSTALLMENTS_NO_INTEREST.value,
            total_months=12,
        )
        assert calculate_for_debt(debt).monthly_payment == 100.00


def test_round_currency_rounds_half_up():
    assert round_currency(2.675) == 2.68
    assert round_currency(0.005) == 0.01
    assert round_currency(1.004) == 1.0
    assert round_currency(1e27) == 1e27
