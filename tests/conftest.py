"""Pytest configuration and shared fixtures for DebtCompass tests.

Provides an isolated SQLite database per test, a repository wired to it,
record factories, and float comparison helpers.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

import pytest
from sqlmodel import SQLModel, create_engine

from debtcompass.config import BaseConfig
from debtcompass.context import AppContext, build_reminders
from debtcompass.infra.database import create_session_factory
from debtcompass.infra.repositories import SQLModelDebtRepository
from debtcompass.models import Debt, PaymentType
from debtcompass.services.debts import DebtAccount

# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine with all tables created
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory matching the one repositories receive in production."""
    return create_session_factory(db_engine)


@pytest.fixture
def debt_repo(session_factory) -> SQLModelDebtRepository:
    return SQLModelDebtRepository(session_factory)


@pytest.fixture
def app_config(tmp_path, monkeypatch) -> BaseConfig:
    """Configuration rooted in a temporary data directory."""
    monkeypatch.setenv("DEBTCOMPASS_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("DEBTCOMPASS_DATABASE_URL", f"sqlite:///{tmp_path / 'test.db'}")
    monkeypatch.delenv("DEBTCOMPASS_DEFAULT_STRATEGY", raising=False)
    return BaseConfig()


@pytest.fixture
def app_context(app_config, db_engine, session_factory, debt_repo) -> AppContext:
    return AppContext(
        config=app_config,
        engine=db_engine,
        session_factory=session_factory,
        debt_repo=debt_repo,
        reminders=build_reminders(app_config),
    )


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def debt_factory(debt_repo):
    """Factory for creating persisted debts.

    Returns:
        Callable: Function that creates and stores Debt instances
    """

    def _create_debt(
        name: str = "Test Debt",
        balance: float = 1000.00,
        apr: float = 18.0,
        min_payment: float = 25.00,
        payment_type: str = PaymentType.LUMP_SUM.value,
        total_months: int | None = None,
        monthly_payment: float | None = None,
        original_amount: float | None = None,
        payment_due_day: int | None = None,
    ) -> Debt:
        return debt_repo.create(
            Debt(
                name=name,
                balance=balance,
                apr=apr,
                min_payment=min_payment,
                payment_type=payment_type,
                total_months=total_months,
                monthly_payment=monthly_payment,
                original_amount=original_amount,
                payment_due_day=payment_due_day,
            )
        )

    return _create_debt


def make_account(**overrides) -> DebtAccount:
    """Build an in-memory debt with sensible defaults."""
    values = {"id": 1, "name": "Card", "balance": 1000.0, "apr": 18.0, "min_payment": 25.0}
    values.update(overrides)
    return DebtAccount(**values)


# =============================================================================
# Helper Utilities
# =============================================================================


def assert_float_equal(actual: float, expected: float, tolerance: float = 0.01):
    """Assert that two floats are equal within a tolerance.

    Args:
        actual: Actual value
        expected: Expected value
        tolerance: Maximum allowed difference (default 0.01 = 1 cent)

    Raises:
        AssertionError: If values differ by more than tolerance
    """
    assert (
        abs(actual - expected) < tolerance
    ), f"Expected {expected}, got {actual} (diff: {abs(actual - expected)})"
