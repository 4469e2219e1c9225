"""SQLModel implementation of Debt repository."""

from __future__ import annotations

from typing import Callable, Optional

from sqlalchemy import func
from sqlmodel import Session, select

from ...models.debt import Debt, DebtStatus, Payment


class SQLModelDebtRepository:
    """SQLModel-based debt repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, debt_id: int) -> Optional[Debt]:
        """Retrieve a debt by ID."""
        with self.session_factory() as session:
            return session.get(Debt, debt_id)

    def list_active(self) -> list[Debt]:
        """List debts that are still being paid."""
        with self.session_factory() as session:
            statement = (
                select(Debt)
                .where(Debt.status == DebtStatus.ACTIVE.value)
                .order_by(Debt.created_at.desc(), Debt.id.desc())  # type: ignore
            )
            return list(session.exec(statement).all())

    def list_completed(self) -> list[Debt]:
        """List paid-off debts, most recently completed first."""
        with self.session_factory() as session:
            statement = (
                select(Debt)
                .where(Debt.status == DebtStatus.COMPLETED.value)
                .order_by(Debt.completed_at.desc(), Debt.id.desc())  # type: ignore
            )
            return list(session.exec(statement).all())

    def create(self, debt: Debt) -> Debt:
        """Create a new debt, defaulting the original amount to the balance."""
        with self.session_factory() as session:
            if debt.original_amount is None:
                debt.original_amount = debt.balance
            session.add(debt)
            session.commit()
            session.refresh(debt)
            return debt

    def update(self, debt: Debt) -> Debt:
        """Update an existing debt."""
        with self.session_factory() as session:
            debt = session.merge(debt)
            session.commit()
            session.refresh(debt)
            return debt

    def delete(self, debt_id: int) -> None:
        """Delete a debt and its payments."""
        with self.session_factory() as session:
            debt = session.get(Debt, debt_id)
            if debt is None:
                return
            for payment in session.exec(select(Payment).where(Payment.debt_id == debt_id)).all():
                session.delete(payment)
            session.delete(debt)
            session.commit()

    def save_payment(self, payment: Payment, debt: Debt) -> Payment:
        """Persist a payment together with the debt it changed."""
        with self.session_factory() as session:
            session.merge(debt)
            session.add(payment)
            session.commit()
            session.refresh(payment)
            return payment

    def list_payments(self, debt_id: int) -> list[Payment]:
        """Payment history for a debt, newest first."""
        with self.session_factory() as session:
            statement = (
                select(Payment)
                .where(Payment.debt_id == debt_id)
                .order_by(Payment.payment_date.desc(), Payment.id.desc())  # type: ignore
            )
            return list(session.exec(statement).all())

    def total_paid(self, debt_id: int) -> float:
        """Sum of all payments recorded for a debt."""
        with self.session_factory() as session:
            total = session.exec(
                select(func.coalesce(func.sum(Payment.amount), 0.0)).where(
                    Payment.debt_id == debt_id
                )
            ).one()
            return float(total)
