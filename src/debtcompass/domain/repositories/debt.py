"""Debt repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.debt import Debt, Payment


class DebtRepository(Protocol):
    """Repository for debts and the payments made toward them."""

    def get_by_id(self, debt_id: int) -> Optional[Debt]:
        """Retrieve a debt by ID."""
        ...

    def list_active(self) -> list[Debt]:
        """List debts that are still being paid."""
        ...

    def list_completed(self) -> list[Debt]:
        """List paid-off debts, most recently completed first."""
        ...

    def create(self, debt: Debt) -> Debt:
        """Create a new debt."""
        ...

    def update(self, debt: Debt) -> Debt:
        """Update an existing debt."""
        ...

    def delete(self, debt_id: int) -> None:
        """Delete a debt and its payments."""
        ...

    def save_payment(self, payment: Payment, debt: Debt) -> Payment:
        """Persist a payment together with the debt it changed."""
        ...

    def list_payments(self, debt_id: int) -> list[Payment]:
        """Payment history for a debt, newest first."""
        ...

    def total_paid(self, debt_id: int) -> float:
        """Sum of all payments recorded for a debt."""
        ...
