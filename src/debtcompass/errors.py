"""Exceptions raised by the persistence and payment layers."""


class DebtCompassError(Exception):
    """Base exception for recoverable application errors."""


class DebtNotFoundError(DebtCompassError):
    """A debt id did not match any stored record."""

    def __init__(self, debt_id: int):
        super().__init__(f"Debt {debt_id} not found")
        self.debt_id = debt_id


class InvalidPaymentError(DebtCompassError):
    """A payment amount cannot be applied to a debt."""
