"""SQLModel table exports."""

from .debt import Debt, DebtStatus, Payment, PaymentType

__all__ = [
    "Debt",
    "DebtStatus",
    "Payment",
    "PaymentType",
]
