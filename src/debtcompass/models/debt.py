"""Debt and payment entities."""

from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel


class PaymentType(str, Enum):
    """How a debt is repaid."""

    LUMP_SUM = "lump_sum"
    INSTALLMENTS_NO_INTEREST = "installments_no_interest"
    INSTALLMENTS_WITH_INTEREST = "installments_with_interest"


class DebtStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class Debt(SQLModel, table=True):
    """Credit card, loan or installment plan tracked by DebtCompass."""

    __tablename__: ClassVar[str] = "debt"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False, max_length=80, index=True)
    balance: float = Field(nullable=False, ge=0)
    apr: float = Field(default=0.0, nullable=False, ge=0)
    min_payment: float = Field(default=0.0, nullable=False, ge=0)
    payment_type: str = Field(default=PaymentType.LUMP_SUM.value, max_length=32)
    total_months: Optional[int] = Field(default=None, gt=0)
    monthly_payment: Optional[float] = Field(default=None)
    original_amount: Optional[float] = Field(default=None)
    payment_due_day: Optional[int] = Field(default=None, ge=1, le=31)
    months_paid: int = Field(default=0, nullable=False)
    status: str = Field(default=DebtStatus.ACTIVE.value, max_length=16, index=True)
    completed_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )


class Payment(SQLModel, table=True):
    """A single payment made toward a debt."""

    __tablename__: ClassVar[str] = "payment"

    id: Optional[int] = Field(default=None, primary_key=True)
    debt_id: int = Field(foreign_key="debt.id", nullable=False, index=True)
    amount: float = Field(nullable=False, gt=0)
    payment_date: date = Field(default_factory=date.today, nullable=False)
    note: Optional[str] = Field(default=None, max_length=255)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
