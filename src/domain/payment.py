"""Payment Domain Entity

A payment is received standalone and later applied to invoices through
allocations. It holds no reference to its allocations.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import Date, Numeric, String
from src.domain.base import BaseModel, IdType
from src.domain.errors import ValidationError
from src.domain.money import ZERO, MoneyLike, to_money


class PaymentMethod(str, Enum):
    """How the money arrived; ``reference`` semantics depend on it"""
    CHECK = "check"
    ACH = "ach"
    CARD = "card"
    OTHER = "other"


class Payment(BaseModel, table=True):
    """
    Payment - Money received from a company or guest

    Domain Rules:
    - amount > 0
    - sum of active allocations for the payment <= amount
    - deleting a payment requires its allocations to be removed first
    - deletion is a tombstone (deleted_at) so allocation history keeps its FK
    """

    __tablename__ = "payments"
    __table_args__ = (
        Index('ix_payments_received_date', 'received_date'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique payment identifier (auto-increment)"
    )

    hotel_id: Optional[int] = Field(default=None)

    method: PaymentMethod = Field(
        sa_column=Column(String(16), nullable=False),
        description="check, ach, card or other"
    )

    reference: Optional[str] = Field(
        default=None,
        sa_column=Column(String(128), nullable=True),
        description="Check number, ACH id or card last 4"
    )

    amount: Decimal = Field(sa_column=Column(Numeric(18, 2), nullable=False))

    received_date: date = Field(sa_column=Column(Date, nullable=False))

    check_date: Optional[date] = Field(default=None, sa_column=Column(Date, nullable=True))

    created_at: datetime = Field(default_factory=datetime.utcnow)

    updated_at: datetime = Field(default_factory=datetime.utcnow)

    deleted_at: Optional[datetime] = Field(default=None, description="Tombstone timestamp")

    @classmethod
    def record(
        cls,
        *,
        method: str,
        amount: MoneyLike,
        received_date: date,
        reference: Optional[str] = None,
        check_date: Optional[date] = None,
        hotel_id: Optional[int] = None,
    ) -> "Payment":
        try:
            payment_method = PaymentMethod(method)
        except ValueError:
            raise ValidationError("method", f"unknown payment method {method!r}")
        try:
            value = to_money(amount)
        except ValueError:
            raise ValidationError("amount", f"not a monetary amount: {amount!r}")
        if value <= ZERO:
            raise ValidationError("amount", f"must be greater than 0 (got {value})")
        return cls(
            method=payment_method,
            amount=value,
            received_date=received_date,
            reference=(reference or "").strip() or None,
            check_date=check_date,
            hotel_id=hotel_id,
        )

    def reference_warnings(self) -> List[str]:
        """Soft checks on the reference that do not block recording"""
        warnings = []
        ref = (self.reference or "").strip()
        if self.method == PaymentMethod.CHECK and not ref:
            warnings.append("No check reference provided")
        if self.method == PaymentMethod.CARD and ref and not (len(ref) == 4 and ref.isdigit()):
            warnings.append("Card reference is not 4 digits")
        return warnings
