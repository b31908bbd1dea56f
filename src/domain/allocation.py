"""Allocation Domain Entity

The join between one payment and one invoice. Allocations are the only source
of an invoice's paid-to-date amount.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import ForeignKey, Numeric
from src.domain.base import BaseModel, IdType
from src.domain.errors import ValidationError
from src.domain.money import ZERO, MoneyLike, to_money


class Allocation(BaseModel, table=True):
    """
    Allocation - Part of a payment applied to an invoice

    Domain Rules:
    - amount > 0
    - exactly one payment and one invoice
    - active while deleted_at is NULL
    """

    __tablename__ = "allocations"
    __table_args__ = (
        Index('ix_allocations_invoice_id', 'invoice_id'),
        Index('ix_allocations_payment_id', 'payment_id'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
    )

    payment_id: int = Field(
        sa_column=Column(IdType, ForeignKey("payments.id"), nullable=False),
    )

    invoice_id: int = Field(
        sa_column=Column(IdType, ForeignKey("invoices.id"), nullable=False),
    )

    amount: Decimal = Field(sa_column=Column(Numeric(18, 2), nullable=False))

    created_at: datetime = Field(default_factory=datetime.utcnow)

    updated_at: Optional[datetime] = Field(default=None)

    deleted_at: Optional[datetime] = Field(default=None)

    @classmethod
    def link(cls, *, payment_id: int, invoice_id: int, amount: MoneyLike) -> "Allocation":
        try:
            value = to_money(amount)
        except ValueError:
            raise ValidationError("amount", f"not a monetary amount: {amount!r}")
        if value <= ZERO:
            raise ValidationError("amount", f"allocation must be greater than 0 (got {value})")
        return cls(payment_id=payment_id, invoice_id=invoice_id, amount=value)

    @property
    def is_active(self) -> bool:
        return self.deleted_at is None
