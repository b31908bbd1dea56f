"""Invoice Domain Entity

A hotel stay invoice. Monetary fields other than subtotal/tax are derived and
only ever written by the ledger through ``apply_state``.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import Date, Numeric, String, Text
from src.domain.base import BaseModel, IdType
from src.domain.errors import ValidationError
from src.domain.money import ZERO, MoneyLike, to_money


class InvoiceStatus(str, Enum):
    """Invoice status types"""
    OPEN = "open"
    PARTIAL = "partial"
    PAID = "paid"
    VOID = "void"


def count_nights(check_in: Optional[date], check_out: Optional[date]) -> int:
    """Whole nights between check-in and check-out, never negative"""
    if check_in is None or check_out is None:
        return 0
    return max(0, (check_out - check_in).days)


def _non_negative(field: str, value: Optional[MoneyLike]) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        amount = to_money(value)
    except ValueError:
        raise ValidationError(field, f"not a monetary amount: {value!r}")
    if amount < ZERO:
        raise ValidationError(field, f"must not be negative (got {amount})")
    return amount


class Invoice(BaseModel, table=True):
    """
    Invoice - Billing record for a guest stay

    Domain Rules:
    - total = subtotal + tax
    - balance = max(0, total - paid_to_date), written only by the ledger
    - status is derived from (total, paid_to_date) except the explicit void
    - void is terminal
    - deleted_at marks a tombstone; tombstoned invoices are invisible to every read
    """

    __tablename__ = "invoices"
    __table_args__ = (
        Index('ix_invoices_hotel_id', 'hotel_id'),
        Index('ix_invoices_status', 'status'),
        Index('ix_invoices_due_date', 'due_date'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique invoice identifier (auto-increment)"
    )

    hotel_id: int = Field(description="Hotel (property) the stay belongs to")

    company_id: Optional[int] = Field(default=None, description="Billed company")

    client_id: Optional[int] = Field(default=None, description="Guest/client")

    number: Optional[str] = Field(
        default=None,
        sa_column=Column(String(50), nullable=True),
        description="Human facing invoice number"
    )

    confirmation_no: Optional[str] = Field(default=None, sa_column=Column(String(64), nullable=True))

    case_no: Optional[str] = Field(default=None, sa_column=Column(String(64), nullable=True))

    issue_date: date = Field(sa_column=Column(Date, nullable=False))

    due_date: date = Field(sa_column=Column(Date, nullable=False))

    check_in: Optional[date] = Field(default=None, sa_column=Column(Date, nullable=True))

    check_out: Optional[date] = Field(default=None, sa_column=Column(Date, nullable=True))

    nights: int = Field(default=0, description="Whole nights between check_in and check_out")

    rate_night: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(18, 2), nullable=True),
    )

    subtotal: Decimal = Field(sa_column=Column(Numeric(18, 2), nullable=False, default=0))

    tax: Decimal = Field(sa_column=Column(Numeric(18, 2), nullable=False, default=0))

    total: Decimal = Field(
        sa_column=Column(Numeric(18, 2), nullable=False, default=0),
        description="subtotal + tax"
    )

    balance: Decimal = Field(
        sa_column=Column(Numeric(18, 2), nullable=False, default=0),
        description="max(0, total - paid_to_date)"
    )

    status: InvoiceStatus = Field(
        default=InvoiceStatus.OPEN,
        sa_column=Column(String(16), nullable=False, default=InvoiceStatus.OPEN.value),
    )

    notes: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    created_at: datetime = Field(default_factory=datetime.utcnow)

    updated_at: datetime = Field(default_factory=datetime.utcnow)

    deleted_at: Optional[datetime] = Field(default=None, description="Tombstone timestamp")

    @classmethod
    def open(
        cls,
        *,
        hotel_id: int,
        issue_date: date,
        due_date: Optional[date] = None,
        default_due_days: int = 30,
        subtotal: Optional[MoneyLike] = None,
        tax: MoneyLike = 0,
        check_in: Optional[date] = None,
        check_out: Optional[date] = None,
        rate_night: Optional[MoneyLike] = None,
        **extra,
    ) -> "Invoice":
        """Build a validated open invoice

        When ``subtotal`` is omitted it is derived from ``nights * rate_night``.
        """
        if check_in and check_out and check_out < check_in:
            raise ValidationError("check_out", "must not be earlier than check_in")
        rate = _non_negative("rate_night", rate_night)
        nights = count_nights(check_in, check_out)
        if subtotal is None:
            subtotal = (rate or ZERO) * nights
        sub = _non_negative("subtotal", subtotal)
        tx = _non_negative("tax", tax)
        if due_date is None:
            due_date = issue_date + timedelta(days=default_due_days)
        total = sub + tx
        return cls(
            hotel_id=hotel_id,
            issue_date=issue_date,
            due_date=due_date,
            check_in=check_in,
            check_out=check_out,
            nights=nights,
            rate_night=rate,
            subtotal=sub,
            tax=tx,
            total=total,
            balance=total,
            status=InvoiceStatus.OPEN,
            **extra,
        )

    def set_total(self, new_total: MoneyLike) -> None:
        """Replace the quoted total; tax is folded into subtotal"""
        amount = _non_negative("total", new_total)
        self.subtotal = amount
        self.tax = ZERO
        self.total = amount

    @property
    def is_void(self) -> bool:
        return self.status == InvoiceStatus.VOID

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def display_status(self) -> str:
        """Status for presentation; a zero total reads as void without being voided"""
        if self.is_void or to_money(self.total) == ZERO:
            return InvoiceStatus.VOID.value
        return InvoiceStatus(self.status).value
