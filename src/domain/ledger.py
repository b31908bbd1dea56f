"""Derived invoice state

``recompute`` is the single place balance and status are derived from an
invoice's total and its active allocations. Every mutating ledger operation
calls it after changing the allocation set or the total.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.money import ZERO, MoneyLike, money_sum, to_money


@dataclass(frozen=True)
class LedgerState:
    paid_to_date: Decimal
    balance: Decimal
    status: InvoiceStatus


def derive_status(total: MoneyLike, paid_to_date: MoneyLike) -> InvoiceStatus:
    """Status as a pure function of total and paid-to-date

    Never returns VOID: void is only ever set explicitly.
    """
    total = to_money(total)
    paid = to_money(paid_to_date)
    if paid <= ZERO:
        return InvoiceStatus.OPEN
    if paid < total:
        return InvoiceStatus.PARTIAL
    return InvoiceStatus.PAID


def compute_balance(total: MoneyLike, paid_to_date: MoneyLike) -> Decimal:
    return max(ZERO, to_money(total) - to_money(paid_to_date))


def recompute(invoice: Invoice, allocation_amounts: Iterable[MoneyLike]) -> LedgerState:
    """Derive (paid_to_date, balance, status) without touching the invoice"""
    paid = money_sum(allocation_amounts)
    if invoice.status == InvoiceStatus.VOID:
        return LedgerState(paid_to_date=paid, balance=ZERO, status=InvoiceStatus.VOID)
    return LedgerState(
        paid_to_date=paid,
        balance=compute_balance(invoice.total, paid),
        status=derive_status(invoice.total, paid),
    )


def apply_state(invoice: Invoice, state: LedgerState) -> bool:
    """Write a derived state onto the invoice; returns True if status changed"""
    previous = InvoiceStatus(invoice.status)
    invoice.balance = state.balance
    invoice.status = state.status
    return previous != state.status
