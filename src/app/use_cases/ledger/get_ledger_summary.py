"""Ledger summary use cases

Read-only totals shown above the invoice and payment lists.
"""

from libs.result import Result, Return, Error
from src.app.services.access import AccessScope
from src.app.repositories.allocation_repository import AllocationRepository
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.payment_repository import PaymentRepository
from src.domain.errors import LedgerError, NotFound
from src.domain.invoice import InvoiceStatus
from src.domain.money import ZERO, to_money
from .dtos import InvoiceLedgerSummaryDTO, PaymentBalanceDTO, PaymentSummaryDTO
from .errors import ledger_error


class GetInvoiceSummary:
    """
    Totals, payments applied and balance across the caller's invoices, plus a
    count per status. Void invoices contribute nothing but their count.
    """

    def __init__(self, invoice_repo: InvoiceRepository, allocation_repo: AllocationRepository):
        self.invoice_repo = invoice_repo
        self.allocation_repo = allocation_repo

    async def execute(self, scope: AccessScope) -> Result[InvoiceLedgerSummaryDTO]:
        try:
            invoices = await self.invoice_repo.list_live(invoice_ids=scope.invoice_filter)
            applied = await self.allocation_repo.applied_by_invoice([i.id for i in invoices])

            total = payments = balance = ZERO
            counts = {s.value: 0 for s in InvoiceStatus}
            for inv in invoices:
                status = InvoiceStatus(inv.status)
                counts[status.value] += 1
                if status == InvoiceStatus.VOID:
                    continue
                inv_total = to_money(inv.total)
                paid = applied.get(inv.id, ZERO)
                total += inv_total
                payments += paid
                balance += max(ZERO, inv_total - paid)

            return Return.ok(
                InvoiceLedgerSummaryDTO(total=total, payments=payments, balance=balance, status_counts=counts)
            )
        except Exception as e:
            return Return.err(
                Error(code="INVOICE_SUMMARY_FAILED", message="Failed to summarize invoices", reason=str(e))
            )


class GetPaymentSummary:
    """Applied and unapplied amounts across the caller's payments"""

    def __init__(self, payment_repo: PaymentRepository, allocation_repo: AllocationRepository):
        self.payment_repo = payment_repo
        self.allocation_repo = allocation_repo

    async def execute(self, scope: AccessScope) -> Result[PaymentSummaryDTO]:
        try:
            payments = await self.payment_repo.list_live(hotel_ids=scope.hotel_filter)
            applied = await self.allocation_repo.applied_by_payment([p.id for p in payments])

            rows = []
            for p in payments:
                amount = to_money(p.amount)
                used = applied.get(p.id, ZERO)
                rows.append(
                    PaymentBalanceDTO(payment_id=p.id, amount=amount, applied=used, remaining=amount - used)
                )

            amount_total = sum((r.amount for r in rows), ZERO)
            applied_total = sum((r.applied for r in rows), ZERO)
            return Return.ok(
                PaymentSummaryDTO(
                    amount=amount_total,
                    applied=applied_total,
                    unapplied=amount_total - applied_total,
                    with_allocations=sum(1 for r in rows if r.applied > ZERO),
                    unallocated=sum(1 for r in rows if r.applied <= ZERO),
                    payments=rows,
                )
            )
        except Exception as e:
            return Return.err(
                Error(code="PAYMENT_SUMMARY_FAILED", message="Failed to summarize payments", reason=str(e))
            )


class GetPaymentRemaining:
    """Unapplied room left on one payment"""

    def __init__(self, payment_repo: PaymentRepository, allocation_repo: AllocationRepository):
        self.payment_repo = payment_repo
        self.allocation_repo = allocation_repo

    async def execute(self, payment_id: int, scope: AccessScope) -> Result[PaymentBalanceDTO]:
        try:
            payment = await self.payment_repo.get_by_id(payment_id)
            if not payment:
                raise NotFound("payment", payment_id)
            scope.require_payment(payment_id, payment.hotel_id)

            applied = (await self.allocation_repo.applied_by_payment([payment_id])).get(payment_id, ZERO)
            amount = to_money(payment.amount)
            return Return.ok(
                PaymentBalanceDTO(payment_id=payment_id, amount=amount, applied=applied, remaining=amount - applied)
            )
        except LedgerError as e:
            return Return.err(ledger_error(e))
        except Exception as e:
            return Return.err(
                Error(code="PAYMENT_REMAINING_FAILED", message="Failed to load payment balance", reason=str(e))
            )
