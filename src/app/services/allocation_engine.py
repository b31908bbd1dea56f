"""Allocation Engine

Validates and writes allocations, then re-derives balance and status for
every invoice it touched. The engine never commits: the calling use case owns
the unit of work, so allocations, invoice updates and audit events land in
one transaction.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Sequence, Tuple

from src.app.repositories.allocation_repository import AllocationRepository
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.services.access import AccessScope
from src.app.services.audit_trail import AuditTrail
from src.domain.allocation import Allocation
from src.domain.errors import InvoiceVoided, NotFound, OverAllocation, ValidationError
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.invoice_audit import AuditAction
from src.domain.ledger import LedgerState, apply_state, recompute
from src.domain.money import ZERO, MoneyLike, money_sum, to_money
from src.domain.payment import Payment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvoiceOutcome:
    invoice: Invoice
    state: LedgerState
    previous_status: InvoiceStatus


@dataclass(frozen=True)
class ApplyOutcome:
    allocations: List[Allocation]
    invoices: List[InvoiceOutcome]
    payment_applied: Decimal
    payment_remaining: Decimal


class AllocationEngine:

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        allocation_repo: AllocationRepository,
        audit_trail: AuditTrail,
    ):
        self.invoice_repo = invoice_repo
        self.allocation_repo = allocation_repo
        self.audit_trail = audit_trail

    async def apply(
        self,
        payment: Payment,
        targets: Sequence[Tuple[int, MoneyLike]],
        scope: AccessScope,
    ) -> ApplyOutcome:
        """
        Apply part of ``payment`` to each (invoice_id, amount) target

        The payment row must already be locked by the caller. Invoices are
        locked here in ascending ID order. Any violation raises before a
        single row is written.
        """
        if not targets:
            raise ValidationError("allocations", "at least one allocation is required")

        requested: Dict[int, Decimal] = {}
        for invoice_id, amount in targets:
            # Validates amount > 0 per target
            link = Allocation.link(payment_id=payment.id, invoice_id=invoice_id, amount=amount)
            requested[invoice_id] = requested.get(invoice_id, ZERO) + link.amount

        for invoice_id in requested:
            scope.require_invoice(invoice_id)

        invoices = await self.invoice_repo.get_many_for_update(sorted(requested))
        by_id = {inv.id: inv for inv in invoices}
        for invoice_id in requested:
            if invoice_id not in by_id:
                raise NotFound("invoice", invoice_id)

        payment_amount = to_money(payment.amount)
        payment_applied = money_sum(
            a.amount for a in await self.allocation_repo.list_active_by_payment(payment.id)
        )
        request_total = money_sum(requested.values())
        if payment_applied + request_total > payment_amount:
            raise OverAllocation.payment_amount(payment.id, payment_amount, payment_applied, request_total)

        paid_by_invoice: Dict[int, List[Decimal]] = {}
        for invoice_id in sorted(requested):
            invoice = by_id[invoice_id]
            if invoice.status == InvoiceStatus.VOID:
                raise InvoiceVoided(invoice_id)
            amounts = [
                to_money(a.amount)
                for a in await self.allocation_repo.list_active_by_invoice(invoice_id)
            ]
            allocated = money_sum(amounts)
            total = to_money(invoice.total)
            if allocated + requested[invoice_id] > total:
                raise OverAllocation.invoice_total(invoice_id, total, allocated, requested[invoice_id])
            paid_by_invoice[invoice_id] = amounts

        new_allocations = [
            Allocation.link(payment_id=payment.id, invoice_id=invoice_id, amount=amount)
            for invoice_id, amount in targets
        ]
        created = await self.allocation_repo.create_many(new_allocations)

        outcomes = []
        for invoice_id in sorted(requested):
            invoice = by_id[invoice_id]
            mine = [a for a in created if a.invoice_id == invoice_id]
            previous = InvoiceStatus(invoice.status)
            state = recompute(invoice, paid_by_invoice[invoice_id] + [a.amount for a in mine])
            changed = apply_state(invoice, state)
            await self.invoice_repo.update(invoice)

            await self.audit_trail.record(
                invoice_id,
                AuditAction.PAYMENT_APPLIED,
                details={
                    "payment_id": payment.id,
                    "method": getattr(payment.method, "value", payment.method),
                    "reference": payment.reference,
                    "amount": str(requested[invoice_id]),
                    "allocation_ids": [a.id for a in mine],
                    "paid_to_date": str(state.paid_to_date),
                    "balance": str(state.balance),
                },
                actor_id=scope.actor_id,
            )
            if changed:
                await self.audit_trail.record(
                    invoice_id,
                    AuditAction.STATUS_CHANGE,
                    details={"from": previous.value, "to": state.status.value},
                    actor_id=scope.actor_id,
                )
            outcomes.append(InvoiceOutcome(invoice=invoice, state=state, previous_status=previous))

        applied_after = payment_applied + request_total
        logger.info(
            f"Applied {request_total} of payment {payment.id} to "
            f"{len(outcomes)} invoice(s); remaining={payment_amount - applied_after}"
        )
        return ApplyOutcome(
            allocations=created,
            invoices=outcomes,
            payment_applied=applied_after,
            payment_remaining=payment_amount - applied_after,
        )

    async def recompute_invoice(self, invoice: Invoice) -> Tuple[LedgerState, bool]:
        """Re-derive balance/status from the invoice's active allocations and persist"""
        allocations = await self.allocation_repo.list_active_by_invoice(invoice.id)
        state = recompute(invoice, [a.amount for a in allocations])
        changed = apply_state(invoice, state)
        await self.invoice_repo.update(invoice)
        return state, changed
