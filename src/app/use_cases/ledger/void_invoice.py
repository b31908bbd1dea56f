"""VoidInvoice Use Case

Voids an invoice and releases every allocation on it. The parent payments
are untouched and regain room to be applied elsewhere. There is no un-void.
"""

import logging
from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.access import AccessScope
from src.app.services.audit_trail import AuditTrail
from src.app.repositories.allocation_repository import AllocationRepository
from src.app.repositories.invoice_repository import InvoiceRepository
from src.domain.errors import InvoiceVoided, LedgerError, NotFound
from src.domain.invoice import InvoiceStatus
from src.domain.invoice_audit import AuditAction
from src.domain.money import ZERO, money_sum, to_money
from .dtos import RemovedAllocationDTO, VoidInvoiceCommandDTO, VoidInvoiceResponseDTO
from .errors import failure, ledger_error

logger = logging.getLogger(__name__)


class VoidInvoice:
    """
    Use Case: Void an invoice

    Business Rules:
    1. All active allocations on the invoice are tombstoned
    2. subtotal = tax = total = balance = 0, status = void
    3. Voiding is terminal; voiding twice is rejected
    4. One void_invoice audit event; the optional reason is its note
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        allocation_repo: AllocationRepository,
        audit_trail: AuditTrail,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.allocation_repo = allocation_repo
        self.audit_trail = audit_trail

    async def execute(
        self, command: VoidInvoiceCommandDTO, scope: AccessScope
    ) -> Result[VoidInvoiceResponseDTO]:
        try:
            scope.require_invoice(command.invoice_id)
            invoice = await self.invoice_repo.get_by_id(command.invoice_id, for_update=True)
            if not invoice:
                raise NotFound("invoice", command.invoice_id)
            if invoice.status == InvoiceStatus.VOID:
                raise InvoiceVoided(invoice.id)

            allocations = await self.allocation_repo.list_active_by_invoice(invoice.id)
            if allocations:
                await self.allocation_repo.soft_delete(allocations)
            released = money_sum(a.amount for a in allocations)
            old_total = to_money(invoice.total)

            invoice.subtotal = ZERO
            invoice.tax = ZERO
            invoice.total = ZERO
            invoice.balance = ZERO
            invoice.status = InvoiceStatus.VOID
            await self.invoice_repo.update(invoice)

            removed = [
                RemovedAllocationDTO(
                    allocation_id=a.id, payment_id=a.payment_id, amount=to_money(a.amount)
                )
                for a in allocations
            ]
            note = (command.reason or "").strip() or None
            await self.audit_trail.record(
                invoice.id,
                AuditAction.VOID_INVOICE,
                details={
                    "old_total": str(old_total),
                    "released": str(released),
                    "removed_allocations": [
                        {"allocation_id": r.allocation_id, "payment_id": r.payment_id, "amount": str(r.amount)}
                        for r in removed
                    ],
                },
                actor_id=scope.actor_id,
                note=note,
            )

            await self.uow.commit()
            logger.info(
                f"Voided invoice {invoice.id}; released {released} from {len(removed)} allocation(s)"
            )
            return Return.ok(
                VoidInvoiceResponseDTO(
                    invoice_id=invoice.id,
                    balance=ZERO,
                    status=InvoiceStatus.VOID.value,
                    removed_allocations=removed,
                )
            )

        except LedgerError as e:
            await self.uow.rollback()
            logger.warning(f"Invoice {command.invoice_id} not voided: {e.message}")
            return Return.err(ledger_error(e))
        except Exception as e:
            await self.uow.rollback()
            return Return.err(failure(e, "VOID_INVOICE_FAILED", "Failed to void invoice"))
