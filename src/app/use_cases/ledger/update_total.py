"""UpdateTotal Use Case

Corrects an invoice's quoted total after the fact. Existing allocations are
left untouched; if they now exceed the new total the invoice simply reads as
paid with a zero balance.
"""

import logging
from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.access import AccessScope
from src.app.services.allocation_engine import AllocationEngine
from src.app.services.audit_trail import AuditTrail
from src.app.repositories.invoice_repository import InvoiceRepository
from src.domain.errors import InvoiceVoided, LedgerError, NotFound
from src.domain.invoice import InvoiceStatus
from src.domain.invoice_audit import AuditAction
from src.domain.money import to_money
from .dtos import InvoiceBalanceDTO, UpdateTotalCommandDTO
from .errors import failure, ledger_error
from .mappers import invoice_balance

logger = logging.getLogger(__name__)


class UpdateTotal:
    """
    Use Case: Adjust an invoice total

    Business Rules:
    1. new_total >= 0; subtotal becomes new_total and tax becomes 0
    2. balance = max(0, new_total - paid_to_date), status re-derived
    3. Lowering the total below paid_to_date is allowed (status=paid, balance=0)
    4. Void invoices cannot be re-totalled
    5. One update_total audit event with old and new totals
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        engine: AllocationEngine,
        audit_trail: AuditTrail,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.engine = engine
        self.audit_trail = audit_trail

    async def execute(
        self, command: UpdateTotalCommandDTO, scope: AccessScope
    ) -> Result[InvoiceBalanceDTO]:
        try:
            scope.require_invoice(command.invoice_id)
            invoice = await self.invoice_repo.get_by_id(command.invoice_id, for_update=True)
            if not invoice:
                raise NotFound("invoice", command.invoice_id)
            if invoice.status == InvoiceStatus.VOID:
                raise InvoiceVoided(invoice.id)

            old_total = to_money(invoice.total)
            invoice.set_total(command.new_total)
            state, _ = await self.engine.recompute_invoice(invoice)

            await self.audit_trail.record(
                invoice.id,
                AuditAction.UPDATE_TOTAL,
                details={
                    "old_total": str(old_total),
                    "new_total": str(to_money(invoice.total)),
                    "paid_to_date": str(state.paid_to_date),
                    "balance": str(state.balance),
                    "status": state.status.value,
                },
                actor_id=scope.actor_id,
            )

            await self.uow.commit()
            logger.info(
                f"Invoice {invoice.id} total {old_total} -> {invoice.total}; "
                f"balance={state.balance}, status={state.status.value}"
            )
            return Return.ok(invoice_balance(invoice, state))

        except LedgerError as e:
            await self.uow.rollback()
            logger.warning(f"Total of invoice {command.invoice_id} not updated: {e.message}")
            return Return.err(ledger_error(e))
        except Exception as e:
            await self.uow.rollback()
            return Return.err(failure(e, "UPDATE_TOTAL_FAILED", "Failed to update invoice total"))
