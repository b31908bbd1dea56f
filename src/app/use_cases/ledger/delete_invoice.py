"""DeleteInvoice Use Case

Tombstones an invoice. Like payments, an invoice with live allocations must
be cleared (or voided) first.
"""

import logging
from datetime import datetime
from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.access import AccessScope
from src.app.repositories.allocation_repository import AllocationRepository
from src.app.repositories.invoice_repository import InvoiceRepository
from src.domain.errors import HasAllocations, LedgerError, NotFound
from .dtos import DeletedEntityDTO
from .errors import failure, ledger_error

logger = logging.getLogger(__name__)


class DeleteInvoice:

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        allocation_repo: AllocationRepository,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.allocation_repo = allocation_repo

    async def execute(self, invoice_id: int, scope: AccessScope) -> Result[DeletedEntityDTO]:
        try:
            scope.require_invoice(invoice_id)
            invoice = await self.invoice_repo.get_by_id(invoice_id, for_update=True)
            if not invoice:
                raise NotFound("invoice", invoice_id)

            allocations = await self.allocation_repo.list_active_by_invoice(invoice_id)
            if allocations:
                raise HasAllocations("invoice", invoice_id, len(allocations))

            invoice.deleted_at = datetime.utcnow()
            await self.invoice_repo.update(invoice)

            await self.uow.commit()
            logger.info(f"Tombstoned invoice {invoice_id}")
            return Return.ok(DeletedEntityDTO(id=invoice_id, deleted_at=invoice.deleted_at))

        except LedgerError as e:
            await self.uow.rollback()
            logger.warning(f"Invoice {invoice_id} not deleted: {e.message}")
            return Return.err(ledger_error(e))
        except Exception as e:
            await self.uow.rollback()
            return Return.err(failure(e, "DELETE_INVOICE_FAILED", "Failed to delete invoice"))
