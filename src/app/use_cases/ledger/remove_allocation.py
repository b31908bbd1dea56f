"""RemoveAllocation Use Case

Manual reallocation correction: tombstones one allocation and re-derives the
owning invoice. No audit event is written for this path.
"""

import logging
from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.access import AccessScope
from src.app.services.allocation_engine import AllocationEngine
from src.app.repositories.allocation_repository import AllocationRepository
from src.app.repositories.invoice_repository import InvoiceRepository
from src.domain.errors import LedgerError, NotFound
from .dtos import InvoiceBalanceDTO
from .errors import failure, ledger_error
from .mappers import invoice_balance

logger = logging.getLogger(__name__)


class RemoveAllocation:

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        allocation_repo: AllocationRepository,
        engine: AllocationEngine,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.allocation_repo = allocation_repo
        self.engine = engine

    async def execute(self, allocation_id: int, scope: AccessScope) -> Result[InvoiceBalanceDTO]:
        try:
            allocation = await self.allocation_repo.get_active_by_id(allocation_id)
            if not allocation:
                raise NotFound("allocation", allocation_id)

            scope.require_invoice(allocation.invoice_id)
            invoice = await self.invoice_repo.get_by_id(allocation.invoice_id, for_update=True)
            if not invoice:
                raise NotFound("invoice", allocation.invoice_id)

            # A concurrent void may have tombstoned the row before the invoice lock
            allocation = await self.allocation_repo.get_active_by_id(allocation_id, for_update=True)
            if not allocation:
                raise NotFound("allocation", allocation_id)

            await self.allocation_repo.soft_delete([allocation])
            state, _ = await self.engine.recompute_invoice(invoice)

            await self.uow.commit()
            logger.info(
                f"Removed allocation {allocation_id} ({allocation.amount}) from invoice {invoice.id}; "
                f"balance={state.balance}, status={state.status.value}"
            )
            return Return.ok(invoice_balance(invoice, state))

        except LedgerError as e:
            await self.uow.rollback()
            logger.warning(f"Allocation {allocation_id} not removed: {e.message}")
            return Return.err(ledger_error(e))
        except Exception as e:
            await self.uow.rollback()
            return Return.err(failure(e, "REMOVE_ALLOCATION_FAILED", "Failed to remove allocation"))
