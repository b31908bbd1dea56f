"""DeletePayment Use Case

Deleting a payment never cascades: its allocations must be removed first.
"""

import logging
from datetime import datetime
from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.access import AccessScope
from src.app.repositories.allocation_repository import AllocationRepository
from src.app.repositories.payment_repository import PaymentRepository
from src.domain.errors import HasAllocations, LedgerError, NotFound
from .dtos import DeletedEntityDTO
from .errors import failure, ledger_error

logger = logging.getLogger(__name__)


class DeletePayment:

    def __init__(
        self,
        uow: UnitOfWork,
        payment_repo: PaymentRepository,
        allocation_repo: AllocationRepository,
    ):
        self.uow = uow
        self.payment_repo = payment_repo
        self.allocation_repo = allocation_repo

    async def execute(self, payment_id: int, scope: AccessScope) -> Result[DeletedEntityDTO]:
        try:
            payment = await self.payment_repo.get_by_id(payment_id, for_update=True)
            if not payment:
                raise NotFound("payment", payment_id)
            scope.require_payment(payment_id, payment.hotel_id)

            allocations = await self.allocation_repo.list_active_by_payment(payment_id)
            if allocations:
                raise HasAllocations("payment", payment_id, len(allocations))

            payment.deleted_at = datetime.utcnow()
            await self.payment_repo.soft_delete(payment)

            await self.uow.commit()
            logger.info(f"Deleted payment {payment_id}")
            return Return.ok(DeletedEntityDTO(id=payment_id, deleted_at=payment.deleted_at))

        except LedgerError as e:
            await self.uow.rollback()
            logger.warning(f"Payment {payment_id} not deleted: {e.message}")
            return Return.err(ledger_error(e))
        except Exception as e:
            await self.uow.rollback()
            return Return.err(failure(e, "DELETE_PAYMENT_FAILED", "Failed to delete payment"))
