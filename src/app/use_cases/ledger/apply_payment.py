"""ApplyPayment Use Case

Distributes an existing payment across one or more invoices.
"""

import logging
from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.access import AccessScope
from src.app.services.allocation_engine import AllocationEngine, ApplyOutcome
from src.app.repositories.payment_repository import PaymentRepository
from src.domain.errors import LedgerError, NotFound
from .dtos import ApplyPaymentCommandDTO, ApplyPaymentResponseDTO
from .errors import failure, ledger_error
from .mappers import allocation_response, invoice_balance

logger = logging.getLogger(__name__)


class ApplyPayment:
    """
    Use Case: Apply a payment to invoices

    Business Rules:
    1. Each target amount must be > 0
    2. Sum of active allocations per invoice never exceeds invoice.total
    3. Sum of active allocations per payment never exceeds payment.amount
    4. Void invoices accept no allocations
    5. Atomic: all targets are written or none are
    6. One payment_applied audit event per touched invoice
    7. The payment must belong to a hotel in the caller's scope

    Flow:
    1. Lock payment (SELECT FOR UPDATE)
    2. Lock invoices in ID order, validate both sum invariants
    3. Insert allocations, recompute balance/status, write audit events
    4. Commit
    """

    def __init__(
        self,
        uow: UnitOfWork,
        payment_repo: PaymentRepository,
        engine: AllocationEngine,
    ):
        self.uow = uow
        self.payment_repo = payment_repo
        self.engine = engine

    async def execute(
        self, command: ApplyPaymentCommandDTO, scope: AccessScope
    ) -> Result[ApplyPaymentResponseDTO]:
        try:
            payment = await self.payment_repo.get_by_id(command.payment_id, for_update=True)
            if not payment:
                raise NotFound("payment", command.payment_id)
            scope.require_payment(payment.id, payment.hotel_id)

            outcome = await self.engine.apply(
                payment,
                [(t.invoice_id, t.amount) for t in command.allocations],
                scope,
            )

            await self.uow.commit()
            return Return.ok(to_apply_response(payment.id, outcome))

        except LedgerError as e:
            await self.uow.rollback()
            logger.warning(f"Payment {command.payment_id} not applied: {e.message}")
            return Return.err(ledger_error(e))
        except Exception as e:
            await self.uow.rollback()
            return Return.err(failure(e, "APPLY_PAYMENT_FAILED", "Failed to apply payment"))


def to_apply_response(payment_id: int, outcome: ApplyOutcome) -> ApplyPaymentResponseDTO:
    return ApplyPaymentResponseDTO(
        payment_id=payment_id,
        allocations=[allocation_response(a) for a in outcome.allocations],
        invoices={o.invoice.id: invoice_balance(o.invoice, o.state) for o in outcome.invoices},
        payment_applied=outcome.payment_applied,
        payment_remaining=outcome.payment_remaining,
    )
