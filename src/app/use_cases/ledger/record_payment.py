"""RecordPayment Use Case

Records a standalone payment and optionally applies it in the same
transaction.
"""

import logging
from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.access import AccessScope
from src.app.services.allocation_engine import AllocationEngine
from src.app.repositories.payment_repository import PaymentRepository
from src.domain.errors import LedgerError
from src.domain.payment import Payment, PaymentMethod
from .apply_payment import to_apply_response
from .dtos import RecordPaymentCommandDTO, RecordPaymentResponseDTO
from .errors import failure, ledger_error
from .mappers import payment_response

logger = logging.getLogger(__name__)


class RecordPayment:
    """
    Use Case: Record a payment

    Business Rules:
    1. amount > 0 and method is one of check, ach, card, other
    2. A missing check number or a card reference that is not 4 digits is a
       warning, not an error
    3. Allocations supplied with the payment follow ApplyPayment's rules and
       commit together with the payment
    4. Scoped callers must record the payment against one of their hotels
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
        self, command: RecordPaymentCommandDTO, scope: AccessScope
    ) -> Result[RecordPaymentResponseDTO]:
        try:
            payment = Payment.record(
                method=command.method,
                amount=command.amount,
                received_date=command.received_date,
                reference=command.reference,
                check_date=command.check_date,
                hotel_id=command.hotel_id,
            )
            scope.require_payment(None, payment.hotel_id)

            payment = await self.payment_repo.create(payment)

            applied = None
            if command.allocations:
                outcome = await self.engine.apply(
                    payment,
                    [(t.invoice_id, t.amount) for t in command.allocations],
                    scope,
                )
                applied = to_apply_response(payment.id, outcome)

            await self.uow.commit()
            logger.info(f"Recorded payment {payment.id} ({PaymentMethod(payment.method).value}) for {payment.amount}")

            return Return.ok(
                RecordPaymentResponseDTO(
                    payment=payment_response(payment),
                    applied=applied,
                    warnings=payment.reference_warnings(),
                )
            )

        except LedgerError as e:
            await self.uow.rollback()
            logger.warning(f"Payment not recorded: {e.message}")
            return Return.err(ledger_error(e))
        except Exception as e:
            await self.uow.rollback()
            return Return.err(failure(e, "RECORD_PAYMENT_FAILED", "Failed to record payment"))
