"""ReconcileLedger Use Case

Verifies the stored derived fields against the allocations they are derived
from, and every payment against its allocation ceiling.
"""

import logging
import time
from datetime import datetime
from libs.result import Result, Return, Error
from src.app.repositories.allocation_repository import AllocationRepository
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.payment_repository import PaymentRepository
from src.domain.invoice import InvoiceStatus
from src.domain.ledger import recompute
from src.domain.money import ZERO, to_money
from .dtos import InvoiceDiscrepancyDTO, PaymentDiscrepancyDTO, ReconciliationResultDTO

logger = logging.getLogger(__name__)


class ReconcileLedger:
    """
    Use Case: Reconcile invoice balances against allocations

    Business Rules:
    1. For each live invoice, recompute balance/status from active allocations
    2. Report any invoice whose stored balance or status differs
    3. Report any payment whose active allocations exceed its amount
    4. Does NOT modify any data (read-only reconciliation)
    """

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        payment_repo: PaymentRepository,
        allocation_repo: AllocationRepository,
    ):
        self.invoice_repo = invoice_repo
        self.payment_repo = payment_repo
        self.allocation_repo = allocation_repo

    async def execute(self) -> Result[ReconciliationResultDTO]:
        start_time = time.time()
        reconciliation_time = datetime.utcnow()

        try:
            logger.info("Starting invoice ledger reconciliation")

            invoices = await self.invoice_repo.list_live()
            applied_by_invoice = await self.allocation_repo.applied_by_invoice([i.id for i in invoices])

            invoice_discrepancies = []
            for invoice in invoices:
                expected = recompute(invoice, [applied_by_invoice.get(invoice.id, ZERO)])
                stored_balance = to_money(invoice.balance)
                stored_status = InvoiceStatus(invoice.status)
                if stored_balance != expected.balance or stored_status != expected.status:
                    invoice_discrepancies.append(
                        InvoiceDiscrepancyDTO(
                            invoice_id=invoice.id,
                            stored_balance=stored_balance,
                            expected_balance=expected.balance,
                            stored_status=stored_status.value,
                            expected_status=expected.status.value,
                        )
                    )
                    logger.warning(
                        f"Invoice {invoice.id} out of balance: "
                        f"stored={stored_balance}/{stored_status.value}, "
                        f"expected={expected.balance}/{expected.status.value}"
                    )

            payments = await self.payment_repo.list_live()
            applied_by_payment = await self.allocation_repo.applied_by_payment([p.id for p in payments])

            payment_discrepancies = []
            for payment in payments:
                amount = to_money(payment.amount)
                applied = applied_by_payment.get(payment.id, ZERO)
                if applied > amount:
                    payment_discrepancies.append(
                        PaymentDiscrepancyDTO(payment_id=payment.id, amount=amount, applied=applied)
                    )
                    logger.warning(f"Payment {payment.id} over-allocated: amount={amount}, applied={applied}")

            execution_time_ms = int((time.time() - start_time) * 1000)
            found = len(invoice_discrepancies) + len(payment_discrepancies)

            if found:
                logger.warning(
                    f"Reconciliation complete. Found {found} discrepancies across "
                    f"{len(invoices)} invoices and {len(payments)} payments in {execution_time_ms}ms"
                )
            else:
                logger.info(
                    f"Reconciliation complete. All {len(invoices)} invoices and "
                    f"{len(payments)} payments balanced in {execution_time_ms}ms"
                )

            return Return.ok(
                ReconciliationResultDTO(
                    total_invoices_checked=len(invoices),
                    total_payments_checked=len(payments),
                    discrepancies_found=found,
                    invoice_discrepancies=invoice_discrepancies,
                    payment_discrepancies=payment_discrepancies,
                    reconciliation_time=reconciliation_time,
                    execution_time_ms=execution_time_ms,
                )
            )

        except Exception as e:
            logger.error(f"Ledger reconciliation failed: {e}")
            return Return.err(
                Error(
                    code="RECONCILIATION_FAILED",
                    message="Failed to reconcile invoice ledger",
                    reason=str(e),
                )
            )
