"""CreateInvoice Use Case

Opens a new stay invoice with balance equal to its total.
"""

import logging
from datetime import date
from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.access import AccessScope
from src.app.services.audit_trail import AuditTrail
from src.app.repositories.invoice_repository import InvoiceRepository
from src.domain.errors import LedgerError
from src.domain.invoice import Invoice
from src.domain.invoice_audit import AuditAction
from .dtos import CreateInvoiceCommandDTO, InvoiceResponseDTO
from .errors import failure, ledger_error
from .mappers import invoice_response

logger = logging.getLogger(__name__)


class CreateInvoice:
    """
    Use Case: Create an invoice

    Business Rules:
    1. The hotel must be inside the caller's scope
    2. check_out >= check_in; nights = whole days between them
    3. subtotal defaults to nights x rate_night; total = subtotal + tax
    4. Created with status=open and balance=total
    5. due_date defaults to issue_date + default_due_days
    6. One create_invoice audit event
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        audit_trail: AuditTrail,
        default_due_days: int = 30,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.audit_trail = audit_trail
        self.default_due_days = default_due_days

    async def execute(
        self, command: CreateInvoiceCommandDTO, scope: AccessScope
    ) -> Result[InvoiceResponseDTO]:
        try:
            scope.require_hotel(command.hotel_id)

            invoice = Invoice.open(
                hotel_id=command.hotel_id,
                issue_date=command.issue_date or date.today(),
                due_date=command.due_date,
                default_due_days=self.default_due_days,
                subtotal=command.subtotal,
                tax=command.tax,
                check_in=command.check_in,
                check_out=command.check_out,
                rate_night=command.rate_night,
                company_id=command.company_id,
                client_id=command.client_id,
                number=command.number,
                confirmation_no=command.confirmation_no,
                case_no=command.case_no,
                notes=command.notes,
            )
            invoice = await self.invoice_repo.create(invoice)

            await self.audit_trail.record(
                invoice.id,
                AuditAction.CREATE_INVOICE,
                details={
                    "number": invoice.number,
                    "hotel_id": invoice.hotel_id,
                    "company_id": invoice.company_id,
                    "client_id": invoice.client_id,
                    "nights": invoice.nights,
                    "total": str(invoice.total),
                },
                actor_id=scope.actor_id,
            )

            await self.uow.commit()
            logger.info(f"Created invoice {invoice.id} for hotel {invoice.hotel_id} total={invoice.total}")
            return Return.ok(invoice_response(invoice))

        except LedgerError as e:
            await self.uow.rollback()
            logger.warning(f"Invoice not created: {e.message}")
            return Return.err(ledger_error(e))
        except Exception as e:
            await self.uow.rollback()
            return Return.err(failure(e, "CREATE_INVOICE_FAILED", "Failed to create invoice"))
