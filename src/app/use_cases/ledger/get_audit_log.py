"""GetAuditLog Use Case

Read-only: newest-first audit events for one invoice.
"""

from libs.result import Result, Return, Error
from src.app.services.access import AccessScope
from src.app.services.audit_trail import AuditTrail
from src.app.repositories.invoice_repository import InvoiceRepository
from src.domain.errors import LedgerError, NotFound
from .dtos import AuditLogResponseDTO
from .errors import ledger_error
from .mappers import audit_event


class GetAuditLog:

    def __init__(self, invoice_repo: InvoiceRepository, audit_trail: AuditTrail):
        self.invoice_repo = invoice_repo
        self.audit_trail = audit_trail

    async def execute(self, invoice_id: int, scope: AccessScope) -> Result[AuditLogResponseDTO]:
        try:
            scope.require_audit_reader()
            scope.require_invoice(invoice_id)
            invoice = await self.invoice_repo.get_by_id(invoice_id)
            if not invoice:
                raise NotFound("invoice", invoice_id)

            events = await self.audit_trail.query(invoice_id)
            return Return.ok(
                AuditLogResponseDTO(invoice_id=invoice_id, events=[audit_event(e) for e in events])
            )
        except LedgerError as e:
            return Return.err(ledger_error(e))
        except Exception as e:
            return Return.err(
                Error(code="GET_AUDIT_LOG_FAILED", message="Failed to load audit log", reason=str(e))
            )
