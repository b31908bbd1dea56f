"""Audit Trail

Appends invoice audit events through the caller's session. The write is part
of the caller's unit of work; if it fails the whole operation rolls back.
"""

import logging
from typing import Any, Dict, List, Optional

from src.app.repositories.invoice_audit_repository import InvoiceAuditRepository
from src.domain.invoice_audit import AuditAction, InvoiceAudit

logger = logging.getLogger(__name__)


class AuditTrail:

    def __init__(self, audit_repo: InvoiceAuditRepository):
        self.audit_repo = audit_repo

    async def record(
        self,
        invoice_id: int,
        action: AuditAction,
        details: Optional[Dict[str, Any]] = None,
        actor_id: Optional[str] = None,
        note: Optional[str] = None,
    ) -> InvoiceAudit:
        event = InvoiceAudit(
            invoice_id=invoice_id,
            action=action,
            details=details or {},
            actor_id=actor_id,
            note=note,
        )
        event = await self.audit_repo.append(event)
        logger.debug(f"Audit {action.value} recorded for invoice {invoice_id}")
        return event

    async def query(self, invoice_id: int) -> List[InvoiceAudit]:
        return await self.audit_repo.list_by_invoice(invoice_id)
