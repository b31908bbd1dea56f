"""Invoice Audit Repository Interface

Append-only: there is deliberately no update or delete method.
"""

from abc import ABC, abstractmethod
from typing import List
from src.domain.invoice_audit import InvoiceAudit


class InvoiceAuditRepository(ABC):

    @abstractmethod
    async def append(self, event: InvoiceAudit) -> InvoiceAudit:
        pass

    @abstractmethod
    async def list_by_invoice(self, invoice_id: int) -> List[InvoiceAudit]:
        """Events for one invoice, newest first"""
        pass
