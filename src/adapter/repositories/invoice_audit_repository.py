"""SQLAlchemy Invoice Audit Repository Implementation"""

from typing import List
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.invoice_audit_repository import InvoiceAuditRepository
from src.domain.invoice_audit import InvoiceAudit


class SqlAlchemyInvoiceAuditRepository(InvoiceAuditRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def append(self, event: InvoiceAudit) -> InvoiceAudit:
        self.session.add(event)
        await self.session.flush()
        return event

    async def list_by_invoice(self, invoice_id: int) -> List[InvoiceAudit]:
        stmt = (
            select(InvoiceAudit)
            .where(InvoiceAudit.invoice_id == invoice_id)
            .order_by(InvoiceAudit.created_at.desc(), InvoiceAudit.id.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
