"""SQLAlchemy Invoice Repository Implementation

Implements invoice persistence using SQLAlchemy async session.
Tombstoned rows (deleted_at set) are filtered out of every query.
"""

from typing import Iterable, List, Optional, Set
from datetime import datetime
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.invoice_repository import InvoiceRepository
from src.domain.invoice import Invoice


class SqlAlchemyInvoiceRepository(InvoiceRepository):
    """
    SQLAlchemy implementation of InvoiceRepository

    Features:
    - Pessimistic locking via SELECT FOR UPDATE
    - Multi-row locks taken in ascending ID order to avoid deadlocks
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, invoice: Invoice) -> Invoice:
        self.session.add(invoice)
        await self.session.flush()
        await self.session.refresh(invoice)
        return invoice

    async def get_by_id(self, invoice_id: int, for_update: bool = False) -> Optional[Invoice]:
        """
        Retrieve a live invoice by ID with optional row-level locking

        Args:
            invoice_id: Invoice ID
            for_update: If True, locks the row with SELECT FOR UPDATE

        Returns:
            Invoice if found and not tombstoned, None otherwise
        """
        stmt = select(Invoice).where(Invoice.id == invoice_id, Invoice.deleted_at.is_(None))

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_many_for_update(self, invoice_ids: Iterable[int]) -> List[Invoice]:
        ids = sorted(set(invoice_ids))
        if not ids:
            return []
        stmt = (
            select(Invoice)
            .where(Invoice.id.in_(ids), Invoice.deleted_at.is_(None))
            .order_by(Invoice.id)
            .with_for_update()
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update(self, invoice: Invoice) -> Invoice:
        invoice.updated_at = datetime.utcnow()
        self.session.add(invoice)
        await self.session.flush()
        return invoice

    async def list_live(
        self,
        invoice_ids: Optional[Iterable[int]] = None,
        hotel_id: Optional[int] = None,
    ) -> List[Invoice]:
        stmt = select(Invoice).where(Invoice.deleted_at.is_(None))

        if invoice_ids is not None:
            ids = list(invoice_ids)
            if not ids:
                return []
            stmt = stmt.where(Invoice.id.in_(ids))

        if hotel_id is not None:
            stmt = stmt.where(Invoice.hotel_id == hotel_id)

        stmt = stmt.order_by(Invoice.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_ids_by_hotels(self, hotel_ids: Iterable[int]) -> Set[int]:
        hotels = list(hotel_ids)
        if not hotels:
            return set()
        stmt = select(Invoice.id).where(Invoice.hotel_id.in_(hotels), Invoice.deleted_at.is_(None))
        result = await self.session.execute(stmt)
        return set(result.scalars().all())
