"""SQLAlchemy Allocation Repository Implementation

Only rows with deleted_at IS NULL count as active.
"""

from decimal import Decimal
from typing import Dict, Iterable, List, Optional
from datetime import datetime
from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.allocation_repository import AllocationRepository
from src.domain.allocation import Allocation
from src.domain.money import to_money


class SqlAlchemyAllocationRepository(AllocationRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_many(self, allocations: List[Allocation]) -> List[Allocation]:
        self.session.add_all(allocations)
        await self.session.flush()
        for allocation in allocations:
            await self.session.refresh(allocation)
        return allocations

    async def get_active_by_id(self, allocation_id: int, for_update: bool = False) -> Optional[Allocation]:
        stmt = select(Allocation).where(
            Allocation.id == allocation_id, Allocation.deleted_at.is_(None)
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_active_by_invoice(self, invoice_id: int) -> List[Allocation]:
        stmt = (
            select(Allocation)
            .where(Allocation.invoice_id == invoice_id, Allocation.deleted_at.is_(None))
            .order_by(Allocation.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_active_by_payment(self, payment_id: int) -> List[Allocation]:
        stmt = (
            select(Allocation)
            .where(Allocation.payment_id == payment_id, Allocation.deleted_at.is_(None))
            .order_by(Allocation.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def soft_delete(self, allocations: List[Allocation]) -> None:
        now = datetime.utcnow()
        for allocation in allocations:
            allocation.deleted_at = now
            allocation.updated_at = now
            self.session.add(allocation)
        await self.session.flush()

    async def _applied_by(self, column, ids: Iterable[int]) -> Dict[int, Decimal]:
        keys = list(ids)
        if not keys:
            return {}
        stmt = (
            select(column, func.sum(Allocation.amount))
            .where(column.in_(keys), Allocation.deleted_at.is_(None))
            .group_by(column)
        )
        result = await self.session.execute(stmt)
        return {key: to_money(total) for key, total in result.all() if total is not None}

    async def applied_by_payment(self, payment_ids: Iterable[int]) -> Dict[int, Decimal]:
        return await self._applied_by(Allocation.payment_id, payment_ids)

    async def applied_by_invoice(self, invoice_ids: Iterable[int]) -> Dict[int, Decimal]:
        return await self._applied_by(Allocation.invoice_id, invoice_ids)
