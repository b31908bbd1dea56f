"""SQLAlchemy Payment Repository Implementation"""

from typing import Iterable, List, Optional
from datetime import datetime
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.payment_repository import PaymentRepository
from src.domain.payment import Payment


class SqlAlchemyPaymentRepository(PaymentRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, payment: Payment) -> Payment:
        self.session.add(payment)
        await self.session.flush()
        await self.session.refresh(payment)
        return payment

    async def get_by_id(self, payment_id: int, for_update: bool = False) -> Optional[Payment]:
        stmt = select(Payment).where(Payment.id == payment_id, Payment.deleted_at.is_(None))

        if for_update:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def soft_delete(self, payment: Payment) -> None:
        now = datetime.utcnow()
        payment.deleted_at = payment.deleted_at or now
        payment.updated_at = now
        self.session.add(payment)
        await self.session.flush()

    async def list_live(self, hotel_ids: Optional[Iterable[int]] = None) -> List[Payment]:
        stmt = select(Payment).where(Payment.deleted_at.is_(None))

        if hotel_ids is not None:
            hotels = list(hotel_ids)
            if not hotels:
                return []
            stmt = stmt.where(Payment.hotel_id.in_(hotels))

        stmt = stmt.order_by(Payment.received_date.desc(), Payment.id.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
