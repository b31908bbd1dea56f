"""Payment Repository Interface"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional
from src.domain.payment import Payment


class PaymentRepository(ABC):
    """Repository interface for Payment persistence"""

    @abstractmethod
    async def create(self, payment: Payment) -> Payment:
        pass

    @abstractmethod
    async def get_by_id(self, payment_id: int, for_update: bool = False) -> Optional[Payment]:
        """
        Retrieve a live payment by ID

        Args:
            payment_id: Payment ID
            for_update: If True, lock the row with SELECT FOR UPDATE
        """
        pass

    @abstractmethod
    async def soft_delete(self, payment: Payment) -> None:
        pass

    @abstractmethod
    async def list_live(self, hotel_ids: Optional[Iterable[int]] = None) -> List[Payment]:
        """List live payments; ``hotel_ids=None`` means every hotel"""
        pass
