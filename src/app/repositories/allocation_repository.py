"""Allocation Repository Interface

Allocations are looked up by foreign key only; neither invoices nor payments
hold a collection of them.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Dict, Iterable, List, Optional
from src.domain.allocation import Allocation


class AllocationRepository(ABC):
    """Repository interface for Allocation persistence"""

    @abstractmethod
    async def create_many(self, allocations: List[Allocation]) -> List[Allocation]:
        """Insert allocations and return them with generated IDs"""
        pass

    @abstractmethod
    async def get_active_by_id(self, allocation_id: int, for_update: bool = False) -> Optional[Allocation]:
        """Live allocation by ID; ``for_update`` locks the row"""
        pass

    @abstractmethod
    async def list_active_by_invoice(self, invoice_id: int) -> List[Allocation]:
        pass

    @abstractmethod
    async def list_active_by_payment(self, payment_id: int) -> List[Allocation]:
        pass

    @abstractmethod
    async def soft_delete(self, allocations: List[Allocation]) -> None:
        """Tombstone allocations; they stop counting towards any sum"""
        pass

    @abstractmethod
    async def applied_by_payment(self, payment_ids: Iterable[int]) -> Dict[int, Decimal]:
        """Sum of active allocations per payment"""
        pass

    @abstractmethod
    async def applied_by_invoice(self, invoice_ids: Iterable[int]) -> Dict[int, Decimal]:
        """Sum of active allocations per invoice"""
        pass
