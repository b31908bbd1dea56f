"""Invoice Repository Interface

Defines the contract for invoice persistence operations.
Every read excludes tombstoned invoices.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Set
from src.domain.invoice import Invoice


class InvoiceRepository(ABC):
    """
    Repository interface for Invoice persistence

    Mutating ledger operations read invoices with ``for_update=True`` so the
    over-allocation check and the write happen against the same locked row.
    """

    @abstractmethod
    async def create(self, invoice: Invoice) -> Invoice:
        """
        Create a new invoice

        Args:
            invoice: Invoice entity to persist

        Returns:
            Created Invoice with generated ID
        """
        pass

    @abstractmethod
    async def get_by_id(self, invoice_id: int, for_update: bool = False) -> Optional[Invoice]:
        """
        Retrieve a live (non-tombstoned) invoice by ID

        Args:
            invoice_id: Invoice ID
            for_update: If True, lock the row with SELECT FOR UPDATE

        Returns:
            Invoice if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_many_for_update(self, invoice_ids: Iterable[int]) -> List[Invoice]:
        """
        Lock several live invoices, always in ascending ID order

        Returns:
            The invoices that exist, ordered by ID
        """
        pass

    @abstractmethod
    async def update(self, invoice: Invoice) -> Invoice:
        pass

    @abstractmethod
    async def list_live(
        self,
        invoice_ids: Optional[Iterable[int]] = None,
        hotel_id: Optional[int] = None,
    ) -> List[Invoice]:
        """
        List live invoices, optionally restricted to a set of IDs and one hotel
        """
        pass

    @abstractmethod
    async def list_ids_by_hotels(self, hotel_ids: Iterable[int]) -> Set[int]:
        """Resolve the live invoice IDs that belong to the given hotels"""
        pass
