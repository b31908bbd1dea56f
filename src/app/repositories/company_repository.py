"""Company Repository Interface"""

from abc import ABC, abstractmethod
from typing import Dict, Iterable


class CompanyRepository(ABC):

    @abstractmethod
    async def get_names(self, company_ids: Iterable[int]) -> Dict[int, str]:
        """Map company IDs to display names; unknown IDs are omitted"""
        pass
