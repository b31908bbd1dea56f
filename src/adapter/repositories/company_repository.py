"""SQLAlchemy Company Repository Implementation"""

from typing import Dict, Iterable
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.company_repository import CompanyRepository
from src.domain.company import Company


class SqlAlchemyCompanyRepository(CompanyRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_names(self, company_ids: Iterable[int]) -> Dict[int, str]:
        ids = list(company_ids)
        if not ids:
            return {}
        stmt = select(Company.id, Company.name).where(Company.id.in_(ids))
        result = await self.session.execute(stmt)
        return {cid: name for cid, name in result.all()}
