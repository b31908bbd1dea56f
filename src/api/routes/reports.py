"""Report API Routes

Read-only aging report endpoints.
"""

from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.api.error import raise_for_error
from src.app.services.access import AccessScope
from src.app.use_cases.ledger import GetAgingReport
from src.app.use_cases.ledger.dtos import AgingReportDTO, CompanyAgingDTO, CompanyBucketTotalDTO
from src.adapter.repositories import SqlAlchemyCompanyRepository, SqlAlchemyInvoiceRepository
from src.depends import get_access_scope, get_session

router = APIRouter(prefix="/ledger/reports", tags=["Reports"])


def _aging(session: AsyncSession) -> GetAgingReport:
    return GetAgingReport(
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyCompanyRepository(session),
        no_company_label=ApplicationConfig.AGING_NO_COMPANY_LABEL,
    )


@router.get("/aging", response_model=AgingReportDTO)
async def aging_report(
    as_of: Optional[date] = Query(default=None, description="Defaults to today"),
    hotel_id: Optional[int] = Query(default=None),
    session: AsyncSession = Depends(get_session),
    scope: AccessScope = Depends(get_access_scope),
):
    """
    Aging summary of open balances.

    Buckets are ordered Current (0-30), 31-60, 61-90, 91+. Fully paid invoices
    are listed as Paid/Zero but excluded from the totals.
    """
    result = await _aging(session).execute(scope, as_of=as_of, hotel_id=hotel_id)

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.get("/aging/companies", response_model=List[CompanyAgingDTO])
async def aging_by_company(
    as_of: Optional[date] = Query(default=None),
    hotel_id: Optional[int] = Query(default=None),
    session: AsyncSession = Depends(get_session),
    scope: AccessScope = Depends(get_access_scope),
):
    """Per-company totals across all buckets, largest balance first."""
    result = await _aging(session).execute(scope, as_of=as_of, hotel_id=hotel_id)

    if result.is_err():
        raise_for_error(result.error)
    return result.value.companies


@router.get("/aging/buckets/{bucket}/companies", response_model=List[CompanyBucketTotalDTO])
async def aging_bucket_companies(
    bucket: str,
    as_of: Optional[date] = Query(default=None),
    hotel_id: Optional[int] = Query(default=None),
    session: AsyncSession = Depends(get_session),
    scope: AccessScope = Depends(get_access_scope),
):
    """Company totals inside one aging bucket."""
    result = await _aging(session).bucket_companies(scope, bucket, as_of=as_of, hotel_id=hotel_id)

    if result.is_err():
        raise_for_error(result.error)
    return result.value
