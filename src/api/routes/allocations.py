"""Allocation API Routes"""

from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.api.error import raise_for_error
from src.app.services.access import AccessScope
from src.app.use_cases.ledger import RemoveAllocation, run_with_conflict_retry
from src.app.use_cases.ledger.dtos import InvoiceBalanceDTO
from src.adapter.repositories import SqlAlchemyAllocationRepository, SqlAlchemyInvoiceRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import build_allocation_engine, get_access_scope, get_session

router = APIRouter(prefix="/ledger/allocations", tags=["Allocations"])


@router.delete("/{allocation_id}", response_model=InvoiceBalanceDTO)
async def remove_allocation(
    allocation_id: int,
    session: AsyncSession = Depends(get_session),
    scope: AccessScope = Depends(get_access_scope),
):
    """Remove one allocation and return the owning invoice's new balance and status."""
    use_case = RemoveAllocation(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyAllocationRepository(session),
        build_allocation_engine(session),
    )
    result = await run_with_conflict_retry(
        lambda: use_case.execute(allocation_id, scope), ApplicationConfig.CONFLICT_RETRY_ATTEMPTS
    )

    if result.is_err():
        raise_for_error(result.error)
    return result.value
