"""Payment API Routes

FastAPI routes for recording, applying and deleting payments.
"""

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.api.error import raise_for_error
from src.api.schemas.ledger_request import ApplyPaymentRequestSchema, RecordPaymentRequestSchema
from src.app.services.access import AccessScope
from src.app.use_cases.ledger import (
    ApplyPayment,
    DeletePayment,
    GetPaymentRemaining,
    GetPaymentSummary,
    RecordPayment,
    run_with_conflict_retry,
)
from src.app.use_cases.ledger.dtos import (
    AllocationTargetDTO,
    ApplyPaymentCommandDTO,
    ApplyPaymentResponseDTO,
    DeletedEntityDTO,
    PaymentBalanceDTO,
    PaymentSummaryDTO,
    RecordPaymentCommandDTO,
    RecordPaymentResponseDTO,
)
from src.adapter.repositories import SqlAlchemyAllocationRepository, SqlAlchemyPaymentRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import build_allocation_engine, get_access_scope, get_session

router = APIRouter(prefix="/ledger/payments", tags=["Payments"])


def _targets(allocations):
    return [AllocationTargetDTO(invoice_id=a.invoice_id, amount=a.amount) for a in allocations]


@router.post("", response_model=RecordPaymentResponseDTO, status_code=status.HTTP_201_CREATED)
async def record_payment(
    request: RecordPaymentRequestSchema,
    session: AsyncSession = Depends(get_session),
    scope: AccessScope = Depends(get_access_scope),
):
    """
    Record a payment, optionally applying it to invoices in the same request.

    **Returns:**
    - 201: Payment recorded (with any reference warnings)
    - 403: Hotel or invoice outside the caller's scope
    - 422: Allocations exceed the payment amount or an invoice total
    """
    use_case = RecordPayment(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyPaymentRepository(session),
        build_allocation_engine(session),
    )
    command = RecordPaymentCommandDTO(
        method=request.method,
        amount=request.amount,
        received_date=request.received_date,
        reference=request.reference,
        check_date=request.check_date,
        hotel_id=request.hotel_id,
        allocations=_targets(request.allocations),
    )
    result = await run_with_conflict_retry(
        lambda: use_case.execute(command, scope), ApplicationConfig.CONFLICT_RETRY_ATTEMPTS
    )

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.get("/summary", response_model=PaymentSummaryDTO)
async def payment_summary(
    session: AsyncSession = Depends(get_session),
    scope: AccessScope = Depends(get_access_scope),
):
    """Applied and unapplied amounts per payment and in total."""
    use_case = GetPaymentSummary(
        SqlAlchemyPaymentRepository(session), SqlAlchemyAllocationRepository(session)
    )
    result = await use_case.execute(scope)

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.get("/{payment_id}/remaining", response_model=PaymentBalanceDTO)
async def payment_remaining(
    payment_id: int,
    session: AsyncSession = Depends(get_session),
    scope: AccessScope = Depends(get_access_scope),
):
    """Amount of the payment not yet applied to any invoice."""
    use_case = GetPaymentRemaining(
        SqlAlchemyPaymentRepository(session), SqlAlchemyAllocationRepository(session)
    )
    result = await use_case.execute(payment_id, scope)

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.post("/{payment_id}/apply", response_model=ApplyPaymentResponseDTO)
async def apply_payment(
    payment_id: int,
    request: ApplyPaymentRequestSchema,
    session: AsyncSession = Depends(get_session),
    scope: AccessScope = Depends(get_access_scope),
):
    """
    Apply an existing payment to one or more invoices.

    All allocations in the request are written together or not at all.

    **Returns:**
    - 200: New balance and status per invoice
    - 404: Payment or invoice not found
    - 409: Invoice is void
    - 422: Allocation exceeds the invoice total or the payment amount
    """
    use_case = ApplyPayment(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyPaymentRepository(session),
        build_allocation_engine(session),
    )
    command = ApplyPaymentCommandDTO(payment_id=payment_id, allocations=_targets(request.allocations))
    result = await run_with_conflict_retry(
        lambda: use_case.execute(command, scope), ApplicationConfig.CONFLICT_RETRY_ATTEMPTS
    )

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.delete("/{payment_id}", response_model=DeletedEntityDTO)
async def delete_payment(
    payment_id: int,
    session: AsyncSession = Depends(get_session),
    scope: AccessScope = Depends(get_access_scope),
):
    """
    Delete a payment. Fails with 409 while the payment still has allocations.
    """
    use_case = DeletePayment(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyPaymentRepository(session),
        SqlAlchemyAllocationRepository(session),
    )
    result = await use_case.execute(payment_id, scope)

    if result.is_err():
        raise_for_error(result.error)
    return result.value
