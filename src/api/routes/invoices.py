"""Invoice API Routes

FastAPI routes for invoice creation and reconciliation (total adjustment,
void, delete) and the per-invoice audit log.
"""

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.api.error import raise_for_error
from src.api.schemas.ledger_request import (
    CreateInvoiceRequestSchema,
    UpdateTotalRequestSchema,
    VoidInvoiceRequestSchema,
)
from src.app.services.access import AccessScope
from src.app.services.audit_trail import AuditTrail
from src.app.use_cases.ledger import (
    CreateInvoice,
    DeleteInvoice,
    GetAuditLog,
    GetInvoiceSummary,
    UpdateTotal,
    VoidInvoice,
    run_with_conflict_retry,
)
from src.app.use_cases.ledger.dtos import (
    AuditLogResponseDTO,
    CreateInvoiceCommandDTO,
    DeletedEntityDTO,
    InvoiceBalanceDTO,
    InvoiceLedgerSummaryDTO,
    InvoiceResponseDTO,
    UpdateTotalCommandDTO,
    VoidInvoiceCommandDTO,
    VoidInvoiceResponseDTO,
)
from src.adapter.repositories import (
    SqlAlchemyAllocationRepository,
    SqlAlchemyInvoiceAuditRepository,
    SqlAlchemyInvoiceRepository,
)
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import build_allocation_engine, get_access_scope, get_session

router = APIRouter(prefix="/ledger/invoices", tags=["Invoices"])


@router.post("", response_model=InvoiceResponseDTO, status_code=status.HTTP_201_CREATED)
async def create_invoice(
    request: CreateInvoiceRequestSchema,
    session: AsyncSession = Depends(get_session),
    scope: AccessScope = Depends(get_access_scope),
):
    """
    Create an invoice for a stay.

    `subtotal` defaults to nights x `rate_night`; the invoice starts open with
    balance equal to its total.

    **Returns:**
    - 201: Invoice created
    - 400: Invalid request parameters
    - 403: Hotel outside the caller's scope
    """
    use_case = CreateInvoice(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyInvoiceRepository(session),
        AuditTrail(SqlAlchemyInvoiceAuditRepository(session)),
        default_due_days=ApplicationConfig.DEFAULT_DUE_DAYS,
    )
    result = await use_case.execute(CreateInvoiceCommandDTO(**request.model_dump()), scope)

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.get("/summary", response_model=InvoiceLedgerSummaryDTO)
async def invoice_summary(
    session: AsyncSession = Depends(get_session),
    scope: AccessScope = Depends(get_access_scope),
):
    """Totals, payments applied, balance and status counts across visible invoices."""
    use_case = GetInvoiceSummary(
        SqlAlchemyInvoiceRepository(session), SqlAlchemyAllocationRepository(session)
    )
    result = await use_case.execute(scope)

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.patch("/{invoice_id}/total", response_model=InvoiceBalanceDTO)
async def update_total(
    invoice_id: int,
    request: UpdateTotalRequestSchema,
    session: AsyncSession = Depends(get_session),
    scope: AccessScope = Depends(get_access_scope),
):
    """
    Adjust an invoice total.

    Existing allocations are kept. A total below the amount already paid
    leaves the invoice paid with a zero balance.

    **Returns:**
    - 200: New balance and status
    - 403: Invoice outside the caller's scope
    - 404: Invoice not found
    - 409: Invoice is void
    """
    use_case = UpdateTotal(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyInvoiceRepository(session),
        build_allocation_engine(session),
        AuditTrail(SqlAlchemyInvoiceAuditRepository(session)),
    )
    command = UpdateTotalCommandDTO(invoice_id=invoice_id, new_total=request.new_total)
    result = await run_with_conflict_retry(
        lambda: use_case.execute(command, scope), ApplicationConfig.CONFLICT_RETRY_ATTEMPTS
    )

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.post("/{invoice_id}/void", response_model=VoidInvoiceResponseDTO)
async def void_invoice(
    invoice_id: int,
    request: VoidInvoiceRequestSchema = VoidInvoiceRequestSchema(),
    session: AsyncSession = Depends(get_session),
    scope: AccessScope = Depends(get_access_scope),
):
    """
    Void an invoice.

    All allocations on the invoice are released back to their payments.
    Voiding cannot be undone.
    """
    use_case = VoidInvoice(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyAllocationRepository(session),
        AuditTrail(SqlAlchemyInvoiceAuditRepository(session)),
    )
    command = VoidInvoiceCommandDTO(invoice_id=invoice_id, reason=request.reason)
    result = await run_with_conflict_retry(
        lambda: use_case.execute(command, scope), ApplicationConfig.CONFLICT_RETRY_ATTEMPTS
    )

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.delete("/{invoice_id}", response_model=DeletedEntityDTO)
async def delete_invoice(
    invoice_id: int,
    session: AsyncSession = Depends(get_session),
    scope: AccessScope = Depends(get_access_scope),
):
    """Tombstone an invoice that has no active allocations."""
    use_case = DeleteInvoice(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyAllocationRepository(session),
    )
    result = await use_case.execute(invoice_id, scope)

    if result.is_err():
        raise_for_error(result.error)
    return result.value


@router.get("/{invoice_id}/audit", response_model=AuditLogResponseDTO)
async def invoice_audit_log(
    invoice_id: int,
    session: AsyncSession = Depends(get_session),
    scope: AccessScope = Depends(get_access_scope),
):
    """Audit events for an invoice, newest first. Managers and admins only."""
    use_case = GetAuditLog(
        SqlAlchemyInvoiceRepository(session),
        AuditTrail(SqlAlchemyInvoiceAuditRepository(session)),
    )
    result = await use_case.execute(invoice_id, scope)

    if result.is_err():
        raise_for_error(result.error)
    return result.value
