"""Unit tests for UpdateTotal, VoidInvoice and RemoveAllocation use cases"""

import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.ledger import RemoveAllocation, UpdateTotal, VoidInvoice
from src.app.use_cases.ledger.dtos import UpdateTotalCommandDTO, VoidInvoiceCommandDTO
from src.domain.allocation import Allocation
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.invoice_audit import AuditAction
from src.domain.ledger import LedgerState


def _invoice(invoice_id=1, total="100.00", status=InvoiceStatus.OPEN):
    invoice = Invoice.open(hotel_id=1, issue_date=date(2024, 1, 1), subtotal=total)
    invoice.id = invoice_id
    invoice.status = status
    return invoice


def _allocation(allocation_id, payment_id, amount, invoice_id=1):
    allocation = Allocation.link(payment_id=payment_id, invoice_id=invoice_id, amount=amount)
    allocation.id = allocation_id
    return allocation


@pytest.fixture
def mock_invoice_repo():
    repo = MagicMock()
    repo.update = AsyncMock(side_effect=lambda inv: inv)
    return repo


@pytest.fixture
def mock_allocation_repo():
    repo = MagicMock()
    repo.soft_delete = AsyncMock()
    return repo


@pytest.fixture
def mock_audit_trail():
    trail = MagicMock()
    trail.record = AsyncMock()
    return trail


@pytest.fixture
def mock_engine():
    return MagicMock()


@pytest.mark.asyncio
class TestUpdateTotal:

    async def test_lowering_total_below_paid_clamps_balance(
        self, mock_uow, mock_invoice_repo, mock_engine, mock_audit_trail, system_scope
    ):
        """
        Given: a $100 invoice fully paid
        When: the total is lowered to $80
        Then: status stays paid, balance is 0, an update_total event records both totals
        """
        invoice = _invoice(status=InvoiceStatus.PAID)
        mock_invoice_repo.get_by_id = AsyncMock(return_value=invoice)
        mock_engine.recompute_invoice = AsyncMock(
            return_value=(
                LedgerState(paid_to_date=Decimal("100.00"), balance=Decimal("0.00"), status=InvoiceStatus.PAID),
                False,
            )
        )

        use_case = UpdateTotal(mock_uow, mock_invoice_repo, mock_engine, mock_audit_trail)
        result = await use_case.execute(UpdateTotalCommandDTO(invoice_id=1, new_total=Decimal("80")), system_scope)

        assert result.is_ok()
        assert result.value.total == Decimal("80.00")
        assert result.value.balance == Decimal("0.00")
        assert result.value.status == "paid"
        assert invoice.tax == Decimal("0.00")

        args, kwargs = mock_audit_trail.record.call_args
        assert args[1] == AuditAction.UPDATE_TOTAL
        assert kwargs["details"]["old_total"] == "100.00"
        assert kwargs["details"]["new_total"] == "80.00"
        mock_invoice_repo.get_by_id.assert_called_once_with(1, for_update=True)
        mock_uow.commit.assert_called_once()

    async def test_void_invoice_cannot_be_retotalled(
        self, mock_uow, mock_invoice_repo, mock_engine, mock_audit_trail, system_scope
    ):
        mock_invoice_repo.get_by_id = AsyncMock(return_value=_invoice(total="0", status=InvoiceStatus.VOID))

        use_case = UpdateTotal(mock_uow, mock_invoice_repo, mock_engine, mock_audit_trail)
        result = await use_case.execute(UpdateTotalCommandDTO(invoice_id=1, new_total=Decimal("5")), system_scope)

        assert result.error.code == "INVOICE_VOID"
        mock_audit_trail.record.assert_not_called()

    async def test_negative_total(self, mock_uow, mock_invoice_repo, mock_engine, mock_audit_trail, system_scope):
        mock_invoice_repo.get_by_id = AsyncMock(return_value=_invoice())

        use_case = UpdateTotal(mock_uow, mock_invoice_repo, mock_engine, mock_audit_trail)
        result = await use_case.execute(UpdateTotalCommandDTO(invoice_id=1, new_total=Decimal("-1")), system_scope)

        assert result.error.code == "VALIDATION_ERROR"
        mock_uow.rollback.assert_called_once()

    async def test_not_found(self, mock_uow, mock_invoice_repo, mock_engine, mock_audit_trail, system_scope):
        mock_invoice_repo.get_by_id = AsyncMock(return_value=None)

        use_case = UpdateTotal(mock_uow, mock_invoice_repo, mock_engine, mock_audit_trail)
        result = await use_case.execute(UpdateTotalCommandDTO(invoice_id=7, new_total=Decimal("5")), system_scope)

        assert result.error.code == "INVOICE_NOT_FOUND"

    async def test_outside_scope_is_checked_before_loading(
        self, mock_uow, mock_invoice_repo, mock_engine, mock_audit_trail, manager_scope
    ):
        mock_invoice_repo.get_by_id = AsyncMock()

        use_case = UpdateTotal(mock_uow, mock_invoice_repo, mock_engine, mock_audit_trail)
        result = await use_case.execute(UpdateTotalCommandDTO(invoice_id=50, new_total=Decimal("5")), manager_scope)

        assert result.error.code == "FORBIDDEN"
        mock_invoice_repo.get_by_id.assert_not_called()


@pytest.mark.asyncio
class TestVoidInvoice:

    async def test_void_releases_allocations(
        self, mock_uow, mock_invoice_repo, mock_allocation_repo, mock_audit_trail, system_scope
    ):
        """Scenario D: two allocations of $40 and $35 are released on void"""
        invoice = _invoice(status=InvoiceStatus.PARTIAL)
        invoice.balance = Decimal("25.00")
        allocations = [_allocation(1, 10, "40.00"), _allocation(2, 11, "35.00")]
        mock_invoice_repo.get_by_id = AsyncMock(return_value=invoice)
        mock_allocation_repo.list_active_by_invoice = AsyncMock(return_value=allocations)

        use_case = VoidInvoice(mock_uow, mock_invoice_repo, mock_allocation_repo, mock_audit_trail)
        result = await use_case.execute(VoidInvoiceCommandDTO(invoice_id=1, reason="duplicate"), system_scope)

        assert result.is_ok()
        assert result.value.status == "void"
        assert result.value.balance == Decimal("0.00")
        assert [(r.payment_id, r.amount) for r in result.value.removed_allocations] == [
            (10, Decimal("40.00")), (11, Decimal("35.00"))
        ]
        assert invoice.status == InvoiceStatus.VOID
        assert invoice.total == Decimal("0.00")
        mock_allocation_repo.soft_delete.assert_called_once_with(allocations)

        args, kwargs = mock_audit_trail.record.call_args
        assert args[1] == AuditAction.VOID_INVOICE
        assert kwargs["note"] == "duplicate"
        assert kwargs["details"]["released"] == "75.00"

    async def test_second_void_is_rejected(
        self, mock_uow, mock_invoice_repo, mock_allocation_repo, mock_audit_trail, system_scope
    ):
        mock_invoice_repo.get_by_id = AsyncMock(return_value=_invoice(total="0", status=InvoiceStatus.VOID))

        use_case = VoidInvoice(mock_uow, mock_invoice_repo, mock_allocation_repo, mock_audit_trail)
        result = await use_case.execute(VoidInvoiceCommandDTO(invoice_id=1), system_scope)

        assert result.error.code == "INVOICE_VOID"
        mock_allocation_repo.soft_delete.assert_not_called()

    async def test_audit_failure_rolls_back(
        self, mock_uow, mock_invoice_repo, mock_allocation_repo, mock_audit_trail, system_scope
    ):
        mock_invoice_repo.get_by_id = AsyncMock(return_value=_invoice())
        mock_allocation_repo.list_active_by_invoice = AsyncMock(return_value=[])
        mock_audit_trail.record = AsyncMock(side_effect=RuntimeError("audit table gone"))

        use_case = VoidInvoice(mock_uow, mock_invoice_repo, mock_allocation_repo, mock_audit_trail)
        result = await use_case.execute(VoidInvoiceCommandDTO(invoice_id=1), system_scope)

        assert result.error.code == "VOID_INVOICE_FAILED"
        mock_uow.rollback.assert_called_once()
        mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
class TestRemoveAllocation:

    async def test_remove_returns_invoice_to_partial(
        self, mock_uow, mock_invoice_repo, mock_allocation_repo, mock_engine, system_scope
    ):
        allocation = _allocation(3, 10, "30.00")
        invoice = _invoice(status=InvoiceStatus.PAID)
        mock_allocation_repo.get_active_by_id = AsyncMock(return_value=allocation)
        mock_invoice_repo.get_by_id = AsyncMock(return_value=invoice)
        mock_engine.recompute_invoice = AsyncMock(
            return_value=(
                LedgerState(paid_to_date=Decimal("70.00"), balance=Decimal("30.00"), status=InvoiceStatus.PARTIAL),
                True,
            )
        )

        use_case = RemoveAllocation(mock_uow, mock_invoice_repo, mock_allocation_repo, mock_engine)
        result = await use_case.execute(3, system_scope)

        assert result.is_ok()
        assert result.value.status == "partial"
        assert result.value.balance == Decimal("30.00")
        mock_allocation_repo.soft_delete.assert_called_once_with([allocation])
        mock_uow.commit.assert_called_once()

    async def test_unknown_allocation(
        self, mock_uow, mock_invoice_repo, mock_allocation_repo, mock_engine, system_scope
    ):
        mock_allocation_repo.get_active_by_id = AsyncMock(return_value=None)

        use_case = RemoveAllocation(mock_uow, mock_invoice_repo, mock_allocation_repo, mock_engine)
        result = await use_case.execute(3, system_scope)

        assert result.error.code == "ALLOCATION_NOT_FOUND"

    async def test_allocation_released_before_invoice_lock(
        self, mock_uow, mock_invoice_repo, mock_allocation_repo, mock_engine, system_scope
    ):
        """A void that lands between the first read and the invoice lock wins"""
        mock_allocation_repo.get_active_by_id = AsyncMock(side_effect=[_allocation(3, 10, "30.00"), None])
        mock_invoice_repo.get_by_id = AsyncMock(return_value=_invoice(status=InvoiceStatus.VOID))
        mock_engine.recompute_invoice = AsyncMock()

        use_case = RemoveAllocation(mock_uow, mock_invoice_repo, mock_allocation_repo, mock_engine)
        result = await use_case.execute(3, system_scope)

        assert result.error.code == "ALLOCATION_NOT_FOUND"
        mock_allocation_repo.get_active_by_id.assert_called_with(3, for_update=True)
        mock_allocation_repo.soft_delete.assert_not_called()
        mock_engine.recompute_invoice.assert_not_called()
        mock_uow.rollback.assert_called_once()
