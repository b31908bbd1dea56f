"""Unit tests for ApplyPayment and RecordPayment use cases"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from sqlalchemy.exc import OperationalError

from src.app.services.allocation_engine import ApplyOutcome, InvoiceOutcome
from src.app.use_cases.ledger import ApplyPayment, RecordPayment
from src.app.use_cases.ledger.dtos import (
    AllocationTargetDTO,
    ApplyPaymentCommandDTO,
    RecordPaymentCommandDTO,
)
from src.domain.allocation import Allocation
from src.domain.errors import OverAllocation
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.ledger import LedgerState
from src.domain.payment import Payment


@pytest.fixture
def sample_payment():
    payment = Payment.record(method="ach", amount="100.00", received_date=date(2024, 2, 1))
    payment.id = 10
    payment.created_at = datetime(2024, 2, 1, 9, 0)
    return payment


@pytest.fixture
def sample_outcome():
    invoice = Invoice.open(hotel_id=1, issue_date=date(2024, 1, 1), subtotal="100.00")
    invoice.id = 1
    allocation = Allocation.link(payment_id=10, invoice_id=1, amount="60.00")
    allocation.id = 5
    state = LedgerState(paid_to_date=Decimal("60.00"), balance=Decimal("40.00"), status=InvoiceStatus.PARTIAL)
    return ApplyOutcome(
        allocations=[allocation],
        invoices=[InvoiceOutcome(invoice=invoice, state=state, previous_status=InvoiceStatus.OPEN)],
        payment_applied=Decimal("60.00"),
        payment_remaining=Decimal("40.00"),
    )


@pytest.fixture
def mock_payment_repo():
    return MagicMock()


@pytest.fixture
def mock_engine():
    return MagicMock()


@pytest.fixture
def apply_command():
    return ApplyPaymentCommandDTO(
        payment_id=10, allocations=[AllocationTargetDTO(invoice_id=1, amount=Decimal("60.00"))]
    )


@pytest.mark.asyncio
class TestApplyPayment:

    async def test_applies_and_commits(
        self, mock_uow, mock_payment_repo, mock_engine, sample_payment, sample_outcome, apply_command, system_scope
    ):
        mock_payment_repo.get_by_id = AsyncMock(return_value=sample_payment)
        mock_engine.apply = AsyncMock(return_value=sample_outcome)

        result = await ApplyPayment(mock_uow, mock_payment_repo, mock_engine).execute(apply_command, system_scope)

        assert result.is_ok()
        response = result.value
        assert response.payment_id == 10
        assert response.payment_remaining == Decimal("40.00")
        assert response.invoices[1].status == "partial"
        assert response.invoices[1].balance == Decimal("40.00")
        assert response.allocations[0].id == 5

        mock_payment_repo.get_by_id.assert_called_once_with(10, for_update=True)
        mock_engine.apply.assert_called_once_with(sample_payment, [(1, Decimal("60.00"))], system_scope)
        mock_uow.commit.assert_called_once()

    async def test_payment_not_found(self, mock_uow, mock_payment_repo, mock_engine, apply_command, system_scope):
        mock_payment_repo.get_by_id = AsyncMock(return_value=None)

        result = await ApplyPayment(mock_uow, mock_payment_repo, mock_engine).execute(apply_command, system_scope)

        assert result.is_err()
        assert result.error.code == "PAYMENT_NOT_FOUND"
        mock_uow.rollback.assert_called_once()
        mock_uow.commit.assert_not_called()

    async def test_over_allocation_rolls_back(
        self, mock_uow, mock_payment_repo, mock_engine, sample_payment, apply_command, system_scope
    ):
        mock_payment_repo.get_by_id = AsyncMock(return_value=sample_payment)
        mock_engine.apply = AsyncMock(
            side_effect=OverAllocation.invoice_total(1, Decimal("100.00"), Decimal("75.00"), Decimal("50.00"))
        )

        result = await ApplyPayment(mock_uow, mock_payment_repo, mock_engine).execute(apply_command, system_scope)

        assert result.is_err()
        assert result.error.code == "OVER_ALLOCATION"
        assert result.error.message == "Allocation exceeds invoice total by $25.00"
        assert result.error.details["invoice_id"] == 1
        mock_uow.rollback.assert_called_once()

    async def test_lock_error_becomes_concurrency_conflict(
        self, mock_uow, mock_payment_repo, mock_engine, apply_command, system_scope
    ):
        mock_payment_repo.get_by_id = AsyncMock(
            side_effect=OperationalError("SELECT ...", {}, Exception("database is locked"))
        )

        result = await ApplyPayment(mock_uow, mock_payment_repo, mock_engine).execute(apply_command, system_scope)

        assert result.is_err()
        assert result.error.code == "CONCURRENCY_CONFLICT"

    async def test_unexpected_error(self, mock_uow, mock_payment_repo, mock_engine, apply_command, system_scope):
        mock_payment_repo.get_by_id = AsyncMock(side_effect=RuntimeError("boom"))

        result = await ApplyPayment(mock_uow, mock_payment_repo, mock_engine).execute(apply_command, system_scope)

        assert result.error.code == "APPLY_PAYMENT_FAILED"
        assert result.error.reason == "boom"

    async def test_payment_from_other_hotel_is_forbidden(
        self, mock_uow, mock_payment_repo, mock_engine, sample_payment, apply_command, manager_scope
    ):
        sample_payment.hotel_id = 2
        mock_payment_repo.get_by_id = AsyncMock(return_value=sample_payment)
        mock_engine.apply = AsyncMock()

        result = await ApplyPayment(mock_uow, mock_payment_repo, mock_engine).execute(apply_command, manager_scope)

        assert result.error.code == "FORBIDDEN"
        assert result.error.message == "Payment 10 belongs to hotel 2, outside your access scope"
        mock_engine.apply.assert_not_called()
        mock_uow.rollback.assert_called_once()

    async def test_hotel_less_payment_needs_unrestricted_scope(
        self, mock_uow, mock_payment_repo, mock_engine, sample_payment, sample_outcome, apply_command,
        manager_scope, system_scope
    ):
        mock_payment_repo.get_by_id = AsyncMock(return_value=sample_payment)
        mock_engine.apply = AsyncMock(return_value=sample_outcome)

        scoped = await ApplyPayment(mock_uow, mock_payment_repo, mock_engine).execute(apply_command, manager_scope)
        unrestricted = await ApplyPayment(mock_uow, mock_payment_repo, mock_engine).execute(apply_command, system_scope)

        assert scoped.error.code == "FORBIDDEN"
        assert unrestricted.is_ok()
        mock_engine.apply.assert_called_once()


@pytest.mark.asyncio
class TestRecordPayment:

    async def test_records_with_warnings(self, mock_uow, mock_payment_repo, mock_engine, system_scope):
        async def _create(payment):
            payment.id = 11
            return payment

        mock_payment_repo.create = AsyncMock(side_effect=_create)
        mock_engine.apply = AsyncMock()
        command = RecordPaymentCommandDTO(method="check", amount=Decimal("250.00"), received_date=date(2024, 2, 1))

        result = await RecordPayment(mock_uow, mock_payment_repo, mock_engine).execute(command, system_scope)

        assert result.is_ok()
        assert result.value.payment.id == 11
        assert result.value.payment.method == "check"
        assert result.value.applied is None
        assert result.value.warnings == ["No check reference provided"]
        mock_engine.apply.assert_not_called()
        mock_uow.commit.assert_called_once()

    async def test_records_and_applies_in_one_commit(
        self, mock_uow, mock_payment_repo, mock_engine, sample_payment, sample_outcome, system_scope
    ):
        mock_payment_repo.create = AsyncMock(return_value=sample_payment)
        mock_engine.apply = AsyncMock(return_value=sample_outcome)
        command = RecordPaymentCommandDTO(
            method="ach",
            amount=Decimal("100.00"),
            received_date=date(2024, 2, 1),
            allocations=[AllocationTargetDTO(invoice_id=1, amount=Decimal("60.00"))],
        )

        result = await RecordPayment(mock_uow, mock_payment_repo, mock_engine).execute(command, system_scope)

        assert result.is_ok()
        assert result.value.applied.payment_applied == Decimal("60.00")
        mock_uow.commit.assert_called_once()

    async def test_invalid_amount(self, mock_uow, mock_payment_repo, mock_engine, system_scope):
        mock_payment_repo.create = AsyncMock()
        command = RecordPaymentCommandDTO(method="ach", amount=Decimal("0"), received_date=date(2024, 2, 1))

        result = await RecordPayment(mock_uow, mock_payment_repo, mock_engine).execute(command, system_scope)

        assert result.error.code == "VALIDATION_ERROR"
        mock_payment_repo.create.assert_not_called()

    async def test_hotel_outside_scope(self, mock_uow, mock_payment_repo, mock_engine, manager_scope):
        mock_payment_repo.create = AsyncMock()
        command = RecordPaymentCommandDTO(
            method="ach", amount=Decimal("10"), received_date=date(2024, 2, 1), hotel_id=9
        )

        result = await RecordPayment(mock_uow, mock_payment_repo, mock_engine).execute(command, manager_scope)

        assert result.error.code == "FORBIDDEN"
        mock_payment_repo.create.assert_not_called()

    async def test_scoped_caller_must_name_a_hotel(self, mock_uow, mock_payment_repo, mock_engine, manager_scope):
        mock_payment_repo.create = AsyncMock()
        command = RecordPaymentCommandDTO(method="ach", amount=Decimal("10"), received_date=date(2024, 2, 1))

        result = await RecordPayment(mock_uow, mock_payment_repo, mock_engine).execute(command, manager_scope)

        assert result.error.code == "FORBIDDEN"
        assert result.error.message == "Payment has no hotel and is outside your access scope"
        mock_payment_repo.create.assert_not_called()
