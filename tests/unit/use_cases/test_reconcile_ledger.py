"""Unit tests for ReconcileLedger use case"""

import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.ledger import ReconcileLedger
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.payment import Payment


def _invoice(invoice_id, total, balance, status):
    invoice = Invoice.open(hotel_id=1, issue_date=date(2024, 1, 1), subtotal=total)
    invoice.id = invoice_id
    invoice.balance = Decimal(balance)
    invoice.status = status
    return invoice


@pytest.fixture
def repos():
    invoice_repo, payment_repo, allocation_repo = MagicMock(), MagicMock(), MagicMock()
    payment = Payment.record(method="ach", amount="50", received_date=date(2024, 2, 1))
    payment.id = 9
    payment_repo.list_live = AsyncMock(return_value=[payment])
    allocation_repo.applied_by_payment = AsyncMock(return_value={9: Decimal("50.00")})
    return invoice_repo, payment_repo, allocation_repo


@pytest.mark.asyncio
class TestReconcileLedger:

    async def test_balanced_ledger(self, repos):
        invoice_repo, payment_repo, allocation_repo = repos
        invoice_repo.list_live = AsyncMock(
            return_value=[
                _invoice(1, "100.00", "50.00", InvoiceStatus.PARTIAL),
                _invoice(2, "0.00", "0.00", InvoiceStatus.VOID),
            ]
        )
        allocation_repo.applied_by_invoice = AsyncMock(return_value={1: Decimal("50.00")})

        result = await ReconcileLedger(invoice_repo, payment_repo, allocation_repo).execute()

        assert result.is_ok()
        assert result.value.total_invoices_checked == 2
        assert result.value.total_payments_checked == 1
        assert result.value.discrepancies_found == 0

    async def test_detects_stale_balance_and_over_applied_payment(self, repos):
        invoice_repo, payment_repo, allocation_repo = repos
        invoice_repo.list_live = AsyncMock(return_value=[_invoice(1, "100.00", "100.00", InvoiceStatus.OPEN)])
        allocation_repo.applied_by_invoice = AsyncMock(return_value={1: Decimal("30.00")})
        allocation_repo.applied_by_payment = AsyncMock(return_value={9: Decimal("60.00")})

        result = await ReconcileLedger(invoice_repo, payment_repo, allocation_repo).execute()

        response = result.value
        assert response.discrepancies_found == 2
        stale = response.invoice_discrepancies[0]
        assert stale.expected_balance == Decimal("70.00")
        assert stale.expected_status == "partial"
        assert response.payment_discrepancies[0].applied == Decimal("60.00")

    async def test_repository_failure(self, repos):
        invoice_repo, payment_repo, allocation_repo = repos
        invoice_repo.list_live = AsyncMock(side_effect=RuntimeError("db down"))

        result = await ReconcileLedger(invoice_repo, payment_repo, allocation_repo).execute()

        assert result.error.code == "RECONCILIATION_FAILED"
