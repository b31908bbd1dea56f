"""Unit tests for Payment and Allocation domain entities"""

import pytest
from datetime import date
from decimal import Decimal

from src.domain.allocation import Allocation
from src.domain.errors import ValidationError
from src.domain.payment import Payment, PaymentMethod


class TestPaymentRecord:

    def test_record_valid_payment(self):
        payment = Payment.record(method="check", amount="500", received_date=date(2024, 4, 2), reference=" 10442 ")

        assert payment.method == PaymentMethod.CHECK
        assert payment.amount == Decimal("500.00")
        assert payment.reference == "10442"

    @pytest.mark.parametrize("amount", ["0", "-10", "abc"])
    def test_rejects_non_positive_or_invalid_amount(self, amount):
        with pytest.raises(ValidationError) as exc_info:
            Payment.record(method="ach", amount=amount, received_date=date(2024, 4, 2))
        assert exc_info.value.field == "amount"

    def test_rejects_unknown_method(self):
        with pytest.raises(ValidationError) as exc_info:
            Payment.record(method="bitcoin", amount="5", received_date=date(2024, 4, 2))
        assert exc_info.value.field == "method"


class TestReferenceWarnings:

    def test_check_without_reference_warns(self):
        payment = Payment.record(method="check", amount="5", received_date=date(2024, 4, 2))
        assert payment.reference_warnings() == ["No check reference provided"]

    def test_card_reference_must_be_four_digits(self):
        payment = Payment.record(method="card", amount="5", received_date=date(2024, 4, 2), reference="12345")
        assert payment.reference_warnings() == ["Card reference is not 4 digits"]

    def test_clean_references_have_no_warnings(self):
        card = Payment.record(method="card", amount="5", received_date=date(2024, 4, 2), reference="4242")
        ach = Payment.record(method="ach", amount="5", received_date=date(2024, 4, 2))

        assert card.reference_warnings() == []
        assert ach.reference_warnings() == []


class TestAllocationLink:

    def test_link_quantizes_amount(self):
        allocation = Allocation.link(payment_id=1, invoice_id=2, amount="10.5")

        assert allocation.amount == Decimal("10.50")
        assert allocation.is_active

    @pytest.mark.parametrize("amount", ["0", "-1"])
    def test_rejects_non_positive_amount(self, amount):
        with pytest.raises(ValidationError):
            Allocation.link(payment_id=1, invoice_id=2, amount=amount)
