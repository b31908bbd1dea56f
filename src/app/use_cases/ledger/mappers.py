"""Entity to DTO conversion shared by the ledger use cases"""

from src.domain.allocation import Allocation
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.invoice_audit import InvoiceAudit
from src.domain.ledger import LedgerState
from src.domain.money import to_money
from src.domain.payment import Payment
from .dtos import (
    AllocationDTO,
    AuditEventDTO,
    InvoiceBalanceDTO,
    InvoiceResponseDTO,
    PaymentResponseDTO,
)


def _value(enum_or_str) -> str:
    return getattr(enum_or_str, "value", enum_or_str)


def invoice_balance(invoice: Invoice, state: LedgerState) -> InvoiceBalanceDTO:
    return InvoiceBalanceDTO(
        invoice_id=invoice.id,
        total=to_money(invoice.total),
        paid_to_date=state.paid_to_date,
        balance=state.balance,
        status=InvoiceStatus(state.status).value,
    )


def invoice_response(invoice: Invoice) -> InvoiceResponseDTO:
    return InvoiceResponseDTO(
        id=invoice.id,
        hotel_id=invoice.hotel_id,
        company_id=invoice.company_id,
        client_id=invoice.client_id,
        number=invoice.number,
        issue_date=invoice.issue_date,
        due_date=invoice.due_date,
        check_in=invoice.check_in,
        check_out=invoice.check_out,
        nights=invoice.nights,
        rate_night=invoice.rate_night,
        subtotal=to_money(invoice.subtotal),
        tax=to_money(invoice.tax),
        total=to_money(invoice.total),
        balance=to_money(invoice.balance),
        status=_value(invoice.status),
        created_at=invoice.created_at,
    )


def allocation_response(allocation: Allocation) -> AllocationDTO:
    return AllocationDTO(
        id=allocation.id,
        payment_id=allocation.payment_id,
        invoice_id=allocation.invoice_id,
        amount=to_money(allocation.amount),
        created_at=allocation.created_at,
    )


def payment_response(payment: Payment) -> PaymentResponseDTO:
    return PaymentResponseDTO(
        id=payment.id,
        method=_value(payment.method),
        reference=payment.reference,
        amount=to_money(payment.amount),
        received_date=payment.received_date,
        check_date=payment.check_date,
        hotel_id=payment.hotel_id,
        created_at=payment.created_at,
    )


def audit_event(event: InvoiceAudit) -> AuditEventDTO:
    return AuditEventDTO(
        id=event.id,
        invoice_id=event.invoice_id,
        action=_value(event.action),
        note=event.note,
        details=event.details or {},
        actor_id=event.actor_id,
        created_at=event.created_at,
    )
