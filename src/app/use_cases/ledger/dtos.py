"""Data Transfer Objects for Ledger Use Cases

Pydantic models for command inputs and response outputs. Money crosses this
boundary as Decimal with two decimal places.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class AllocationTargetDTO(BaseModel):
    """One (invoice_id, amount) pair of an ApplyPayment request"""

    invoice_id: int = Field(..., description="Invoice receiving the money")

    amount: Decimal = Field(..., description="Amount to apply (must be > 0)")


class CreateInvoiceCommandDTO(BaseModel):
    """
    Command DTO for creating an invoice

    ``subtotal`` may be omitted; it is then nights x rate_night.
    """

    hotel_id: int
    company_id: Optional[int] = None
    client_id: Optional[int] = None
    number: Optional[str] = None
    confirmation_no: Optional[str] = None
    case_no: Optional[str] = None
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    rate_night: Optional[Decimal] = None
    subtotal: Optional[Decimal] = None
    tax: Decimal = Decimal("0")
    notes: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "hotel_id": 1,
                "company_id": 7,
                "number": "INV-1042",
                "check_in": "2024-03-01",
                "check_out": "2024-03-05",
                "rate_night": "125.00",
                "due_date": "2024-04-04",
            }
        }


class RecordPaymentCommandDTO(BaseModel):
    """Command DTO for recording a payment, optionally applying it at once"""

    method: str = Field(..., description="check, ach, card or other")

    amount: Decimal = Field(..., description="Payment amount (must be > 0)")

    received_date: date

    reference: Optional[str] = Field(default=None, description="Check #, ACH id or card last 4")

    check_date: Optional[date] = None

    hotel_id: Optional[int] = None

    allocations: List[AllocationTargetDTO] = Field(default_factory=list)


class ApplyPaymentCommandDTO(BaseModel):
    payment_id: int

    allocations: List[AllocationTargetDTO] = Field(..., min_length=1)


class UpdateTotalCommandDTO(BaseModel):
    invoice_id: int

    new_total: Decimal


class VoidInvoiceCommandDTO(BaseModel):
    invoice_id: int

    reason: Optional[str] = None


class InvoiceBalanceDTO(BaseModel):
    """Balance and status of one invoice after a ledger operation"""

    invoice_id: int
    total: Decimal
    paid_to_date: Decimal
    balance: Decimal
    status: str


class InvoiceResponseDTO(BaseModel):
    id: int
    hotel_id: int
    company_id: Optional[int] = None
    client_id: Optional[int] = None
    number: Optional[str] = None
    issue_date: date
    due_date: date
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    nights: int
    rate_night: Optional[Decimal] = None
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    balance: Decimal
    status: str
    created_at: datetime


class AllocationDTO(BaseModel):
    id: int
    payment_id: int
    invoice_id: int
    amount: Decimal
    created_at: datetime


class ApplyPaymentResponseDTO(BaseModel):
    """
    Response DTO for ApplyPayment

    ``invoices`` maps every touched invoice to its new balance and status.
    """

    payment_id: int
    allocations: List[AllocationDTO]
    invoices: Dict[int, InvoiceBalanceDTO]
    payment_applied: Decimal
    payment_remaining: Decimal


class PaymentResponseDTO(BaseModel):
    id: int
    method: str
    reference: Optional[str] = None
    amount: Decimal
    received_date: date
    check_date: Optional[date] = None
    hotel_id: Optional[int] = None
    created_at: datetime


class RecordPaymentResponseDTO(BaseModel):
    payment: PaymentResponseDTO
    applied: Optional[ApplyPaymentResponseDTO] = None
    warnings: List[str] = Field(default_factory=list)


class RemovedAllocationDTO(BaseModel):
    allocation_id: int
    payment_id: int
    amount: Decimal


class VoidInvoiceResponseDTO(BaseModel):
    invoice_id: int
    balance: Decimal
    status: str
    removed_allocations: List[RemovedAllocationDTO]


class DeletedEntityDTO(BaseModel):
    id: int
    deleted_at: datetime


class AuditEventDTO(BaseModel):
    id: int
    invoice_id: int
    action: str
    note: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)
    actor_id: Optional[str] = None
    created_at: datetime


class AuditLogResponseDTO(BaseModel):
    invoice_id: int
    events: List[AuditEventDTO]


class AgingLineDTO(BaseModel):
    invoice_id: int
    number: Optional[str] = None
    hotel_id: int
    company: str
    due_date: date
    balance: Decimal
    age_days: int
    bucket: str


class AgingBucketDTO(BaseModel):
    label: str
    total: Decimal
    count: int
    invoice_ids: List[int] = Field(default_factory=list)


class CompanyAgingDTO(BaseModel):
    company: str
    count: int
    current: Decimal
    days_31_60: Decimal
    days_61_90: Decimal
    days_91_plus: Decimal
    total: Decimal


class CompanyBucketTotalDTO(BaseModel):
    company: str
    count: int
    total: Decimal


class AgingReportDTO(BaseModel):
    """
    Response DTO for the aging report

    ``buckets`` is always ordered Current -> 31-60 -> 61-90 -> 91+; Paid/Zero
    invoices appear only in ``lines``.
    """

    as_of: date
    buckets: List[AgingBucketDTO]
    grand_total: Decimal
    grand_count: int
    companies: List[CompanyAgingDTO]
    lines: List[AgingLineDTO]


class InvoiceLedgerSummaryDTO(BaseModel):
    total: Decimal
    payments: Decimal
    balance: Decimal
    status_counts: Dict[str, int]


class PaymentBalanceDTO(BaseModel):
    payment_id: int
    amount: Decimal
    applied: Decimal
    remaining: Decimal


class PaymentSummaryDTO(BaseModel):
    amount: Decimal
    applied: Decimal
    unapplied: Decimal
    with_allocations: int
    unallocated: int
    payments: List[PaymentBalanceDTO]


class InvoiceDiscrepancyDTO(BaseModel):
    invoice_id: int
    stored_balance: Decimal
    expected_balance: Decimal
    stored_status: str
    expected_status: str


class PaymentDiscrepancyDTO(BaseModel):
    payment_id: int
    amount: Decimal
    applied: Decimal


class ReconciliationResultDTO(BaseModel):
    """Result of a read-only ledger consistency check"""

    total_invoices_checked: int
    total_payments_checked: int
    discrepancies_found: int
    invoice_discrepancies: List[InvoiceDiscrepancyDTO] = Field(default_factory=list)
    payment_discrepancies: List[PaymentDiscrepancyDTO] = Field(default_factory=list)
    reconciliation_time: datetime
    execution_time_ms: int
