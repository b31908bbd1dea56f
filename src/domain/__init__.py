from .base import BaseModel
from .errors import (
    LedgerError,
    ValidationError,
    OverAllocation,
    InvoiceVoided,
    NotFound,
    Forbidden,
    HasAllocations,
    ConcurrencyConflict,
)
from .invoice import Invoice, InvoiceStatus
from .payment import Payment, PaymentMethod
from .allocation import Allocation
from .invoice_audit import InvoiceAudit, AuditAction
from .company import Company

__all__ = [
    "BaseModel",
    "LedgerError",
    "ValidationError",
    "OverAllocation",
    "InvoiceVoided",
    "NotFound",
    "Forbidden",
    "HasAllocations",
    "ConcurrencyConflict",
    "Invoice",
    "InvoiceStatus",
    "Payment",
    "PaymentMethod",
    "Allocation",
    "InvoiceAudit",
    "AuditAction",
    "Company",
]
