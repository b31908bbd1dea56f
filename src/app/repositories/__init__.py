from .invoice_repository import InvoiceRepository
from .payment_repository import PaymentRepository
from .allocation_repository import AllocationRepository
from .invoice_audit_repository import InvoiceAuditRepository
from .company_repository import CompanyRepository

__all__ = [
    "InvoiceRepository",
    "PaymentRepository",
    "AllocationRepository",
    "InvoiceAuditRepository",
    "CompanyRepository",
]
