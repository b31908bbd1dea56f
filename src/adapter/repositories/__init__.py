from .invoice_repository import SqlAlchemyInvoiceRepository
from .payment_repository import SqlAlchemyPaymentRepository
from .allocation_repository import SqlAlchemyAllocationRepository
from .invoice_audit_repository import SqlAlchemyInvoiceAuditRepository
from .company_repository import SqlAlchemyCompanyRepository

__all__ = [
    "SqlAlchemyInvoiceRepository",
    "SqlAlchemyPaymentRepository",
    "SqlAlchemyAllocationRepository",
    "SqlAlchemyInvoiceAuditRepository",
    "SqlAlchemyCompanyRepository",
]
