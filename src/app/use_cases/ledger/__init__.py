"""Ledger use cases"""
from .create_invoice import CreateInvoice
from .record_payment import RecordPayment
from .apply_payment import ApplyPayment
from .remove_allocation import RemoveAllocation
from .update_total import UpdateTotal
from .void_invoice import VoidInvoice
from .delete_payment import DeletePayment
from .delete_invoice import DeleteInvoice
from .get_audit_log import GetAuditLog
from .get_aging_report import GetAgingReport
from .get_ledger_summary import GetInvoiceSummary, GetPaymentRemaining, GetPaymentSummary
from .reconcile_ledger import ReconcileLedger
from .retry import run_with_conflict_retry

__all__ = [
    "CreateInvoice",
    "RecordPayment",
    "ApplyPayment",
    "RemoveAllocation",
    "UpdateTotal",
    "VoidInvoice",
    "DeletePayment",
    "DeleteInvoice",
    "GetAuditLog",
    "GetAgingReport",
    "GetInvoiceSummary",
    "GetPaymentSummary",
    "GetPaymentRemaining",
    "ReconcileLedger",
    "run_with_conflict_retry",
]
