from .unit_of_work import UnitOfWork
from .access import AccessScope, Role
from .audit_trail import AuditTrail
from .allocation_engine import AllocationEngine, ApplyOutcome, InvoiceOutcome

__all__ = [
    "UnitOfWork",
    "AccessScope",
    "Role",
    "AuditTrail",
    "AllocationEngine",
    "ApplyOutcome",
    "InvoiceOutcome",
]
