"""Ledger Error Taxonomy

Every rejected mutation is reported with a stable ``code`` and a message that
names the invariant that would have been violated.
"""

from decimal import Decimal
from typing import Any, Dict, Optional

from src.domain.money import format_money


class LedgerError(Exception):
    """Base class for all ledger errors"""

    code = "LEDGER_ERROR"
    retryable = False

    def __init__(self, message: str, reason: Optional[str] = None, **details: Any):
        super().__init__(message)
        self.message = message
        self.reason = reason
        self.details: Dict[str, Any] = details


class ValidationError(LedgerError):
    """Malformed input for a single field"""

    code = "VALIDATION_ERROR"

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}", reason=f"invalid field '{field}'", field=field)
        self.field = field


class OverAllocation(LedgerError):
    """An allocation would push a sum past its ceiling"""

    code = "OVER_ALLOCATION"

    @classmethod
    def invoice_total(cls, invoice_id: int, total: Decimal, allocated: Decimal, requested: Decimal):
        excess = allocated + requested - total
        return cls(
            f"Allocation exceeds invoice total by {format_money(excess)}",
            reason=(
                f"invoice_id={invoice_id}, total={total}, "
                f"already_allocated={allocated}, requested={requested}"
            ),
            invoice_id=invoice_id,
            excess=str(excess),
        )

    @classmethod
    def payment_amount(cls, payment_id: int, amount: Decimal, allocated: Decimal, requested: Decimal):
        excess = allocated + requested - amount
        return cls(
            f"Allocation exceeds payment amount by {format_money(excess)}",
            reason=(
                f"payment_id={payment_id}, amount={amount}, "
                f"already_allocated={allocated}, requested={requested}"
            ),
            payment_id=payment_id,
            excess=str(excess),
        )


class InvoiceVoided(LedgerError):
    code = "INVOICE_VOID"

    def __init__(self, invoice_id: int):
        super().__init__(
            f"Invoice {invoice_id} is void and cannot be changed",
            reason="void is irreversible",
            invoice_id=invoice_id,
        )


class NotFound(LedgerError):
    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(
            f"{entity.capitalize()} {entity_id} not found",
            reason=f"{entity} does not exist or was deleted",
        )
        self.code = f"{entity.upper()}_NOT_FOUND"


class Forbidden(LedgerError):
    code = "FORBIDDEN"


class HasAllocations(LedgerError):
    code = "HAS_ALLOCATIONS"

    def __init__(self, entity: str, entity_id: Any, count: int):
        super().__init__(
            f"{entity.capitalize()} {entity_id} still has {count} active allocation(s); remove them first",
            reason="allocations must be removed explicitly before delete",
            count=count,
        )


class ConcurrencyConflict(LedgerError):
    """Another writer changed the same invoice or payment; safe to retry once"""

    code = "CONCURRENCY_CONFLICT"
    retryable = True
