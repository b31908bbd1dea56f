"""Translation of ledger exceptions into Result errors"""

import logging
from typing import Optional

from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm.exc import StaleDataError

from libs.result import Error
from src.domain.errors import ConcurrencyConflict, LedgerError

logger = logging.getLogger(__name__)

# serialization_failure, deadlock_detected, lock_not_available
CONFLICT_SQLSTATES = {"40001", "40P01", "55P03"}


def as_conflict(exc: Exception) -> Optional[ConcurrencyConflict]:
    """Recognise database errors that mean another writer won the race"""
    if isinstance(exc, StaleDataError):
        return ConcurrencyConflict("Record was modified concurrently", reason=str(exc))
    if isinstance(exc, DBAPIError):
        orig = exc.orig
        sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
        if sqlstate in CONFLICT_SQLSTATES or "database is locked" in str(orig):
            return ConcurrencyConflict("Record is locked by another operation", reason=str(orig))
    return None


def ledger_error(exc: LedgerError) -> Error:
    details = {k: v for k, v in exc.details.items() if v is not None}
    return Error(code=exc.code, message=exc.message, reason=exc.reason, details=details)


def failure(exc: Exception, code: str, message: str) -> Error:
    """Error for an unexpected exception, unless it was a lock conflict"""
    conflict = as_conflict(exc)
    if conflict is not None:
        logger.warning(f"{code}: concurrency conflict: {conflict.reason}")
        return ledger_error(conflict)
    logger.error(f"{code}: {exc}")
    return Error(code=code, message=message, reason=str(exc))
