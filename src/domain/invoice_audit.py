"""Invoice Audit Domain Entity

Immutable append-only trail of every state-changing ledger operation.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import ForeignKey, JSON, String, Text
from src.domain.base import BaseModel, IdType


class AuditAction(str, Enum):
    CREATE_INVOICE = "create_invoice"
    UPDATE_TOTAL = "update_total"
    VOID_INVOICE = "void_invoice"
    PAYMENT_APPLIED = "payment_applied"
    STATUS_CHANGE = "status_change"


class InvoiceAudit(BaseModel, table=True):
    """
    Invoice Audit - One row per ledger mutation touching an invoice

    Domain Rules:
    - Written in the same transaction as the mutation it describes
    - Never updated or deleted
    """

    __tablename__ = "invoice_audit"
    __table_args__ = (
        Index('ix_invoice_audit_invoice_created', 'invoice_id', 'created_at'),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
    )

    invoice_id: int = Field(
        sa_column=Column(IdType, ForeignKey("invoices.id"), nullable=False),
    )

    action: AuditAction = Field(sa_column=Column(String(32), nullable=False))

    note: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    details: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))

    actor_id: Optional[str] = Field(default=None, sa_column=Column(String(64), nullable=True))

    created_at: datetime = Field(default_factory=datetime.utcnow)
