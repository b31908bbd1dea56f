"""Request schemas for the Ledger API

Pydantic models for validating incoming HTTP requests.
"""

from datetime import date
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator, model_validator


class AllocationTargetSchema(BaseModel):
    invoice_id: int = Field(..., gt=0)

    amount: Decimal = Field(..., gt=0, decimal_places=2, description="Amount to apply (must be > 0)")


class CreateInvoiceRequestSchema(BaseModel):
    """
    Request schema for creating an invoice

    Used for POST /ledger/invoices endpoint.
    """

    hotel_id: int = Field(..., gt=0)
    company_id: Optional[int] = None
    client_id: Optional[int] = None
    number: Optional[str] = Field(default=None, max_length=50)
    confirmation_no: Optional[str] = Field(default=None, max_length=64)
    case_no: Optional[str] = Field(default=None, max_length=64)
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    rate_night: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    subtotal: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    tax: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)
    notes: Optional[str] = None

    @model_validator(mode="after")
    def validate_stay(self):
        if self.check_in and self.check_out and self.check_out < self.check_in:
            raise ValueError("check_out must not be earlier than check_in")
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "hotel_id": 1,
                "company_id": 7,
                "number": "INV-1042",
                "check_in": "2024-03-01",
                "check_out": "2024-03-05",
                "rate_night": "125.00",
            }
        }


class RecordPaymentRequestSchema(BaseModel):
    """
    Request schema for recording a payment

    Used for POST /ledger/payments endpoint.
    """

    method: str = Field(..., description="check, ach, card or other")
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    received_date: date
    reference: Optional[str] = Field(default=None, max_length=128)
    check_date: Optional[date] = None
    hotel_id: Optional[int] = None
    allocations: List[AllocationTargetSchema] = Field(default_factory=list)

    @field_validator('method')
    @classmethod
    def validate_method(cls, v):
        value = v.strip().lower()
        if value not in ("check", "ach", "card", "other"):
            raise ValueError("method must be one of check, ach, card, other")
        return value

    class Config:
        json_schema_extra = {
            "example": {
                "method": "check",
                "reference": "10442",
                "amount": "500.00",
                "received_date": "2024-04-02",
                "allocations": [{"invoice_id": 12, "amount": "500.00"}],
            }
        }


class ApplyPaymentRequestSchema(BaseModel):
    allocations: List[AllocationTargetSchema] = Field(..., min_length=1)


class UpdateTotalRequestSchema(BaseModel):
    new_total: Decimal = Field(..., ge=0, decimal_places=2)


class VoidInvoiceRequestSchema(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=1000)
