"""
Pydantic schemas for invoices and payments
Project: Auto Shop Manager
"""

import datetime
import uuid
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, computed_field, field_validator

from autoshop.schemas.common import ApiModel, CustomerSummary, TimestampedRead, reject_null
from autoshop.schemas.enums import InvoiceStatus, PaymentMethod, WorkOrderStatus

# Statuses an invoice can be given through an update
MANUAL_INVOICE_STATUSES = frozenset({
    InvoiceStatus.PENDING,
    InvoiceStatus.SENT,
    InvoiceStatus.OVERDUE,
    InvoiceStatus.VOID,
})


# ------------------------------------------------------------
# Payments
# ------------------------------------------------------------

class PaymentCreate(ApiModel):
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    method: PaymentMethod
    date: Optional[datetime.date] = Field(None, description="Defaults to today")
    reference: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None


class PaymentRead(TimestampedRead):
    invoice_id: uuid.UUID
    amount: Decimal
    method: PaymentMethod
    date: datetime.date
    reference: Optional[str] = None
    notes: Optional[str] = None


# ------------------------------------------------------------
# Invoices
# ------------------------------------------------------------

class InvoiceCreate(ApiModel):
    """Generates an invoice from a completed work order."""
    work_order_id: uuid.UUID
    due_date: Optional[datetime.date] = Field(None, description="Defaults to date + INVOICE_DUE_DAYS")
    notes: Optional[str] = None


class InvoiceUpdate(ApiModel):
    """Amounts are a snapshot and cannot be changed."""
    due_date: Optional[datetime.date] = None
    notes: Optional[str] = None
    status: Optional[InvoiceStatus] = None

    no_nulls = field_validator("due_date", "status")(reject_null)

    @field_validator("status")
    @classmethod
    def validate_manual_status(cls, v: Optional[InvoiceStatus]) -> Optional[InvoiceStatus]:
        if v is not None and v not in MANUAL_INVOICE_STATUSES:
            raise ValueError("PAID and PARTIALLY_PAID are set by recording payments")
        return v


class InvoiceSummary(TimestampedRead):
    invoice_number: str
    date: datetime.date
    due_date: datetime.date
    status: InvoiceStatus
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    notes: Optional[str] = None
    customer_id: uuid.UUID
    work_order_id: uuid.UUID
    payments: List[PaymentRead] = Field(default_factory=list)

    @computed_field
    @property
    def amount_paid(self) -> Decimal:
        return sum((p.amount for p in self.payments), Decimal("0"))

    @computed_field
    @property
    def balance_due(self) -> Decimal:
        return self.total - self.amount_paid


class InvoiceWorkOrder(ApiModel):
    id: uuid.UUID
    order_number: str
    status: WorkOrderStatus
    description: str


class InvoiceRead(InvoiceSummary):
    customer: CustomerSummary
    work_order: InvoiceWorkOrder
