"""
Pydantic schemas for work orders
Project: Auto Shop Manager

Request and response schemas for work orders and their line items.
"""

import datetime
import uuid
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, computed_field, field_validator, model_validator

from autoshop.core.calculations import (
    calculate_line_total,
    calculate_subtotal,
    calculate_tax,
    calculate_total,
    format_hours,
    round_money,
)
from autoshop.schemas.common import (
    ApiModel,
    CustomerSummary,
    PartSummary,
    TechnicianSummary,
    TimestampedRead,
    VehicleSummary,
    reject_null,
)
from autoshop.schemas.enums import LOCKED_WORK_ORDER_STATUSES, WorkOrderStatus
from autoshop.schemas.invoice import InvoiceSummary


# -------------------------------------------------------------------
# Line items
# -------------------------------------------------------------------

class LineItemBase(ApiModel):
    """Billable line: parts (quantity x unit price) and/or labor (hours x rate)."""
    description: str = Field(..., min_length=1, max_length=255)
    quantity: int = Field(default=1, ge=1, description="Units; consumed from stock when partId is set")
    unit_price: Decimal = Field(default=Decimal("0"), ge=0, max_digits=10, decimal_places=2)
    labor_hours: Optional[Decimal] = Field(None, ge=0, max_digits=6, decimal_places=2)
    labor_rate: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    part_id: Optional[uuid.UUID] = Field(None, description="Inventory item consumed by this line")


class LineItemInput(LineItemBase):
    """
    Line item as sent on create/update.

    On update, `id` identifies an existing line to keep (and modify);
    lines without `id` are new.
    """
    id: Optional[uuid.UUID] = None


class LineItemRead(LineItemBase, TimestampedRead):
    position: int
    part: Optional[PartSummary] = None

    @computed_field
    @property
    def line_total(self) -> Decimal:
        return round_money(
            calculate_line_total(self.quantity, self.unit_price, self.labor_hours, self.labor_rate)
        )

    @computed_field
    @property
    def labor_time(self) -> Optional[str]:
        """Labor hours as "1h 30m"; None on parts-only lines."""
        if not self.labor_hours:
            return None
        return format_hours(self.labor_hours)


# -------------------------------------------------------------------
# Work order requests
# -------------------------------------------------------------------

class WorkOrderCreate(ApiModel):
    description: str = Field(..., min_length=1)
    start_date: datetime.date
    customer_id: uuid.UUID
    vehicle_id: uuid.UUID
    technician_id: Optional[uuid.UUID] = None
    status: WorkOrderStatus = WorkOrderStatus.PENDING
    diagnostic_notes: Optional[str] = None
    completion_date: Optional[datetime.date] = None
    line_items: List[LineItemInput] = Field(default_factory=list)

    @field_validator("status")
    @classmethod
    def validate_initial_status(cls, v: WorkOrderStatus) -> WorkOrderStatus:
        if v.value in LOCKED_WORK_ORDER_STATUSES:
            raise ValueError("A new work order cannot start as invoiced or paid")
        return v

    @model_validator(mode="after")
    def validate_dates(self):
        if self.completion_date and self.completion_date < self.start_date:
            raise ValueError("completionDate cannot be before startDate")
        return self


class WorkOrderUpdate(ApiModel):
    """
    Partial update. When `lineItems` is present it replaces the whole set.
    """
    description: Optional[str] = Field(None, min_length=1)
    start_date: Optional[datetime.date] = None
    customer_id: Optional[uuid.UUID] = None
    vehicle_id: Optional[uuid.UUID] = None
    technician_id: Optional[uuid.UUID] = None
    status: Optional[WorkOrderStatus] = None
    diagnostic_notes: Optional[str] = None
    completion_date: Optional[datetime.date] = None
    line_items: Optional[List[LineItemInput]] = None

    no_nulls = field_validator(
        "description", "start_date", "customer_id", "vehicle_id", "status", "line_items"
    )(reject_null)

    @field_validator("status")
    @classmethod
    def validate_manual_status(cls, v: Optional[WorkOrderStatus]) -> Optional[WorkOrderStatus]:
        if v is not None and v.value in LOCKED_WORK_ORDER_STATUSES:
            raise ValueError("INVOICED and PAID are set by invoicing and payments")
        return v

    @field_validator("line_items")
    @classmethod
    def validate_unique_ids(cls, v: Optional[List[LineItemInput]]) -> Optional[List[LineItemInput]]:
        if v:
            ids = [item.id for item in v if item.id is not None]
            if len(ids) != len(set(ids)):
                raise ValueError("Duplicate line item id")
        return v


# -------------------------------------------------------------------
# Work order responses
# -------------------------------------------------------------------

class WorkOrderRead(TimestampedRead):
    order_number: str
    status: WorkOrderStatus
    description: str
    diagnostic_notes: Optional[str] = None
    start_date: datetime.date
    completion_date: Optional[datetime.date] = None
    customer_id: uuid.UUID
    vehicle_id: uuid.UUID
    technician_id: Optional[uuid.UUID] = None


class WorkOrderListItem(WorkOrderRead):
    """List entry with light relation data."""
    customer: CustomerSummary
    vehicle: VehicleSummary
    technician: Optional[TechnicianSummary] = None
    line_item_count: int = 0


class WorkOrderWithItems(WorkOrderRead):
    """Work order with line items and computed totals."""
    line_items: List[LineItemRead] = Field(default_factory=list)

    @computed_field
    @property
    def subtotal(self) -> Decimal:
        return round_money(calculate_subtotal(self.line_items))

    @computed_field
    @property
    def tax(self) -> Decimal:
        return round_money(calculate_tax(self.subtotal))

    @computed_field
    @property
    def total(self) -> Decimal:
        return calculate_total(self.subtotal, self.tax)


class WorkOrderSummary(WorkOrderWithItems):
    """Nested form used in customer and vehicle details."""
    vehicle: VehicleSummary


class WorkOrderDetail(WorkOrderWithItems):
    customer: CustomerSummary
    vehicle: VehicleSummary
    technician: Optional[TechnicianSummary] = None
    invoice: Optional[InvoiceSummary] = None
