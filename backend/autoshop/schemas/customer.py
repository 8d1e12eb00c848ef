"""
Pydantic schemas for the Customer entity
Project: Auto Shop Manager

Validation and serialization schemas for the customers API.
"""

from typing import List, Optional

from pydantic import EmailStr, Field, computed_field, field_validator

from autoshop.core.calculations import get_full_name
from autoshop.schemas.appointment import AppointmentSummary
from autoshop.schemas.common import ApiModel, TimestampedRead, VehicleSummary, reject_null
from autoshop.schemas.invoice import InvoiceSummary
from autoshop.schemas.work_order import WorkOrderSummary


def normalize_email(value: Optional[str]) -> Optional[str]:
    """Emails are compared case-insensitively, so they are stored lowercase."""
    if value is None:
        return None
    return value.strip().lower()


class CustomerBase(ApiModel):
    """Fields shared by create and read."""
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=50)
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=50)
    zip_code: Optional[str] = Field(None, max_length=20)


class CustomerCreate(CustomerBase):
    @field_validator("email", mode="after")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return normalize_email(v)


class CustomerUpdate(ApiModel):
    """Partial update; only the fields sent are changed."""
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, min_length=1, max_length=50)
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=50)
    zip_code: Optional[str] = Field(None, max_length=20)

    no_nulls = field_validator("first_name", "last_name", "email", "phone")(reject_null)

    @field_validator("email", mode="after")
    @classmethod
    def lowercase_email(cls, v: Optional[str]) -> Optional[str]:
        return normalize_email(v)


class CustomerRead(CustomerBase, TimestampedRead):
    # Stored values are not re-validated as emails
    email: str

    @computed_field
    @property
    def full_name(self) -> str:
        return get_full_name(self.first_name, self.last_name)


class CustomerListItem(CustomerRead):
    vehicle_count: int = 0
    work_order_count: int = 0


class CustomerDetail(CustomerRead):
    vehicles: List[VehicleSummary] = Field(default_factory=list)
    work_orders: List[WorkOrderSummary] = Field(default_factory=list)
    appointments: List[AppointmentSummary] = Field(default_factory=list)
    invoices: List[InvoiceSummary] = Field(default_factory=list)
