"""
Pydantic schemas for the Vehicle entity
Project: Auto Shop Manager

Validation and serialization schemas for the vehicles API.
"""

import datetime
import re
import uuid
from typing import List, Optional

from pydantic import Field, field_validator

from autoshop.schemas.appointment import AppointmentSummary
from autoshop.schemas.common import ApiModel, CustomerSummary, TimestampedRead, reject_null
from autoshop.schemas.work_order import WorkOrderWithItems


# -------------------------------------------------------------------
# Normalization and validation helpers
# -------------------------------------------------------------------

def normalize_vin(vin: Optional[str]) -> Optional[str]:
    """
    Normalizes a VIN: uppercase, no spaces.

    Modern VINs have 17 characters; older vehicles carry shorter serials,
    so anything from 5 to 17 alphanumerics is accepted.

    Raises:
        ValueError: if the format is not valid
    """
    if vin is None:
        return None

    normalized = vin.strip().upper().replace(" ", "")

    if not re.match(r"^[A-Z0-9]{5,17}$", normalized):
        raise ValueError("VIN must contain 5 to 17 letters or digits")

    return normalized


def normalize_plate(plate: Optional[str]) -> Optional[str]:
    """Uppercases a license plate; empty strings become None."""
    if plate is None:
        return None
    normalized = plate.strip().upper()
    return normalized or None


def validate_year(year: Optional[int]) -> Optional[int]:
    """
    Model year between 1886 and next year.

    Raises:
        ValueError: if out of range
    """
    if year is None:
        return None

    max_year = datetime.date.today().year + 1
    if year < 1886 or year > max_year:
        raise ValueError(f"year must be between 1886 and {max_year}")
    return year


# -------------------------------------------------------------------
# Schemas
# -------------------------------------------------------------------

class VehicleBase(ApiModel):
    make: str = Field(..., min_length=1, max_length=100)
    model: str = Field(..., min_length=1, max_length=100)
    year: int
    vin: str = Field(..., min_length=1)
    license_plate: Optional[str] = Field(None, max_length=20)
    color: Optional[str] = Field(None, max_length=50)
    mileage: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None


class VehicleCreate(VehicleBase):
    customer_id: uuid.UUID

    @field_validator("vin")
    @classmethod
    def validate_vin(cls, v: str) -> str:
        return normalize_vin(v)

    @field_validator("license_plate")
    @classmethod
    def validate_plate(cls, v: Optional[str]) -> Optional[str]:
        return normalize_plate(v)

    @field_validator("year")
    @classmethod
    def check_year(cls, v: int) -> int:
        return validate_year(v)


class VehicleUpdate(ApiModel):
    """Partial update; `customerId` transfers the vehicle to another customer."""
    make: Optional[str] = Field(None, min_length=1, max_length=100)
    model: Optional[str] = Field(None, min_length=1, max_length=100)
    year: Optional[int] = None
    vin: Optional[str] = Field(None, min_length=1)
    license_plate: Optional[str] = Field(None, max_length=20)
    color: Optional[str] = Field(None, max_length=50)
    mileage: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None
    customer_id: Optional[uuid.UUID] = None

    no_nulls = field_validator("make", "model", "year", "vin", "customer_id")(reject_null)

    @field_validator("vin")
    @classmethod
    def validate_vin(cls, v: Optional[str]) -> Optional[str]:
        return normalize_vin(v)

    @field_validator("license_plate")
    @classmethod
    def validate_plate(cls, v: Optional[str]) -> Optional[str]:
        return normalize_plate(v)

    @field_validator("year")
    @classmethod
    def check_year(cls, v: Optional[int]) -> Optional[int]:
        return validate_year(v)


class VehicleRead(VehicleBase, TimestampedRead):
    customer_id: uuid.UUID
    customer: CustomerSummary


class VehicleListItem(VehicleRead):
    work_order_count: int = 0


class VehicleDetail(VehicleRead):
    work_orders: List[WorkOrderWithItems] = Field(default_factory=list)
    appointments: List[AppointmentSummary] = Field(default_factory=list)
