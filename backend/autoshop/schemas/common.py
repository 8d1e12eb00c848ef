"""
Base schema and shared summary schemas
Project: Auto Shop Manager

ApiModel gives every schema camelCase JSON keys (snake_case is accepted on
input as well). The summaries are the compact nested representations used
inside other resources.
"""

import datetime
import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, computed_field
from pydantic.alias_generators import to_camel

from autoshop.core.calculations import get_full_name, get_vehicle_display_name


class ApiModel(BaseModel):
    """Base class of the API schemas."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
    )


class SuccessResponse(ApiModel):
    success: bool = True


def reject_null(value, info):
    """Field validator for partial updates: a sent field may not be null."""
    if value is None:
        raise ValueError(f"{to_camel(info.field_name)} cannot be null")
    return value


# ------------------------------------------------------------
# Summaries
# ------------------------------------------------------------

class CustomerSummary(ApiModel):
    id: uuid.UUID
    first_name: str
    last_name: str
    email: str
    phone: str

    @computed_field
    @property
    def full_name(self) -> str:
        return get_full_name(self.first_name, self.last_name)


class VehicleSummary(ApiModel):
    id: uuid.UUID
    make: str
    model: str
    year: int
    vin: str
    license_plate: Optional[str] = None

    @computed_field
    @property
    def display_name(self) -> str:
        return get_vehicle_display_name(self.make, self.model, self.year)


class TechnicianSummary(ApiModel):
    id: uuid.UUID
    name: str


class PartSummary(ApiModel):
    id: uuid.UUID
    part_number: str
    name: str
    quantity: int


class TimestampedRead(ApiModel):
    id: uuid.UUID
    created_at: datetime.datetime
    updated_at: datetime.datetime
