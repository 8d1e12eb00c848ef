"""
Pydantic schemas for appointments
Project: Auto Shop Manager
"""

import datetime
import uuid
from typing import Optional

from pydantic import field_validator, model_validator

from autoshop.schemas.common import ApiModel, CustomerSummary, TimestampedRead, VehicleSummary, reject_null
from autoshop.schemas.enums import AppointmentStatus


class AppointmentCreate(ApiModel):
    date: datetime.date
    start_time: datetime.time
    end_time: datetime.time
    customer_id: uuid.UUID
    vehicle_id: uuid.UUID
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    notes: Optional[str] = None

    @model_validator(mode="after")
    def validate_time_range(self):
        if self.end_time <= self.start_time:
            raise ValueError("endTime must be after startTime")
        return self


class AppointmentUpdate(ApiModel):
    date: Optional[datetime.date] = None
    start_time: Optional[datetime.time] = None
    end_time: Optional[datetime.time] = None
    customer_id: Optional[uuid.UUID] = None
    vehicle_id: Optional[uuid.UUID] = None
    status: Optional[AppointmentStatus] = None
    notes: Optional[str] = None

    no_nulls = field_validator(
        "date", "start_time", "end_time", "customer_id", "vehicle_id", "status"
    )(reject_null)


class AppointmentSummary(TimestampedRead):
    date: datetime.date
    start_time: datetime.time
    end_time: datetime.time
    status: AppointmentStatus
    notes: Optional[str] = None
    customer_id: uuid.UUID
    vehicle_id: uuid.UUID


class AppointmentRead(AppointmentSummary):
    customer: CustomerSummary
    vehicle: VehicleSummary
