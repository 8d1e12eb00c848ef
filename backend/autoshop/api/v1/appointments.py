"""
FastAPI router for appointments
Project: Auto Shop Manager
"""

import datetime
import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from autoshop.core.database import get_db
from autoshop.schemas.appointment import AppointmentCreate, AppointmentRead, AppointmentUpdate
from autoshop.schemas.common import SuccessResponse
from autoshop.schemas.enums import AppointmentStatus
from autoshop.services.appointment_service import appointment_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/appointments",
    tags=["Appointments"],
)


@router.get(
    "",
    name="appointments_list",
    summary="List appointments",
    description="Lists appointments ordered by date and start time.",
    response_model=List[AppointmentRead],
    status_code=status.HTTP_200_OK,
)
async def get_appointments(
    date: Optional[datetime.date] = Query(None, description="Day filter"),
    customer_id: Optional[uuid.UUID] = Query(None, alias="customerId", description="Customer filter"),
    vehicle_id: Optional[uuid.UUID] = Query(None, alias="vehicleId", description="Vehicle filter"),
    status_filter: Optional[AppointmentStatus] = Query(None, alias="status", description="Status filter"),
    db: AsyncSession = Depends(get_db),
) -> List[AppointmentRead]:
    appointments = await appointment_service.get_all(
        db=db,
        date=date,
        customer_id=customer_id,
        vehicle_id=vehicle_id,
        status_filter=status_filter,
    )
    return [AppointmentRead.model_validate(a) for a in appointments]


@router.get(
    "/{appointment_id}",
    name="appointment_detail",
    summary="Appointment detail",
    response_model=AppointmentRead,
    status_code=status.HTTP_200_OK,
)
async def get_appointment(
    appointment_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> AppointmentRead:
    appointment = await appointment_service.get_by_id(db=db, appointment_id=appointment_id)
    return AppointmentRead.model_validate(appointment)


@router.post(
    "",
    name="appointment_create",
    summary="Book appointment",
    response_model=AppointmentRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_appointment(
    appointment_data: AppointmentCreate,
    db: AsyncSession = Depends(get_db),
) -> AppointmentRead:
    appointment = await appointment_service.create(db=db, data=appointment_data)
    await db.commit()
    return AppointmentRead.model_validate(appointment)


@router.put(
    "/{appointment_id}",
    name="appointment_update",
    summary="Update appointment",
    response_model=AppointmentRead,
    status_code=status.HTTP_200_OK,
)
async def update_appointment(
    appointment_id: uuid.UUID,
    appointment_data: AppointmentUpdate,
    db: AsyncSession = Depends(get_db),
) -> AppointmentRead:
    appointment = await appointment_service.update(
        db=db,
        appointment_id=appointment_id,
        data=appointment_data,
    )
    await db.commit()
    return AppointmentRead.model_validate(appointment)


@router.delete(
    "/{appointment_id}",
    name="appointment_delete",
    summary="Cancel and delete appointment",
    response_model=SuccessResponse,
    status_code=status.HTTP_200_OK,
)
async def delete_appointment(
    appointment_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    await appointment_service.delete(db=db, appointment_id=appointment_id)
    await db.commit()
    return SuccessResponse()
