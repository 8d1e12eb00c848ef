"""
FastAPI router for the Vehicle entity
Project: Auto Shop Manager

API endpoints for vehicle management.
"""

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from autoshop.core.database import get_db
from autoshop.schemas.common import SuccessResponse
from autoshop.schemas.vehicle import (
    VehicleCreate,
    VehicleDetail,
    VehicleListItem,
    VehicleRead,
    VehicleUpdate,
)
from autoshop.services.vehicle_service import vehicle_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/vehicles",
    tags=["Vehicles"],
)


# -------------------------------------------------------------------
# Endpoints
# -------------------------------------------------------------------

@router.get(
    "",
    name="vehicles_list",
    summary="List vehicles",
    description="Lists vehicles with their owner and work order count.",
    response_model=List[VehicleListItem],
    status_code=status.HTTP_200_OK,
)
async def get_vehicles(
    query: Optional[str] = Query(None, description="Search on make, model, VIN, plate"),
    customer_id: Optional[uuid.UUID] = Query(None, alias="customerId", description="Owner filter"),
    db: AsyncSession = Depends(get_db),
) -> List[VehicleListItem]:
    """
    Lists vehicles, most recently updated first.

    Args:
        query: optional search term
        customer_id: only vehicles of this customer
        db: database session
    """
    rows = await vehicle_service.get_all(db=db, customer_id=customer_id, search=query)
    return [
        VehicleListItem.model_validate(vehicle).model_copy(
            update={"work_order_count": work_order_count}
        )
        for vehicle, work_order_count in rows
    ]


@router.get(
    "/{vehicle_id}",
    name="vehicle_detail",
    summary="Vehicle detail",
    description="Vehicle with owner, work orders (with totals) and appointments.",
    response_model=VehicleDetail,
    status_code=status.HTTP_200_OK,
)
async def get_vehicle(
    vehicle_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> VehicleDetail:
    vehicle = await vehicle_service.get_by_id(db=db, vehicle_id=vehicle_id, with_relations=True)
    return VehicleDetail.model_validate(vehicle)


@router.post(
    "",
    name="vehicle_create",
    summary="Create vehicle",
    description="Registers a vehicle for an existing customer.",
    response_model=VehicleRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_vehicle(
    vehicle_data: VehicleCreate,
    db: AsyncSession = Depends(get_db),
) -> VehicleRead:
    """
    Raises:
        NotFoundError: if the customer does not exist
        DuplicateError: if the VIN is already registered
    """
    vehicle = await vehicle_service.create(db=db, data=vehicle_data)
    await db.commit()
    return VehicleRead.model_validate(vehicle)


@router.put(
    "/{vehicle_id}",
    name="vehicle_update",
    summary="Update vehicle",
    description="Partial update of a vehicle, owner included.",
    response_model=VehicleRead,
    status_code=status.HTTP_200_OK,
)
async def update_vehicle(
    vehicle_id: uuid.UUID,
    vehicle_data: VehicleUpdate,
    db: AsyncSession = Depends(get_db),
) -> VehicleRead:
    vehicle = await vehicle_service.update(db=db, vehicle_id=vehicle_id, data=vehicle_data)
    await db.commit()
    return VehicleRead.model_validate(vehicle)


@router.delete(
    "/{vehicle_id}",
    name="vehicle_delete",
    summary="Delete vehicle",
    description="Deletes a vehicle and its history. Refused while a work order is active.",
    response_model=SuccessResponse,
    status_code=status.HTTP_200_OK,
)
async def delete_vehicle(
    vehicle_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    await vehicle_service.delete(db=db, vehicle_id=vehicle_id)
    await db.commit()
    return SuccessResponse()
