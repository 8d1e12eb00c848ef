"""
FastAPI router for work orders
Project: Auto Shop Manager

API endpoints for the work order lifecycle. Each write runs in one
transaction together with the inventory movements it causes.
"""

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from autoshop.core.database import get_db
from autoshop.schemas.common import SuccessResponse
from autoshop.schemas.enums import WorkOrderStatus
from autoshop.schemas.work_order import (
    WorkOrderCreate,
    WorkOrderDetail,
    WorkOrderListItem,
    WorkOrderUpdate,
)
from autoshop.services.work_order_service import work_order_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/work-orders",
    tags=["Work Orders"],
)


# -------------------------------------------------------------------
# Endpoints
# -------------------------------------------------------------------

@router.get(
    "",
    name="work_orders_list",
    summary="List work orders",
    description="Lists work orders, newest first, with optional search and filters.",
    response_model=List[WorkOrderListItem],
    status_code=status.HTTP_200_OK,
)
async def get_work_orders(
    query: Optional[str] = Query(
        None,
        description="Search on order number, description, customer name, vehicle make/model/VIN",
    ),
    status_filter: Optional[WorkOrderStatus] = Query(None, alias="status", description="Status filter"),
    customer_id: Optional[uuid.UUID] = Query(None, alias="customerId", description="Customer filter"),
    vehicle_id: Optional[uuid.UUID] = Query(None, alias="vehicleId", description="Vehicle filter"),
    technician_id: Optional[uuid.UUID] = Query(None, alias="technicianId", description="Technician filter"),
    db: AsyncSession = Depends(get_db),
) -> List[WorkOrderListItem]:
    """
    Lists work orders.

    Args:
        query: optional search term
        status_filter: optional status filter
        customer_id / vehicle_id / technician_id: optional relation filters
        db: database session
    """
    work_orders = await work_order_service.get_all(
        db=db,
        search=query,
        status_filter=status_filter,
        customer_id=customer_id,
        vehicle_id=vehicle_id,
        technician_id=technician_id,
    )
    return [WorkOrderListItem.model_validate(wo) for wo in work_orders]


@router.get(
    "/{work_order_id}",
    name="work_order_detail",
    summary="Work order detail",
    description="Work order with customer, vehicle, technician, line items, invoice and totals.",
    response_model=WorkOrderDetail,
    status_code=status.HTTP_200_OK,
)
async def get_work_order(
    work_order_id: uuid.UUID = Path(..., description="Work order UUID"),
    db: AsyncSession = Depends(get_db),
) -> WorkOrderDetail:
    """
    Raises:
        NotFoundError: if the work order does not exist
    """
    work_order = await work_order_service.get_by_id(db=db, work_order_id=work_order_id)
    return WorkOrderDetail.model_validate(work_order)


@router.post(
    "",
    name="work_order_create",
    summary="Create work order",
    description=(
        "Creates a work order with its line items. Parts referenced by the "
        "line items are taken from inventory."
    ),
    response_model=WorkOrderDetail,
    status_code=status.HTTP_201_CREATED,
)
async def create_work_order(
    work_order_data: WorkOrderCreate,
    db: AsyncSession = Depends(get_db),
) -> WorkOrderDetail:
    """
    Raises:
        NotFoundError: customer, vehicle, technician or inventory item not found
        BusinessValidationError: insufficient stock (when negative stock is off)
    """
    work_order = await work_order_service.create(db=db, data=work_order_data)
    await db.commit()
    return WorkOrderDetail.model_validate(work_order)


@router.put(
    "/{work_order_id}",
    name="work_order_update",
    summary="Update work order",
    description=(
        "Partial update. When lineItems is sent it replaces the line items; "
        "inventory is corrected by the per-part quantity difference."
    ),
    response_model=WorkOrderDetail,
    status_code=status.HTTP_200_OK,
)
async def update_work_order(
    work_order_data: WorkOrderUpdate,
    work_order_id: uuid.UUID = Path(..., description="Work order UUID"),
    db: AsyncSession = Depends(get_db),
) -> WorkOrderDetail:
    """
    Raises:
        NotFoundError: work order, line item or a referenced entity not found
        BusinessValidationError: if the order is invoiced or paid
    """
    work_order = await work_order_service.update(
        db=db,
        work_order_id=work_order_id,
        data=work_order_data,
    )
    await db.commit()
    return WorkOrderDetail.model_validate(work_order)


@router.delete(
    "/{work_order_id}",
    name="work_order_delete",
    summary="Delete work order",
    description="Deletes a work order that is not invoiced and returns its parts to inventory.",
    response_model=SuccessResponse,
    status_code=status.HTTP_200_OK,
)
async def delete_work_order(
    work_order_id: uuid.UUID = Path(..., description="Work order UUID"),
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    await work_order_service.delete(db=db, work_order_id=work_order_id)
    await db.commit()
    return SuccessResponse()
