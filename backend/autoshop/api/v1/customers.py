"""
FastAPI router for the Customer entity
Project: Auto Shop Manager

API endpoints for customer management.
"""

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from autoshop.core.database import get_db
from autoshop.schemas.common import SuccessResponse
from autoshop.schemas.customer import (
    CustomerCreate,
    CustomerDetail,
    CustomerListItem,
    CustomerRead,
    CustomerUpdate,
)
from autoshop.services.customer_service import CustomerService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/customers",
    tags=["Customers"],
)


# -------------------------------------------------------------------
# Dependency Injection
# -------------------------------------------------------------------

def get_customer_service() -> CustomerService:
    """Dependency returning a CustomerService instance."""
    return CustomerService()


# -------------------------------------------------------------------
# Endpoints
# -------------------------------------------------------------------

@router.get(
    "",
    name="customers_list",
    summary="List customers",
    description="Lists customers with vehicle and work order counts, optionally filtered by a search term.",
    response_model=List[CustomerListItem],
    status_code=status.HTTP_200_OK,
)
async def get_customers(
    query: Optional[str] = Query(None, description="Search on name, email, phone"),
    db: AsyncSession = Depends(get_db),
    service: CustomerService = Depends(get_customer_service),
) -> List[CustomerListItem]:
    """
    Lists customers ordered by last name.

    Args:
        query: optional search term
        db: database session
        service: CustomerService instance (injected)
    """
    rows = await service.get_all(db=db, search=query)
    return [
        CustomerListItem.model_validate(customer).model_copy(
            update={"vehicle_count": vehicle_count, "work_order_count": work_order_count}
        )
        for customer, vehicle_count, work_order_count in rows
    ]


@router.get(
    "/{customer_id}",
    name="customer_detail",
    summary="Customer detail",
    description="Customer with vehicles, work orders, appointments and invoices.",
    response_model=CustomerDetail,
    status_code=status.HTTP_200_OK,
)
async def get_customer(
    customer_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    service: CustomerService = Depends(get_customer_service),
) -> CustomerDetail:
    """
    Raises:
        NotFoundError: if the customer does not exist
    """
    customer = await service.get_by_id(db=db, customer_id=customer_id, with_relations=True)
    return CustomerDetail.model_validate(customer)


@router.post(
    "",
    name="customer_create",
    summary="Create customer",
    description="Creates a new customer.",
    response_model=CustomerRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_customer(
    customer_data: CustomerCreate,
    db: AsyncSession = Depends(get_db),
    service: CustomerService = Depends(get_customer_service),
) -> CustomerRead:
    """
    Raises:
        DuplicateError: if the email is already used
    """
    customer = await service.create(db=db, data=customer_data)
    await db.commit()
    return CustomerRead.model_validate(customer)


@router.put(
    "/{customer_id}",
    name="customer_update",
    summary="Update customer",
    description="Partial update of an existing customer.",
    response_model=CustomerRead,
    status_code=status.HTTP_200_OK,
)
async def update_customer(
    customer_id: uuid.UUID,
    customer_data: CustomerUpdate,
    db: AsyncSession = Depends(get_db),
    service: CustomerService = Depends(get_customer_service),
) -> CustomerRead:
    """
    Raises:
        NotFoundError: if the customer does not exist
        DuplicateError: if the new email is already used
    """
    customer = await service.update(db=db, customer_id=customer_id, data=customer_data)
    await db.commit()
    return CustomerRead.model_validate(customer)


@router.delete(
    "/{customer_id}",
    name="customer_delete",
    summary="Delete customer",
    description=(
        "Deletes a customer with vehicles, work orders, appointments and invoices. "
        "Refused while a work order is active or an invoice is unpaid."
    ),
    response_model=SuccessResponse,
    status_code=status.HTTP_200_OK,
)
async def delete_customer(
    customer_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    service: CustomerService = Depends(get_customer_service),
) -> SuccessResponse:
    """
    Raises:
        NotFoundError: if the customer does not exist
        BusinessValidationError: with hasActiveWorkOrders / hasUnpaidInvoices
    """
    await service.delete(db=db, customer_id=customer_id)
    await db.commit()
    return SuccessResponse()
