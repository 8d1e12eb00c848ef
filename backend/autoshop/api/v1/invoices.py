"""
FastAPI router for invoices
Project: Auto Shop Manager

API endpoints for invoice generation and payments.
"""

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from autoshop.core.database import get_db
from autoshop.schemas.common import SuccessResponse
from autoshop.schemas.enums import InvoiceStatus
from autoshop.schemas.invoice import (
    InvoiceCreate,
    InvoiceRead,
    InvoiceUpdate,
    PaymentCreate,
)
from autoshop.services.invoice_service import invoice_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/invoices",
    tags=["Invoices"],
)


# -------------------------------------------------------------------
# Invoices
# -------------------------------------------------------------------

@router.get(
    "",
    name="invoices_list",
    summary="List invoices",
    description="Lists invoices, most recent first.",
    response_model=List[InvoiceRead],
    status_code=status.HTTP_200_OK,
)
async def get_invoices(
    query: Optional[str] = Query(None, description="Search on invoice number and customer name"),
    status_filter: Optional[InvoiceStatus] = Query(None, alias="status", description="Status filter"),
    customer_id: Optional[uuid.UUID] = Query(None, alias="customerId", description="Customer filter"),
    db: AsyncSession = Depends(get_db),
) -> List[InvoiceRead]:
    invoices = await invoice_service.get_all(
        db=db,
        search=query,
        status_filter=status_filter,
        customer_id=customer_id,
    )
    return [InvoiceRead.model_validate(inv) for inv in invoices]


@router.get(
    "/{invoice_id}",
    name="invoice_detail",
    summary="Invoice detail",
    description="Invoice with customer, work order, payments and balance due.",
    response_model=InvoiceRead,
    status_code=status.HTTP_200_OK,
)
async def get_invoice(
    invoice_id: uuid.UUID = Path(..., description="Invoice UUID"),
    db: AsyncSession = Depends(get_db),
) -> InvoiceRead:
    invoice = await invoice_service.get_by_id(db=db, invoice_id=invoice_id)
    return InvoiceRead.model_validate(invoice)


@router.post(
    "",
    name="invoice_create",
    summary="Generate invoice",
    description=(
        "Generates the invoice of a completed work order. Amounts are copied "
        "from the work order and the work order becomes INVOICED."
    ),
    response_model=InvoiceRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_invoice(
    invoice_data: InvoiceCreate,
    db: AsyncSession = Depends(get_db),
) -> InvoiceRead:
    """
    Raises:
        NotFoundError: if the work order does not exist
        BusinessValidationError: work order not completed or already invoiced
    """
    invoice = await invoice_service.create_from_work_order(db=db, data=invoice_data)
    await db.commit()
    return InvoiceRead.model_validate(invoice)


@router.put(
    "/{invoice_id}",
    name="invoice_update",
    summary="Update invoice",
    description="Updates due date, notes and status (PENDING, SENT, OVERDUE, VOID).",
    response_model=InvoiceRead,
    status_code=status.HTTP_200_OK,
)
async def update_invoice(
    invoice_data: InvoiceUpdate,
    invoice_id: uuid.UUID = Path(..., description="Invoice UUID"),
    db: AsyncSession = Depends(get_db),
) -> InvoiceRead:
    invoice = await invoice_service.update(db=db, invoice_id=invoice_id, data=invoice_data)
    await db.commit()
    return InvoiceRead.model_validate(invoice)


@router.delete(
    "/{invoice_id}",
    name="invoice_delete",
    summary="Delete invoice",
    description="Deletes an invoice without payments; the work order goes back to COMPLETED.",
    response_model=SuccessResponse,
    status_code=status.HTTP_200_OK,
)
async def delete_invoice(
    invoice_id: uuid.UUID = Path(..., description="Invoice UUID"),
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    await invoice_service.delete(db=db, invoice_id=invoice_id)
    await db.commit()
    return SuccessResponse()


# -------------------------------------------------------------------
# Payments
# -------------------------------------------------------------------

@router.post(
    "/{invoice_id}/payments",
    name="invoice_payment_create",
    summary="Record payment",
    description="Records a payment; the invoice becomes PARTIALLY_PAID or PAID.",
    response_model=InvoiceRead,
    status_code=status.HTTP_201_CREATED,
)
async def add_payment(
    payment_data: PaymentCreate,
    invoice_id: uuid.UUID = Path(..., description="Invoice UUID"),
    db: AsyncSession = Depends(get_db),
) -> InvoiceRead:
    """
    Raises:
        NotFoundError: if the invoice does not exist
        BusinessValidationError: invoice void or paid, amount above balance due
    """
    invoice = await invoice_service.add_payment(db=db, invoice_id=invoice_id, data=payment_data)
    await db.commit()
    return InvoiceRead.model_validate(invoice)


@router.delete(
    "/{invoice_id}/payments/{payment_id}",
    name="invoice_payment_delete",
    summary="Delete payment",
    description="Removes a payment and recomputes the invoice status.",
    response_model=InvoiceRead,
    status_code=status.HTTP_200_OK,
)
async def delete_payment(
    invoice_id: uuid.UUID = Path(..., description="Invoice UUID"),
    payment_id: uuid.UUID = Path(..., description="Payment UUID"),
    db: AsyncSession = Depends(get_db),
) -> InvoiceRead:
    invoice = await invoice_service.delete_payment(
        db=db,
        invoice_id=invoice_id,
        payment_id=payment_id,
    )
    await db.commit()
    return InvoiceRead.model_validate(invoice)
