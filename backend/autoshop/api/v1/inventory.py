"""
FastAPI router for inventory
Project: Auto Shop Manager

API endpoints for stocked parts and their transaction ledger.

NOTE: route order matters: GET /low-stock is declared before GET /{item_id}.
"""

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from autoshop.core.database import get_db
from autoshop.schemas.common import SuccessResponse
from autoshop.schemas.enums import TransactionType
from autoshop.schemas.inventory import (
    InventoryItemCreate,
    InventoryItemDetail,
    InventoryItemRead,
    InventoryItemUpdate,
    InventoryTransactionCreate,
    InventoryTransactionRead,
)
from autoshop.services.inventory_service import inventory_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/inventory",
    tags=["Inventory"],
)


# ------------------------------------------------------------
# Endpoint: low stock
# ------------------------------------------------------------

@router.get(
    "/low-stock",
    name="inventory_low_stock",
    summary="Low stock items",
    description="Items at or below their reorder threshold, largest shortfall first.",
    response_model=List[InventoryItemRead],
    status_code=status.HTTP_200_OK,
)
async def get_low_stock_items(
    db: AsyncSession = Depends(get_db),
) -> List[InventoryItemRead]:
    items = await inventory_service.get_low_stock(db)
    return [InventoryItemRead.model_validate(item) for item in items]


# ------------------------------------------------------------
# Endpoint: CRUD
# ------------------------------------------------------------

@router.get(
    "",
    name="inventory_list",
    summary="List inventory items",
    description="Lists stocked parts with optional search, category and low stock filters.",
    response_model=List[InventoryItemRead],
    status_code=status.HTTP_200_OK,
)
async def get_inventory_items(
    query: Optional[str] = Query(None, description="Search on part number, name, manufacturer, category"),
    category: Optional[str] = Query(None, description="Exact category"),
    low_stock: bool = Query(False, alias="lowStock", description="Only items at or below the threshold"),
    db: AsyncSession = Depends(get_db),
) -> List[InventoryItemRead]:
    items = await inventory_service.get_all(
        db=db,
        search=query,
        category=category,
        low_stock=low_stock,
    )
    return [InventoryItemRead.model_validate(item) for item in items]


@router.get(
    "/{item_id}",
    name="inventory_detail",
    summary="Inventory item detail",
    description="Item with its transaction ledger, newest first.",
    response_model=InventoryItemDetail,
    status_code=status.HTTP_200_OK,
)
async def get_inventory_item(
    item_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> InventoryItemDetail:
    item = await inventory_service.get_by_id(db=db, item_id=item_id, with_transactions=True)
    return InventoryItemDetail.model_validate(item)


@router.post(
    "",
    name="inventory_create",
    summary="Create inventory item",
    description="Creates a stocked part. A positive initial quantity is booked as a purchase.",
    response_model=InventoryItemRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_inventory_item(
    item_data: InventoryItemCreate,
    db: AsyncSession = Depends(get_db),
) -> InventoryItemRead:
    """
    Raises:
        DuplicateError: if the part number is already used
    """
    item = await inventory_service.create(db=db, data=item_data)
    await db.commit()
    return InventoryItemRead.model_validate(item)


@router.put(
    "/{item_id}",
    name="inventory_update",
    summary="Update inventory item",
    description="Updates catalog data. The quantity changes only through transactions.",
    response_model=InventoryItemRead,
    status_code=status.HTTP_200_OK,
)
async def update_inventory_item(
    item_id: uuid.UUID,
    item_data: InventoryItemUpdate,
    db: AsyncSession = Depends(get_db),
) -> InventoryItemRead:
    item = await inventory_service.update(db=db, item_id=item_id, data=item_data)
    await db.commit()
    return InventoryItemRead.model_validate(item)


@router.delete(
    "/{item_id}",
    name="inventory_delete",
    summary="Delete inventory item",
    description="Deletes an item and its ledger. Refused while work order line items use it.",
    response_model=SuccessResponse,
    status_code=status.HTTP_200_OK,
)
async def delete_inventory_item(
    item_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    await inventory_service.delete(db=db, item_id=item_id)
    await db.commit()
    return SuccessResponse()


# ------------------------------------------------------------
# Endpoint: transactions
# ------------------------------------------------------------

@router.get(
    "/{item_id}/transactions",
    name="inventory_transactions",
    summary="Inventory transactions",
    description="Ledger of an item, newest first.",
    response_model=List[InventoryTransactionRead],
    status_code=status.HTTP_200_OK,
)
async def get_inventory_transactions(
    item_id: uuid.UUID,
    transaction_type: Optional[TransactionType] = Query(None, alias="type", description="Type filter"),
    limit: int = Query(100, ge=1, le=500, description="Maximum entries"),
    db: AsyncSession = Depends(get_db),
) -> List[InventoryTransactionRead]:
    transactions = await inventory_service.get_transactions(
        db=db,
        item_id=item_id,
        transaction_type=transaction_type,
        limit=limit,
    )
    return [InventoryTransactionRead.model_validate(t) for t in transactions]


@router.post(
    "/{item_id}/transactions",
    name="inventory_transaction_create",
    summary="Record inventory transaction",
    description=(
        "Manual stock movement. PURCHASE and RETURN add the quantity, SALE removes it, "
        "ADJUSTMENT sets the on-hand quantity."
    ),
    response_model=InventoryTransactionRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_inventory_transaction(
    item_id: uuid.UUID,
    transaction_data: InventoryTransactionCreate,
    db: AsyncSession = Depends(get_db),
) -> InventoryTransactionRead:
    """
    Raises:
        NotFoundError: if the item does not exist
        BusinessValidationError: insufficient stock or no-op adjustment
        ConflictError: concurrent change during an adjustment
    """
    transaction = await inventory_service.record_transaction(
        db=db,
        item_id=item_id,
        data=transaction_data,
    )
    await db.commit()
    return InventoryTransactionRead.model_validate(transaction)
