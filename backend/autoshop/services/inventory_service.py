"""
Service layer for inventory
Project: Auto Shop Manager

Stocked parts and their transaction ledger. Every quantity change goes
through InventoryService.apply_stock_change, which updates the row with a
single conditional UPDATE and appends the matching InventoryTransaction.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from autoshop.core.config import settings
from autoshop.core.exceptions import (
    BusinessValidationError,
    ConflictError,
    DuplicateError,
    NotFoundError,
)
from autoshop.models import InventoryItem, InventoryTransaction, WorkOrderLineItem
from autoshop.models.mixins import utcnow
from autoshop.schemas.enums import TransactionType
from autoshop.schemas.inventory import (
    InventoryItemCreate,
    InventoryItemUpdate,
    InventoryTransactionCreate,
)

logger = logging.getLogger(__name__)

DUPLICATE_PART_NUMBER = "An inventory item with this part number already exists"


class InventoryService:
    """
    CRUD on stocked parts plus the stock ledger.

    Methods only flush; the caller owns the transaction.
    """

    # ------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------

    async def get_all(
        self,
        db: AsyncSession,
        search: Optional[str] = None,
        category: Optional[str] = None,
        low_stock: bool = False,
    ) -> List[InventoryItem]:
        """
        Lists inventory items ordered by name.

        Args:
            db: database session
            search: case-insensitive match on part number, name, manufacturer, category
            category: exact category filter
            low_stock: only items at or below their reorder threshold
        """
        query = select(InventoryItem)

        if search:
            term = f"%{search.strip()}%"
            query = query.where(
                or_(
                    InventoryItem.part_number.ilike(term),
                    InventoryItem.name.ilike(term),
                    InventoryItem.manufacturer.ilike(term),
                    InventoryItem.category.ilike(term),
                )
            )

        if category:
            query = query.where(InventoryItem.category == category)

        if low_stock:
            query = query.where(InventoryItem.quantity <= InventoryItem.min_quantity)

        query = query.order_by(InventoryItem.name.asc(), InventoryItem.part_number.asc())
        result = await db.execute(query)
        return list(result.scalars().all())

    async def get_low_stock(self, db: AsyncSession) -> List[InventoryItem]:
        """Items at or below their threshold, largest shortfall first."""
        query = (
            select(InventoryItem)
            .where(InventoryItem.quantity <= InventoryItem.min_quantity)
            .order_by((InventoryItem.min_quantity - InventoryItem.quantity).desc())
        )
        result = await db.execute(query)
        return list(result.scalars().all())

    async def get_by_id(
        self,
        db: AsyncSession,
        item_id: uuid.UUID,
        with_transactions: bool = False,
    ) -> InventoryItem:
        """
        Fetches an inventory item.

        Raises:
            NotFoundError: if it does not exist
        """
        query = select(InventoryItem).where(InventoryItem.id == item_id)
        if with_transactions:
            query = query.options(
                selectinload(InventoryItem.transactions)
            ).execution_options(populate_existing=True)

        result = await db.execute(query)
        item = result.scalar_one_or_none()

        if not item:
            logger.warning("Inventory item not found: %s", item_id)
            raise NotFoundError("Inventory item not found")

        return item

    async def get_transactions(
        self,
        db: AsyncSession,
        item_id: uuid.UUID,
        transaction_type: Optional[TransactionType] = None,
        limit: int = 100,
    ) -> List[InventoryTransaction]:
        """Ledger of an item, newest first."""
        await self.get_by_id(db, item_id)

        query = select(InventoryTransaction).where(
            InventoryTransaction.inventory_item_id == item_id
        )
        if transaction_type is not None:
            query = query.where(InventoryTransaction.type == transaction_type.value)

        query = query.order_by(InventoryTransaction.created_at.desc()).limit(limit)
        result = await db.execute(query)
        return list(result.scalars().all())

    # ------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------

    async def _check_part_number_exists(
        self,
        db: AsyncSession,
        part_number: str,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> None:
        query = select(InventoryItem.id).where(
            func.upper(InventoryItem.part_number) == part_number.upper()
        )
        if exclude_id is not None:
            query = query.where(InventoryItem.id != exclude_id)

        result = await db.execute(query)
        if result.first() is not None:
            logger.warning("Duplicate part number: %s", part_number)
            raise DuplicateError(DUPLICATE_PART_NUMBER)

    async def create(self, db: AsyncSession, data: InventoryItemCreate) -> InventoryItem:
        """
        Creates an inventory item.

        The item starts at zero; a positive initial quantity is booked as a
        PURCHASE so the ledger explains the whole on-hand quantity.

        Raises:
            DuplicateError: if the part number is taken
        """
        await self._check_part_number_exists(db, data.part_number)

        item = InventoryItem(**data.model_dump(exclude={"quantity"}), quantity=0)
        db.add(item)

        try:
            await db.flush()
        except IntegrityError as e:
            await db.rollback()
            if "part_number" in str(e.orig).lower():
                raise DuplicateError(DUPLICATE_PART_NUMBER)
            logger.error("Error creating inventory item: %s", e.orig)
            raise ConflictError("Could not create the inventory item")

        if data.quantity > 0:
            await self.apply_stock_change(
                db,
                item.id,
                data.quantity,
                TransactionType.PURCHASE,
                "Initial stock",
            )

        logger.info("Created inventory item %s (%s)", item.part_number, item.id)
        return item

    async def update(
        self,
        db: AsyncSession,
        item_id: uuid.UUID,
        data: InventoryItemUpdate,
    ) -> InventoryItem:
        """
        Updates catalog data of an item.

        Raises:
            NotFoundError: if the item does not exist
            DuplicateError: if the new part number is taken
        """
        item = await self.get_by_id(db, item_id)
        update_data = data.model_dump(exclude_unset=True)

        new_number = update_data.get("part_number")
        if new_number and new_number.upper() != item.part_number.upper():
            await self._check_part_number_exists(db, new_number, exclude_id=item_id)

        for field, value in update_data.items():
            setattr(item, field, value)

        try:
            await db.flush()
        except IntegrityError as e:
            await db.rollback()
            if "part_number" in str(e.orig).lower():
                raise DuplicateError(DUPLICATE_PART_NUMBER)
            logger.error("Error updating inventory item: %s", e.orig)
            raise ConflictError("Could not update the inventory item")

        logger.info("Updated inventory item %s", item.part_number)
        return item

    async def delete(self, db: AsyncSession, item_id: uuid.UUID) -> None:
        """
        Deletes an item together with its ledger.

        Raises:
            NotFoundError: if the item does not exist
            BusinessValidationError: if work order line items reference it
        """
        item = await self.get_by_id(db, item_id)

        result = await db.execute(
            select(func.count(WorkOrderLineItem.id)).where(WorkOrderLineItem.part_id == item_id)
        )
        if (result.scalar() or 0) > 0:
            logger.warning("Inventory item %s is used by work orders", item.part_number)
            raise BusinessValidationError(
                "Cannot delete an inventory item used in work orders"
            )

        await db.delete(item)
        await db.flush()
        logger.info("Deleted inventory item %s", item.part_number)

    # ------------------------------------------------------------
    # Stock ledger
    # ------------------------------------------------------------

    async def apply_stock_change(
        self,
        db: AsyncSession,
        item_id: uuid.UUID,
        delta: int,
        transaction_type: TransactionType,
        notes: Optional[str] = None,
    ) -> InventoryTransaction:
        """
        Adds `delta` (negative to consume) to the on-hand quantity and
        appends a ledger entry.

        The quantity is changed by one UPDATE ... SET quantity = quantity + delta,
        so concurrent changes to the same part do not overwrite each other.
        When negative stock is disabled the UPDATE carries the condition
        quantity + delta >= 0 and matches no row if stock is short.

        The ledger quantity is |delta| for SALE/RETURN/PURCHASE and the
        signed delta for ADJUSTMENT.

        Raises:
            NotFoundError: if the item does not exist
            BusinessValidationError: on insufficient stock
        """
        if delta == 0:
            raise ValueError("delta must not be zero")

        stmt = (
            update(InventoryItem)
            .where(InventoryItem.id == item_id)
            .values(quantity=InventoryItem.quantity + delta, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if delta < 0 and not settings.allow_negative_stock:
            stmt = stmt.where(InventoryItem.quantity + delta >= 0)

        result = await db.execute(stmt)

        if result.rowcount == 0:
            item = await db.get(InventoryItem, item_id)
            if item is None:
                logger.warning("Inventory item not found: %s", item_id)
                raise NotFoundError("Inventory item not found")
            logger.warning(
                "Insufficient stock for %s: on hand=%s, requested=%s",
                item.part_number, item.quantity, -delta,
            )
            raise BusinessValidationError(f"Insufficient stock for {item.part_number}")

        recorded = delta if transaction_type == TransactionType.ADJUSTMENT else abs(delta)
        transaction = InventoryTransaction(
            inventory_item_id=item_id,
            type=transaction_type.value,
            quantity=recorded,
            notes=notes,
        )
        db.add(transaction)
        await db.flush()

        # Bring the identity map copy in line with the UPDATE
        item = await db.get(InventoryItem, item_id, populate_existing=True)

        logger.info(
            "Stock %s for %s: delta=%s, on hand=%s",
            transaction_type.value, item.part_number, delta, item.quantity,
        )
        return transaction

    async def record_transaction(
        self,
        db: AsyncSession,
        item_id: uuid.UUID,
        data: InventoryTransactionCreate,
    ) -> InventoryTransaction:
        """
        Manual stock movement (purchase, sale over the counter, return, count).

        ADJUSTMENT sets the on-hand quantity to `data.quantity`; the delta is
        applied only if nobody changed the quantity since it was read.

        Raises:
            NotFoundError: if the item does not exist
            BusinessValidationError: on insufficient stock or a no-op adjustment
            ConflictError: if the quantity changed during an adjustment
        """
        item = await self.get_by_id(db, item_id)

        if data.type == TransactionType.ADJUSTMENT:
            current = item.quantity
            delta = data.quantity - current
            if delta == 0:
                raise BusinessValidationError(f"Quantity is already {current}")

            result = await db.execute(
                update(InventoryItem)
                .where(InventoryItem.id == item_id, InventoryItem.quantity == current)
                .values(quantity=data.quantity, updated_at=utcnow())
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                logger.warning("Concurrent stock change on %s during adjustment", item.part_number)
                raise ConflictError("Stock changed while adjusting, please retry")

            transaction = InventoryTransaction(
                inventory_item_id=item_id,
                type=TransactionType.ADJUSTMENT.value,
                quantity=delta,
                notes=data.notes,
            )
            db.add(transaction)
            await db.flush()
            await db.refresh(item)
            logger.info("Adjusted %s from %s to %s", item.part_number, current, item.quantity)
            return transaction

        delta = -data.quantity if data.type == TransactionType.SALE else data.quantity
        return await self.apply_stock_change(db, item_id, delta, data.type, data.notes)


inventory_service = InventoryService()
