"""
Service Layer for work orders
Project: Auto Shop Manager

Business logic of the work order lifecycle: creation with order number
generation, updates with line item reconciliation, deletion. Every change
to parts used by the order is mirrored on the inventory through
InventoryService.apply_stock_change, inside the caller's transaction.
"""

import logging
import uuid
from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from autoshop.core.calculations import generate_order_number
from autoshop.core.config import settings
from autoshop.core.exceptions import BusinessValidationError, ConflictError, NotFoundError
from autoshop.models import (
    Customer,
    InventoryItem,
    Technician,
    Vehicle,
    WorkOrder,
    WorkOrderLineItem,
)
from autoshop.schemas.enums import TransactionType, WorkOrderStatus
from autoshop.schemas.work_order import LineItemInput, WorkOrderCreate, WorkOrderUpdate
from autoshop.services.guards import is_locked
from autoshop.services.inventory_service import inventory_service

logger = logging.getLogger(__name__)

VEHICLE_OWNERSHIP_ERROR = "Vehicle not found or does not belong to this customer"


def part_quantities(items: Iterable) -> Dict[uuid.UUID, int]:
    """Total quantity per inventory item over the lines that reference a part."""
    totals: Dict[uuid.UUID, int] = defaultdict(int)
    for item in items:
        if item.part_id is not None:
            totals[item.part_id] += item.quantity
    return dict(totals)


def stock_deltas(old: Dict[uuid.UUID, int], new: Dict[uuid.UUID, int]) -> Dict[uuid.UUID, int]:
    """
    Quantity consumed (positive) or released (negative) per part when the
    lines of an order go from `old` to `new`. Parts with no change are
    left out.
    """
    deltas = {}
    for part_id in set(old) | set(new):
        delta = new.get(part_id, 0) - old.get(part_id, 0)
        if delta != 0:
            deltas[part_id] = delta
    return deltas


class WorkOrderService:
    """
    Service for work order operations.

    Async methods without FastAPI dependencies. They flush but never
    commit, so an order and its inventory movements are written (or
    rolled back) together by the route handler.
    """

    # ------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------

    async def get_all(
        self,
        db: AsyncSession,
        search: Optional[str] = None,
        status_filter: Optional[WorkOrderStatus] = None,
        customer_id: Optional[uuid.UUID] = None,
        vehicle_id: Optional[uuid.UUID] = None,
        technician_id: Optional[uuid.UUID] = None,
    ) -> List[WorkOrder]:
        """
        Lists work orders, newest first.

        Args:
            db: database session
            search: case-insensitive match on order number, description,
                customer name and vehicle make/model/VIN
            status_filter: only orders in this status
            customer_id / vehicle_id / technician_id: relation filters
        """
        query = select(WorkOrder)

        if status_filter:
            query = query.where(WorkOrder.status == status_filter.value)
        if customer_id:
            query = query.where(WorkOrder.customer_id == customer_id)
        if vehicle_id:
            query = query.where(WorkOrder.vehicle_id == vehicle_id)
        if technician_id:
            query = query.where(WorkOrder.technician_id == technician_id)

        if search:
            term = f"%{search.strip()}%"
            matching_customers = select(Customer.id).where(
                or_(Customer.first_name.ilike(term), Customer.last_name.ilike(term))
            )
            matching_vehicles = select(Vehicle.id).where(
                or_(
                    Vehicle.make.ilike(term),
                    Vehicle.model.ilike(term),
                    Vehicle.vin.ilike(term),
                )
            )
            query = query.where(
                or_(
                    WorkOrder.order_number.ilike(term),
                    WorkOrder.description.ilike(term),
                    WorkOrder.customer_id.in_(matching_customers),
                    WorkOrder.vehicle_id.in_(matching_vehicles),
                )
            )

        query = query.order_by(WorkOrder.created_at.desc())
        result = await db.execute(query)
        work_orders = list(result.unique().scalars().all())

        logger.debug("Fetched %d work orders", len(work_orders))
        return work_orders

    async def get_by_id(
        self,
        db: AsyncSession,
        work_order_id: uuid.UUID,
        refresh: bool = False,
    ) -> WorkOrder:
        """
        Fetches a work order with customer, vehicle, technician, line items
        and invoice.

        Args:
            refresh: overwrite the copy held by the session (used after
                writes so relationships reflect the new foreign keys)

        Raises:
            NotFoundError: if the work order does not exist
        """
        query = select(WorkOrder).where(WorkOrder.id == work_order_id)
        if refresh:
            query = query.execution_options(populate_existing=True)

        result = await db.execute(query)
        work_order = result.unique().scalar_one_or_none()

        if not work_order:
            logger.warning("Work order not found: %s", work_order_id)
            raise NotFoundError("Work order not found")

        return work_order

    # ------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------

    async def _check_ownership(
        self,
        db: AsyncSession,
        customer_id: uuid.UUID,
        vehicle_id: uuid.UUID,
    ) -> None:
        """
        Raises:
            NotFoundError: if the customer does not exist, or the vehicle
                does not exist or belongs to someone else
        """
        customer = await db.get(Customer, customer_id)
        if customer is None:
            logger.warning("Customer not found: %s", customer_id)
            raise NotFoundError("Customer not found")

        result = await db.execute(
            select(Vehicle.id).where(
                Vehicle.id == vehicle_id,
                Vehicle.customer_id == customer_id,
            )
        )
        if result.first() is None:
            logger.warning(
                "Vehicle %s not found or not owned by customer %s", vehicle_id, customer_id
            )
            raise NotFoundError(VEHICLE_OWNERSHIP_ERROR)

    async def _check_technician(self, db: AsyncSession, technician_id: uuid.UUID) -> None:
        technician = await db.get(Technician, technician_id)
        if technician is None or not technician.is_active:
            logger.warning("Technician not found: %s", technician_id)
            raise NotFoundError("Technician not found")

    async def _check_parts(self, db: AsyncSession, lines: Iterable[LineItemInput]) -> None:
        part_ids = {line.part_id for line in lines if line.part_id is not None}
        if not part_ids:
            return
        result = await db.execute(select(InventoryItem.id).where(InventoryItem.id.in_(part_ids)))
        found = set(result.scalars().all())
        missing = part_ids - found
        if missing:
            logger.warning("Inventory items not found: %s", ", ".join(str(m) for m in missing))
            raise NotFoundError("Inventory item not found")

    async def _generate_unique_order_number(self, db: AsyncSession) -> str:
        """
        Generates an order number not used yet. The unique constraint on
        the column still guards against a concurrent insert.

        Raises:
            ConflictError: if every attempt collided
        """
        for _ in range(settings.number_generation_attempts):
            candidate = generate_order_number()
            result = await db.execute(
                select(WorkOrder.id).where(WorkOrder.order_number == candidate)
            )
            if result.first() is None:
                return candidate
            logger.info("Order number collision on %s, regenerating", candidate)

        logger.error(
            "No unique order number after %d attempts", settings.number_generation_attempts
        )
        raise ConflictError("Could not generate a unique order number")

    # ------------------------------------------------------------
    # Inventory effects
    # ------------------------------------------------------------

    async def _apply_deltas(
        self,
        db: AsyncSession,
        deltas: Dict[uuid.UUID, int],
        note: str,
    ) -> None:
        """
        Books per-part deltas: consumed quantity as SALE, released quantity
        as RETURN.
        """
        for part_id, delta in sorted(deltas.items(), key=lambda kv: str(kv[0])):
            if delta > 0:
                await inventory_service.apply_stock_change(
                    db, part_id, -delta, TransactionType.SALE, note
                )
            else:
                await inventory_service.apply_stock_change(
                    db, part_id, -delta, TransactionType.RETURN, note
                )

    # ------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------

    async def create(self, db: AsyncSession, data: WorkOrderCreate) -> WorkOrder:
        """
        Creates a work order with its line items and consumes the parts
        they use.

        Raises:
            NotFoundError: customer, vehicle (or ownership), technician or
                inventory item not found
            BusinessValidationError: insufficient stock when negative stock
                is disabled
        """
        await self._check_ownership(db, data.customer_id, data.vehicle_id)
        if data.technician_id is not None:
            await self._check_technician(db, data.technician_id)
        await self._check_parts(db, data.line_items)

        order_number = await self._generate_unique_order_number(db)

        values = data.model_dump(exclude={"line_items"})
        values["status"] = data.status.value
        work_order = WorkOrder(**values, order_number=order_number)
        work_order.line_items = [
            WorkOrderLineItem(**line.model_dump(exclude={"id"}), position=index)
            for index, line in enumerate(data.line_items)
        ]
        db.add(work_order)

        try:
            await db.flush()
        except IntegrityError as e:
            await db.rollback()
            logger.error("Error creating work order %s: %s", order_number, e.orig)
            raise ConflictError("Could not create the work order")

        await self._apply_deltas(
            db,
            stock_deltas({}, part_quantities(data.line_items)),
            f"Used in Work Order {order_number}",
        )

        logger.info(
            "Created work order %s (%s) with %d line items",
            order_number, work_order.id, len(data.line_items),
        )
        return await self.get_by_id(db, work_order.id, refresh=True)

    async def update(
        self,
        db: AsyncSession,
        work_order_id: uuid.UUID,
        data: WorkOrderUpdate,
    ) -> WorkOrder:
        """
        Partial update of a work order.

        When `line_items` is sent the set of lines is replaced: lines with
        an `id` are updated in place, lines without one are added, the rest
        are removed. Inventory is then corrected by the per-part difference
        between the new and the old quantities.

        Raises:
            NotFoundError: work order, line item, customer, vehicle,
                technician or inventory item not found
            BusinessValidationError: if the order is invoiced or paid, or
                the dates are inconsistent
        """
        work_order = await self.get_by_id(db, work_order_id, refresh=True)

        if is_locked(work_order):
            logger.warning(
                "Update rejected on %s work order %s", work_order.status, work_order.order_number
            )
            raise BusinessValidationError(
                "Cannot update a work order that is already invoiced or paid"
            )

        update_data = data.model_dump(exclude_unset=True, exclude={"line_items"})

        customer_id = update_data.get("customer_id", work_order.customer_id)
        vehicle_id = update_data.get("vehicle_id", work_order.vehicle_id)
        if customer_id != work_order.customer_id or vehicle_id != work_order.vehicle_id:
            await self._check_ownership(db, customer_id, vehicle_id)

        technician_id = update_data.get("technician_id")
        if technician_id is not None and technician_id != work_order.technician_id:
            await self._check_technician(db, technician_id)

        start_date = update_data.get("start_date", work_order.start_date)
        completion_date = update_data.get("completion_date", work_order.completion_date)
        if completion_date is not None and completion_date < start_date:
            raise BusinessValidationError("completionDate cannot be before startDate")

        if "status" in update_data:
            update_data["status"] = data.status.value

        for field, value in update_data.items():
            setattr(work_order, field, value)

        if data.line_items is not None:
            await self._replace_line_items(db, work_order, data.line_items)

        await db.flush()

        logger.info("Updated work order %s", work_order.order_number)
        return await self.get_by_id(db, work_order_id, refresh=True)

    async def _replace_line_items(
        self,
        db: AsyncSession,
        work_order: WorkOrder,
        lines: List[LineItemInput],
    ) -> None:
        existing = {item.id: item for item in work_order.line_items}
        old_quantities = part_quantities(existing.values())

        for line in lines:
            if line.id is not None and line.id not in existing:
                logger.warning(
                    "Line item %s not on work order %s", line.id, work_order.order_number
                )
                raise NotFoundError("Line item not found")
        await self._check_parts(db, lines)

        new_items = []
        for index, line in enumerate(lines):
            values = line.model_dump(exclude={"id"})
            if line.id is not None:
                item = existing[line.id]
                for field, value in values.items():
                    setattr(item, field, value)
                item.position = index
            else:
                item = WorkOrderLineItem(**values, position=index)
            new_items.append(item)

        # delete-orphan removes the lines left out
        work_order.line_items = new_items
        await db.flush()

        await self._apply_deltas(
            db,
            stock_deltas(old_quantities, part_quantities(new_items)),
            f"Adjusted in Work Order {work_order.order_number}",
        )

    async def delete(self, db: AsyncSession, work_order_id: uuid.UUID) -> None:
        """
        Deletes a work order that has not been invoiced, returning its parts
        to stock.

        Raises:
            NotFoundError: if the work order does not exist
            BusinessValidationError: if it is invoiced, paid or has an invoice
        """
        work_order = await self.get_by_id(db, work_order_id, refresh=True)

        if is_locked(work_order) or work_order.invoice is not None:
            logger.warning(
                "Delete rejected on %s work order %s", work_order.status, work_order.order_number
            )
            raise BusinessValidationError(
                "Cannot delete a work order that is already invoiced or paid"
            )

        order_number = work_order.order_number
        await self._apply_deltas(
            db,
            stock_deltas(part_quantities(work_order.line_items), {}),
            f"Returned from deleted Work Order {order_number}",
        )

        await db.delete(work_order)
        await db.flush()

        logger.info("Deleted work order %s", order_number)


work_order_service = WorkOrderService()
