"""
Tests for WorkOrderService: lifecycle and inventory effects.

Runs against the in-memory SQLite database from conftest.
"""

import uuid
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from autoshop.core.exceptions import BusinessValidationError, NotFoundError
from autoshop.models import InventoryTransaction, WorkOrder, WorkOrderLineItem
from autoshop.schemas.enums import WorkOrderStatus
from autoshop.schemas.work_order import LineItemInput, WorkOrderCreate, WorkOrderUpdate
from autoshop.services.work_order_service import (
    part_quantities,
    stock_deltas,
    work_order_service,
)


def create_payload(customer, vehicle, *lines, **kwargs) -> WorkOrderCreate:
    values = {
        "description": "Front brakes squeak",
        "start_date": date(2026, 10, 19),
        "customer_id": customer.id,
        "vehicle_id": vehicle.id,
        "line_items": list(lines),
    }
    values.update(kwargs)
    return WorkOrderCreate(**values)


def part_line(part, quantity, **kwargs) -> LineItemInput:
    values = {
        "description": "Brake pads",
        "quantity": quantity,
        "unit_price": Decimal("45.00"),
        "part_id": part.id,
    }
    values.update(kwargs)
    return LineItemInput(**values)


async def transactions_of(db, part):
    result = await db.execute(
        select(InventoryTransaction)
        .where(InventoryTransaction.inventory_item_id == part.id)
        .order_by(InventoryTransaction.created_at)
    )
    return list(result.scalars().all())


# ============================================================
# Pure helpers
# ============================================================


class TestStockDeltas:
    """Per-part quantity differences."""

    def test_part_quantities_sums_lines_of_same_part(self):
        p1, p2 = uuid.uuid4(), uuid.uuid4()
        items = [
            WorkOrderLineItem(part_id=p1, quantity=2),
            WorkOrderLineItem(part_id=p1, quantity=3),
            WorkOrderLineItem(part_id=p2, quantity=1),
            WorkOrderLineItem(part_id=None, quantity=7),
        ]
        assert part_quantities(items) == {p1: 5, p2: 1}

    def test_deltas(self):
        p1, p2, p3 = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()
        old = {p1: 3, p2: 4, p3: 1}
        new = {p1: 5, p3: 1}
        assert stock_deltas(old, new) == {p1: 2, p2: -4}

    def test_no_change(self):
        p1 = uuid.uuid4()
        assert stock_deltas({p1: 2}, {p1: 2}) == {}


# ============================================================
# Create
# ============================================================


class TestCreateWorkOrder:
    """Creation, ownership checks and stock consumption."""

    async def test_create_consumes_stock(self, db, customer, vehicle, part):
        """Create with part P qty 3 -> P down by 3 and one SALE of 3."""
        work_order = await work_order_service.create(
            db, create_payload(customer, vehicle, part_line(part, 3))
        )
        await db.commit()

        assert work_order.status == WorkOrderStatus.PENDING.value
        assert work_order.order_number.startswith("WO-")
        assert len(work_order.line_items) == 1
        assert work_order.line_items[0].position == 0

        await db.refresh(part)
        assert part.quantity == 7

        transactions = await transactions_of(db, part)
        assert len(transactions) == 1
        assert transactions[0].type == "SALE"
        assert transactions[0].quantity == 3
        assert transactions[0].notes == f"Used in Work Order {work_order.order_number}"

    async def test_create_without_parts_leaves_inventory_alone(self, db, customer, vehicle, part):
        labor = LineItemInput(
            description="Diagnosis",
            quantity=1,
            unit_price=Decimal("0"),
            labor_hours=Decimal("1.5"),
            labor_rate=Decimal("120.00"),
        )
        work_order = await work_order_service.create(db, create_payload(customer, vehicle, labor))
        await db.commit()

        assert work_order.line_items[0].line_total == Decimal("180.00")
        await db.refresh(part)
        assert part.quantity == 10
        assert await transactions_of(db, part) == []

    async def test_vehicle_of_another_customer(self, db, make_customer, make_vehicle, customer):
        other = await make_customer(first_name="Ann")
        foreign_vehicle = await make_vehicle(other)

        with pytest.raises(NotFoundError) as exc:
            await work_order_service.create(db, create_payload(customer, foreign_vehicle))
        assert exc.value.detail == "Vehicle not found or does not belong to this customer"

    async def test_unknown_customer(self, db, customer, vehicle):
        payload = create_payload(customer, vehicle, customer_id=uuid.uuid4())
        with pytest.raises(NotFoundError) as exc:
            await work_order_service.create(db, payload)
        assert exc.value.detail == "Customer not found"

    async def test_unknown_technician(self, db, customer, vehicle):
        payload = create_payload(customer, vehicle, technician_id=uuid.uuid4())
        with pytest.raises(NotFoundError) as exc:
            await work_order_service.create(db, payload)
        assert exc.value.detail == "Technician not found"

    async def test_unknown_part(self, db, customer, vehicle):
        line = LineItemInput(description="Ghost part", part_id=uuid.uuid4())
        with pytest.raises(NotFoundError) as exc:
            await work_order_service.create(db, create_payload(customer, vehicle, line))
        assert exc.value.detail == "Inventory item not found"

        count = await db.execute(select(func.count(WorkOrder.id)))
        assert count.scalar() == 0

    async def test_order_numbers_are_unique(self, db, customer, vehicle):
        numbers = set()
        for _ in range(5):
            work_order = await work_order_service.create(db, create_payload(customer, vehicle))
            numbers.add(work_order.order_number)
        assert len(numbers) == 5


# ============================================================
# Update
# ============================================================


class TestUpdateWorkOrder:
    """Line item reconciliation and the invoiced lock."""

    async def test_increase_quantity_books_sale(self, db, customer, vehicle, part):
        """Edit 3 -> 5: one more SALE of 2."""
        work_order = await work_order_service.create(
            db, create_payload(customer, vehicle, part_line(part, 3))
        )
        await db.commit()
        line_id = work_order.line_items[0].id

        updated = await work_order_service.update(
            db,
            work_order.id,
            WorkOrderUpdate(line_items=[part_line(part, 5, id=line_id)]),
        )
        await db.commit()

        assert updated.line_items[0].id == line_id
        assert updated.line_items[0].quantity == 5
        await db.refresh(part)
        assert part.quantity == 5

        transactions = await transactions_of(db, part)
        assert [(t.type, t.quantity) for t in transactions] == [("SALE", 3), ("SALE", 2)]
        assert transactions[-1].notes == f"Adjusted in Work Order {work_order.order_number}"

    async def test_decrease_quantity_books_return(self, db, customer, vehicle, part):
        """Edit 3 -> 1: RETURN of 2."""
        work_order = await work_order_service.create(
            db, create_payload(customer, vehicle, part_line(part, 3))
        )
        await db.commit()
        line_id = work_order.line_items[0].id

        await work_order_service.update(
            db,
            work_order.id,
            WorkOrderUpdate(line_items=[part_line(part, 1, id=line_id)]),
        )
        await db.commit()

        await db.refresh(part)
        assert part.quantity == 9
        transactions = await transactions_of(db, part)
        assert [(t.type, t.quantity) for t in transactions] == [("SALE", 3), ("RETURN", 2)]

    async def test_removed_line_returns_part(self, db, customer, vehicle, part):
        work_order = await work_order_service.create(
            db, create_payload(customer, vehicle, part_line(part, 4))
        )
        await db.commit()

        labor = LineItemInput(description="Labor", labor_hours=Decimal("1"), labor_rate=Decimal("90"))
        updated = await work_order_service.update(
            db, work_order.id, WorkOrderUpdate(line_items=[labor])
        )
        await db.commit()

        assert [item.description for item in updated.line_items] == ["Labor"]
        await db.refresh(part)
        assert part.quantity == 10

        remaining = await db.execute(
            select(func.count(WorkOrderLineItem.id)).where(WorkOrderLineItem.part_id == part.id)
        )
        assert remaining.scalar() == 0

    async def test_replacing_line_with_same_quantity_is_neutral(self, db, customer, vehicle, part):
        work_order = await work_order_service.create(
            db, create_payload(customer, vehicle, part_line(part, 2))
        )
        await db.commit()

        # New line (no id) for the same part and quantity
        await work_order_service.update(
            db, work_order.id, WorkOrderUpdate(line_items=[part_line(part, 2)])
        )
        await db.commit()

        await db.refresh(part)
        assert part.quantity == 8
        assert len(await transactions_of(db, part)) == 1

    async def test_unknown_line_item_id(self, db, customer, vehicle, part):
        work_order = await work_order_service.create(
            db, create_payload(customer, vehicle, part_line(part, 1))
        )
        await db.commit()

        with pytest.raises(NotFoundError) as exc:
            await work_order_service.update(
                db,
                work_order.id,
                WorkOrderUpdate(line_items=[part_line(part, 2, id=uuid.uuid4())]),
            )
        assert exc.value.detail == "Line item not found"

    async def test_scalar_fields_only(self, db, customer, vehicle, make_technician):
        technician = await make_technician()
        work_order = await work_order_service.create(db, create_payload(customer, vehicle))
        await db.commit()

        updated = await work_order_service.update(
            db,
            work_order.id,
            WorkOrderUpdate(
                status=WorkOrderStatus.IN_PROGRESS,
                technician_id=technician.id,
                diagnostic_notes="Worn pads",
            ),
        )
        assert updated.status == "IN_PROGRESS"
        assert updated.technician.name == technician.name
        assert updated.diagnostic_notes == "Worn pads"

    async def test_change_to_foreign_vehicle(self, db, customer, vehicle, make_customer, make_vehicle):
        other_vehicle = await make_vehicle(await make_customer())
        work_order = await work_order_service.create(db, create_payload(customer, vehicle))
        await db.commit()

        with pytest.raises(NotFoundError):
            await work_order_service.update(
                db, work_order.id, WorkOrderUpdate(vehicle_id=other_vehicle.id)
            )

    @pytest.mark.parametrize("locked_status", ["INVOICED", "PAID"])
    async def test_locked_order_cannot_be_updated(
        self, db, customer, vehicle, part, locked_status
    ):
        work_order = await work_order_service.create(
            db, create_payload(customer, vehicle, part_line(part, 3))
        )
        work_order.status = locked_status
        await db.commit()
        line_id = work_order.line_items[0].id

        with pytest.raises(BusinessValidationError) as exc:
            await work_order_service.update(
                db,
                work_order.id,
                WorkOrderUpdate(line_items=[part_line(part, 6, id=line_id)]),
            )
        assert exc.value.detail == "Cannot update a work order that is already invoiced or paid"

        await db.rollback()
        await db.refresh(part)
        assert part.quantity == 7
        assert len(await transactions_of(db, part)) == 1

    async def test_unknown_work_order(self, db):
        with pytest.raises(NotFoundError) as exc:
            await work_order_service.update(db, uuid.uuid4(), WorkOrderUpdate(description="x"))
        assert exc.value.detail == "Work order not found"


# ============================================================
# Delete
# ============================================================


class TestDeleteWorkOrder:
    """Deletion returns parts to stock unless the order is invoiced."""

    async def test_delete_returns_parts(self, db, customer, vehicle, part):
        """Delete an uninvoiced order with qty 4: RETURN 4, order and items gone."""
        work_order = await work_order_service.create(
            db, create_payload(customer, vehicle, part_line(part, 4))
        )
        await db.commit()
        order_number = work_order.order_number

        await work_order_service.delete(db, work_order.id)
        await db.commit()

        await db.refresh(part)
        assert part.quantity == 10

        transactions = await transactions_of(db, part)
        assert [(t.type, t.quantity) for t in transactions] == [("SALE", 4), ("RETURN", 4)]
        assert transactions[-1].notes == f"Returned from deleted Work Order {order_number}"

        orders = await db.execute(select(func.count(WorkOrder.id)))
        items = await db.execute(select(func.count(WorkOrderLineItem.id)))
        assert orders.scalar() == 0
        assert items.scalar() == 0

    @pytest.mark.parametrize("locked_status", ["INVOICED", "PAID"])
    async def test_locked_order_cannot_be_deleted(
        self, db, customer, vehicle, part, locked_status
    ):
        work_order = await work_order_service.create(
            db, create_payload(customer, vehicle, part_line(part, 4))
        )
        work_order.status = locked_status
        await db.commit()

        with pytest.raises(BusinessValidationError) as exc:
            await work_order_service.delete(db, work_order.id)
        assert exc.value.detail == "Cannot delete a work order that is already invoiced or paid"

        await db.refresh(part)
        assert part.quantity == 6
        assert len(await transactions_of(db, part)) == 1
        assert await db.get(WorkOrder, work_order.id) is not None

    async def test_delete_unknown(self, db):
        with pytest.raises(NotFoundError):
            await work_order_service.delete(db, uuid.uuid4())


# ============================================================
# List
# ============================================================


class TestListWorkOrders:
    """Search and filters."""

    async def test_search_and_filters(self, db, customer, vehicle, make_customer, make_vehicle):
        other_customer = await make_customer(first_name="Maria", last_name="Lopez")
        other_vehicle = await make_vehicle(other_customer, make="Honda", model="Civic")

        first = await work_order_service.create(
            db, create_payload(customer, vehicle, description="Oil change")
        )
        second = await work_order_service.create(
            db,
            create_payload(
                other_customer,
                other_vehicle,
                description="Timing belt",
                status=WorkOrderStatus.IN_PROGRESS,
            ),
        )
        await db.commit()

        by_name = await work_order_service.get_all(db, search="lopez")
        assert [wo.id for wo in by_name] == [second.id]

        by_make = await work_order_service.get_all(db, search="toyota")
        assert [wo.id for wo in by_make] == [first.id]

        by_number = await work_order_service.get_all(db, search=first.order_number)
        assert [wo.id for wo in by_number] == [first.id]

        by_status = await work_order_service.get_all(
            db, status_filter=WorkOrderStatus.IN_PROGRESS
        )
        assert [wo.id for wo in by_status] == [second.id]

        by_customer = await work_order_service.get_all(db, customer_id=customer.id)
        assert [wo.id for wo in by_customer] == [first.id]

        everything = await work_order_service.get_all(db)
        assert {wo.id for wo in everything} == {first.id, second.id}
