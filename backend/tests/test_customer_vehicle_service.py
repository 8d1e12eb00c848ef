"""
Tests for CustomerService and VehicleService: uniqueness, ownership and
delete guards.
"""

import uuid
from datetime import date, time

import pytest
from sqlalchemy import func, select

from autoshop.core.exceptions import BusinessValidationError, DuplicateError, NotFoundError
from autoshop.models import Appointment, Customer, Invoice, Vehicle, WorkOrder
from autoshop.schemas.customer import CustomerCreate, CustomerUpdate
from autoshop.schemas.enums import WorkOrderStatus
from autoshop.schemas.vehicle import VehicleCreate, VehicleUpdate
from autoshop.services.customer_service import CustomerService
from autoshop.services.vehicle_service import vehicle_service

customer_service = CustomerService()


async def count(db, model) -> int:
    result = await db.execute(select(func.count(model.id)))
    return result.scalar()


# ============================================================
# Customers
# ============================================================


class TestCustomerService:
    """Customer CRUD."""

    async def test_create_normalizes_email(self, db):
        customer = await customer_service.create(
            db,
            CustomerCreate(
                first_name=" Jane ",
                last_name="Doe",
                email="Jane.Doe@Example.com",
                phone="555-0199",
            ),
        )
        assert customer.email == "jane.doe@example.com"
        assert customer.first_name == "Jane"
        assert customer.full_name == "Jane Doe"

    async def test_duplicate_email(self, db, customer):
        with pytest.raises(DuplicateError) as exc:
            await customer_service.create(
                db,
                CustomerCreate(
                    first_name="Other",
                    last_name="Person",
                    email=customer.email.upper(),
                    phone="555-0111",
                ),
            )
        assert exc.value.detail == "A customer with this email already exists"

    async def test_update_to_taken_email(self, db, customer, make_customer):
        other = await make_customer()
        with pytest.raises(DuplicateError):
            await customer_service.update(db, other.id, CustomerUpdate(email=customer.email))

    async def test_update_keeps_own_email(self, db, customer):
        updated = await customer_service.update(
            db, customer.id, CustomerUpdate(email=customer.email, city="Austin")
        )
        assert updated.city == "Austin"

    async def test_list_with_counts(self, db, customer, vehicle, make_vehicle, make_work_order, make_customer):
        await make_vehicle(customer)
        await make_work_order(customer, vehicle)
        await make_customer(first_name="Zoe", last_name="Adams")

        rows = await customer_service.get_all(db)
        assert [c.last_name for c, _, _ in rows] == ["Adams", "Smith"]
        counts = {c.id: (v, w) for c, v, w in rows}
        assert counts[customer.id] == (2, 1)

        found = await customer_service.get_all(db, search="john smith")
        assert [c.id for c, _, _ in found] == [customer.id]

    async def test_detail_loads_relations(self, db, customer, vehicle, make_work_order):
        await make_work_order(customer, vehicle)
        detail = await customer_service.get_by_id(db, customer.id, with_relations=True)
        assert [v.id for v in detail.vehicles] == [vehicle.id]
        assert len(detail.work_orders) == 1
        assert detail.invoices == []

    async def test_get_unknown(self, db):
        with pytest.raises(NotFoundError) as exc:
            await customer_service.get_by_id(db, uuid.uuid4())
        assert exc.value.detail == "Customer not found"


class TestCustomerDeleteGuard:
    """Delete refused while work is active or money is owed."""

    async def test_active_work_order_blocks(self, db, customer, vehicle, make_work_order):
        await make_work_order(customer, vehicle, status=WorkOrderStatus.IN_PROGRESS.value)

        with pytest.raises(BusinessValidationError) as exc:
            await customer_service.delete(db, customer.id)
        assert exc.value.detail == "Cannot delete customer with active work orders or unpaid invoices"
        assert exc.value.to_body() == {
            "error": "Cannot delete customer with active work orders or unpaid invoices",
            "hasActiveWorkOrders": True,
            "hasUnpaidInvoices": False,
        }
        assert await count(db, Customer) == 1

    async def test_unpaid_invoice_blocks(self, db, customer, vehicle, make_work_order):
        work_order = await make_work_order(customer, vehicle, status=WorkOrderStatus.INVOICED.value)
        db.add(
            Invoice(
                customer_id=customer.id,
                work_order_id=work_order.id,
                invoice_number="INV-2610-0001",
                date=work_order.start_date,
                due_date=work_order.start_date,
                status="PENDING",
                subtotal=100,
                tax=8.75,
                total=108.75,
            )
        )
        await db.commit()

        with pytest.raises(BusinessValidationError) as exc:
            await customer_service.delete(db, customer.id)
        assert exc.value.extra == {"hasActiveWorkOrders": True, "hasUnpaidInvoices": True}

    async def test_delete_cascades(self, db, customer, vehicle, make_work_order):
        await make_work_order(customer, vehicle, status=WorkOrderStatus.COMPLETED.value)
        await make_work_order(customer, vehicle, status=WorkOrderStatus.CANCELED.value)
        db.add(
            Appointment(
                customer_id=customer.id,
                vehicle_id=vehicle.id,
                date=date(2026, 10, 20),
                start_time=time(9, 0),
                end_time=time(10, 0),
            )
        )
        await db.commit()

        await customer_service.delete(db, customer.id)
        await db.commit()

        assert await count(db, Customer) == 0
        assert await count(db, Vehicle) == 0
        assert await count(db, WorkOrder) == 0
        assert await count(db, Appointment) == 0


# ============================================================
# Vehicles
# ============================================================


class TestVehicleService:
    """Vehicle CRUD and guards."""

    def payload(self, customer, **kwargs) -> VehicleCreate:
        values = {
            "customer_id": customer.id,
            "make": "Ford",
            "model": "F-150",
            "year": 2021,
            "vin": "1FTFW1E50MFA00001",
        }
        values.update(kwargs)
        return VehicleCreate(**values)

    async def test_create(self, db, customer):
        vehicle = await vehicle_service.create(db, self.payload(customer, license_plate="abc 123"))
        assert vehicle.customer.id == customer.id
        assert vehicle.license_plate == "ABC 123"
        assert vehicle.display_name == "2021 Ford F-150"

    async def test_duplicate_vin_inserts_nothing(self, db, customer):
        await vehicle_service.create(db, self.payload(customer))
        await db.commit()

        with pytest.raises(DuplicateError) as exc:
            await vehicle_service.create(db, self.payload(customer, vin="1ftfw1e50mfa00001"))
        assert exc.value.detail == "A vehicle with this VIN already exists"

        await db.rollback()
        assert await count(db, Vehicle) == 1

    async def test_unknown_customer(self, db, customer):
        with pytest.raises(NotFoundError) as exc:
            await vehicle_service.create(db, self.payload(customer, customer_id=uuid.uuid4()))
        assert exc.value.detail == "Customer not found"

    async def test_transfer_to_new_owner(self, db, vehicle, make_customer):
        new_owner = await make_customer(first_name="Ann")
        updated = await vehicle_service.update(db, vehicle.id, VehicleUpdate(customer_id=new_owner.id))
        assert updated.customer_id == new_owner.id
        assert updated.customer.first_name == "Ann"

    async def test_list_by_customer(self, db, customer, vehicle, make_customer, make_vehicle):
        await make_vehicle(await make_customer())
        rows = await vehicle_service.get_all(db, customer_id=customer.id)
        assert [(v.id, n) for v, n in rows] == [(vehicle.id, 0)]

    async def test_active_work_order_blocks_delete(self, db, customer, vehicle, make_work_order):
        await make_work_order(customer, vehicle, status=WorkOrderStatus.PENDING.value)

        with pytest.raises(BusinessValidationError) as exc:
            await vehicle_service.delete(db, vehicle.id)
        assert exc.value.to_body() == {
            "error": "Cannot delete vehicle with active work orders",
            "hasActiveWorkOrders": True,
        }

    async def test_delete_with_closed_history(self, db, customer, vehicle, make_work_order):
        await make_work_order(customer, vehicle, status=WorkOrderStatus.PAID.value)

        await vehicle_service.delete(db, vehicle.id)
        await db.commit()

        assert await count(db, Vehicle) == 0
        assert await count(db, WorkOrder) == 0
