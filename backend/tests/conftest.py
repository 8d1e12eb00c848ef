"""
Pytest configuration and shared fixtures.

Every test gets a fresh in-memory SQLite database (aiosqlite) with foreign
keys enforced, so ON DELETE CASCADE behaves as on PostgreSQL. API tests use
httpx against the ASGI app with get_db pointed at the same database.
"""

import os

# Must be set before autoshop.core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("APP_ENV", "testing")

import uuid
from datetime import date
from decimal import Decimal
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from autoshop.core.database import get_db
from autoshop.models import (
    Base,
    Customer,
    InventoryItem,
    Technician,
    Vehicle,
    WorkOrder,
)
from autoshop.schemas.enums import WorkOrderStatus


# ============================================================
# Database
# ============================================================


@pytest.fixture
async def engine():
    """In-memory database shared by every session of the test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session used by service tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client on the app; each request gets its own session."""
    from autoshop.main import app

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
    app.dependency_overrides.clear()


# ============================================================
# Factories
# ============================================================
# Each factory commits, so the rows survive a rollback in the code under test.


def unique_vin() -> str:
    return uuid.uuid4().hex[:17].upper()


@pytest.fixture
def make_customer(db):
    async def factory(**kwargs) -> Customer:
        values = {
            "first_name": "John",
            "last_name": "Smith",
            "email": f"john.{uuid.uuid4().hex[:8]}@example.com",
            "phone": "555-0100",
        }
        values.update(kwargs)
        customer = Customer(**values)
        db.add(customer)
        await db.commit()
        return customer

    return factory


@pytest.fixture
def make_vehicle(db):
    async def factory(customer: Customer, **kwargs) -> Vehicle:
        values = {
            "customer_id": customer.id,
            "make": "Toyota",
            "model": "Camry",
            "year": 2019,
            "vin": unique_vin(),
        }
        values.update(kwargs)
        vehicle = Vehicle(**values)
        db.add(vehicle)
        await db.commit()
        return vehicle

    return factory


@pytest.fixture
def make_part(db):
    async def factory(**kwargs) -> InventoryItem:
        values = {
            "part_number": f"P-{uuid.uuid4().hex[:6].upper()}",
            "name": "Brake pad set",
            "quantity": 10,
            "min_quantity": 2,
            "cost_price": Decimal("20.00"),
            "selling_price": Decimal("45.00"),
        }
        values.update(kwargs)
        part = InventoryItem(**values)
        db.add(part)
        await db.commit()
        return part

    return factory


@pytest.fixture
def make_technician(db):
    async def factory(**kwargs) -> Technician:
        values = {"name": "Alex Rivera", "specialization": "Brakes"}
        values.update(kwargs)
        technician = Technician(**values)
        db.add(technician)
        await db.commit()
        return technician

    return factory


@pytest.fixture
def make_work_order(db):
    """Bare work order row (no line items, no inventory effects)."""
    async def factory(customer: Customer, vehicle: Vehicle, **kwargs) -> WorkOrder:
        values = {
            "customer_id": customer.id,
            "vehicle_id": vehicle.id,
            "order_number": f"WO-{uuid.uuid4().hex[:9]}",
            "status": WorkOrderStatus.PENDING.value,
            "description": "Oil change",
            "start_date": date(2026, 10, 1),
        }
        values.update(kwargs)
        work_order = WorkOrder(**values)
        db.add(work_order)
        await db.commit()
        return work_order

    return factory


@pytest.fixture
async def customer(make_customer) -> Customer:
    return await make_customer()


@pytest.fixture
async def vehicle(make_vehicle, customer) -> Vehicle:
    return await make_vehicle(customer)


@pytest.fixture
async def part(make_part) -> InventoryItem:
    return await make_part(part_number="BRK-001", quantity=10)
