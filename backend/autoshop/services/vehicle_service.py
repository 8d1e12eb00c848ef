"""
Service layer for the Vehicle entity
Project: Auto Shop Manager

Business logic for vehicles: unique VIN, owner must exist, delete guard on
active work orders.
"""

import logging
import uuid
from typing import List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from autoshop.core.exceptions import ConflictError, DuplicateError, NotFoundError
from autoshop.models import Customer, Vehicle, WorkOrder
from autoshop.schemas.vehicle import VehicleCreate, VehicleUpdate
from autoshop.services.guards import ensure_vehicle_deletable

logger = logging.getLogger(__name__)

DUPLICATE_VIN = "A vehicle with this VIN already exists"


class VehicleService:
    """
    CRUD operations on vehicles.

    Async methods, no FastAPI dependencies; they flush and let the caller
    commit.
    """

    async def get_all(
        self,
        db: AsyncSession,
        customer_id: Optional[uuid.UUID] = None,
        search: Optional[str] = None,
    ) -> List[Tuple[Vehicle, int]]:
        """
        Lists vehicles, most recently updated first.

        Args:
            db: database session
            customer_id: only vehicles of this customer
            search: case-insensitive match on make, model, VIN, plate

        Returns:
            List of (vehicle, work_order_count)
        """
        work_order_count = (
            select(func.count(WorkOrder.id))
            .where(WorkOrder.vehicle_id == Vehicle.id)
            .correlate(Vehicle)
            .scalar_subquery()
        )
        query = select(Vehicle, work_order_count.label("work_order_count"))

        if customer_id is not None:
            query = query.where(Vehicle.customer_id == customer_id)

        if search:
            term = f"%{search.strip()}%"
            query = query.where(
                or_(
                    Vehicle.make.ilike(term),
                    Vehicle.model.ilike(term),
                    Vehicle.vin.ilike(term),
                    Vehicle.license_plate.ilike(term),
                )
            )

        query = query.order_by(Vehicle.updated_at.desc())
        result = await db.execute(query)
        return [(row[0], row[1] or 0) for row in result.unique().all()]

    async def get_by_id(
        self,
        db: AsyncSession,
        vehicle_id: uuid.UUID,
        with_relations: bool = False,
    ) -> Vehicle:
        """
        Fetches a vehicle (owner always included).

        Args:
            with_relations: also load work orders with line items and appointments

        Raises:
            NotFoundError: if the vehicle does not exist
        """
        query = select(Vehicle).where(Vehicle.id == vehicle_id)
        if with_relations:
            query = query.options(
                selectinload(Vehicle.work_orders),
                selectinload(Vehicle.appointments),
            )

        result = await db.execute(query)
        vehicle = result.unique().scalar_one_or_none()

        if not vehicle:
            logger.warning("Vehicle not found: %s", vehicle_id)
            raise NotFoundError("Vehicle not found")

        return vehicle

    async def _check_customer_exists(self, db: AsyncSession, customer_id: uuid.UUID) -> None:
        customer = await db.get(Customer, customer_id)
        if customer is None:
            logger.warning("Customer not found: %s", customer_id)
            raise NotFoundError("Customer not found")

    async def _check_vin_exists(
        self,
        db: AsyncSession,
        vin: str,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> None:
        query = select(Vehicle.id).where(func.upper(Vehicle.vin) == vin.upper())
        if exclude_id is not None:
            query = query.where(Vehicle.id != exclude_id)

        result = await db.execute(query)
        if result.first() is not None:
            logger.warning("Duplicate VIN: %s", vin)
            raise DuplicateError(DUPLICATE_VIN)

    async def create(self, db: AsyncSession, data: VehicleCreate) -> Vehicle:
        """
        Creates a vehicle for an existing customer.

        Raises:
            NotFoundError: if the customer does not exist
            DuplicateError: if the VIN is already registered
        """
        await self._check_customer_exists(db, data.customer_id)
        await self._check_vin_exists(db, data.vin)

        vehicle = Vehicle(**data.model_dump())
        db.add(vehicle)

        try:
            await db.flush()
        except IntegrityError as e:
            await db.rollback()
            if "vin" in str(e.orig).lower():
                logger.warning("Duplicate VIN on insert: %s", data.vin)
                raise DuplicateError(DUPLICATE_VIN)
            logger.error("Error creating vehicle: %s", e.orig)
            raise ConflictError("Could not create the vehicle")

        logger.info("Created vehicle %s (%s)", vehicle.id, vehicle.vin)
        return await self._reload(db, vehicle.id)

    async def update(
        self,
        db: AsyncSession,
        vehicle_id: uuid.UUID,
        data: VehicleUpdate,
    ) -> Vehicle:
        """
        Partial update of a vehicle.

        Raises:
            NotFoundError: if the vehicle or the new owner does not exist
            DuplicateError: if the new VIN is already registered
        """
        vehicle = await self.get_by_id(db, vehicle_id)
        update_data = data.model_dump(exclude_unset=True)

        new_owner = update_data.get("customer_id")
        if new_owner and new_owner != vehicle.customer_id:
            await self._check_customer_exists(db, new_owner)

        new_vin = update_data.get("vin")
        if new_vin and new_vin.upper() != vehicle.vin.upper():
            await self._check_vin_exists(db, new_vin, exclude_id=vehicle_id)

        for field, value in update_data.items():
            setattr(vehicle, field, value)

        try:
            await db.flush()
        except IntegrityError as e:
            await db.rollback()
            if "vin" in str(e.orig).lower():
                raise DuplicateError(DUPLICATE_VIN)
            logger.error("Error updating vehicle: %s", e.orig)
            raise ConflictError("Could not update the vehicle")

        logger.info("Updated vehicle %s", vehicle.id)
        # Reload so the owner relationship follows a changed customer_id
        return await self._reload(db, vehicle_id)

    async def _reload(self, db: AsyncSession, vehicle_id: uuid.UUID) -> Vehicle:
        result = await db.execute(
            select(Vehicle)
            .where(Vehicle.id == vehicle_id)
            .execution_options(populate_existing=True)
        )
        return result.unique().scalar_one()

    async def delete(self, db: AsyncSession, vehicle_id: uuid.UUID) -> None:
        """
        Deletes a vehicle with its work order history and appointments.

        Raises:
            NotFoundError: if the vehicle does not exist
            BusinessValidationError: if a work order on it is still active
        """
        vehicle = await self.get_by_id(db, vehicle_id, with_relations=True)

        ensure_vehicle_deletable(vehicle)

        await db.delete(vehicle)
        await db.flush()
        logger.info("Deleted vehicle %s", vehicle_id)


vehicle_service = VehicleService()
