"""
Service Layer for appointments
Project: Auto Shop Manager

Booked service slots. The vehicle of an appointment must belong to its
customer, the same rule applied to work orders.
"""

import datetime
import logging
import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from autoshop.core.exceptions import BusinessValidationError, NotFoundError
from autoshop.models import Appointment, Customer, Vehicle
from autoshop.schemas.appointment import AppointmentCreate, AppointmentUpdate
from autoshop.schemas.enums import AppointmentStatus

logger = logging.getLogger(__name__)


class AppointmentService:
    """CRUD operations on appointments; flush only, the caller commits."""

    async def get_all(
        self,
        db: AsyncSession,
        date: Optional[datetime.date] = None,
        customer_id: Optional[uuid.UUID] = None,
        vehicle_id: Optional[uuid.UUID] = None,
        status_filter: Optional[AppointmentStatus] = None,
    ) -> List[Appointment]:
        """
        Lists appointments in calendar order.

        Args:
            db: database session
            date: only appointments on this day
            customer_id / vehicle_id: relation filters
            status_filter: only appointments in this status
        """
        query = select(Appointment)

        if date:
            query = query.where(Appointment.date == date)
        if customer_id:
            query = query.where(Appointment.customer_id == customer_id)
        if vehicle_id:
            query = query.where(Appointment.vehicle_id == vehicle_id)
        if status_filter:
            query = query.where(Appointment.status == status_filter.value)

        query = query.order_by(Appointment.date.asc(), Appointment.start_time.asc())
        result = await db.execute(query)
        return list(result.unique().scalars().all())

    async def get_by_id(
        self,
        db: AsyncSession,
        appointment_id: uuid.UUID,
        refresh: bool = False,
    ) -> Appointment:
        """
        Raises:
            NotFoundError: if the appointment does not exist
        """
        query = select(Appointment).where(Appointment.id == appointment_id)
        if refresh:
            query = query.execution_options(populate_existing=True)

        result = await db.execute(query)
        appointment = result.unique().scalar_one_or_none()

        if not appointment:
            logger.warning("Appointment not found: %s", appointment_id)
            raise NotFoundError("Appointment not found")

        return appointment

    async def _check_ownership(
        self,
        db: AsyncSession,
        customer_id: uuid.UUID,
        vehicle_id: uuid.UUID,
    ) -> None:
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
            raise NotFoundError("Vehicle not found or does not belong to this customer")

    async def create(self, db: AsyncSession, data: AppointmentCreate) -> Appointment:
        """
        Raises:
            NotFoundError: customer or vehicle (ownership) not found
        """
        await self._check_ownership(db, data.customer_id, data.vehicle_id)

        values = data.model_dump()
        values["status"] = data.status.value
        appointment = Appointment(**values)
        db.add(appointment)
        await db.flush()

        logger.info(
            "Booked appointment %s on %s at %s", appointment.id, data.date, data.start_time
        )
        return await self.get_by_id(db, appointment.id, refresh=True)

    async def update(
        self,
        db: AsyncSession,
        appointment_id: uuid.UUID,
        data: AppointmentUpdate,
    ) -> Appointment:
        """
        Partial update; the time range and ownership are checked on the
        merged values.

        Raises:
            NotFoundError: appointment, customer or vehicle not found
            BusinessValidationError: end time not after start time
        """
        appointment = await self.get_by_id(db, appointment_id)
        update_data = data.model_dump(exclude_unset=True)

        start_time = update_data.get("start_time", appointment.start_time)
        end_time = update_data.get("end_time", appointment.end_time)
        if end_time <= start_time:
            raise BusinessValidationError("endTime must be after startTime")

        customer_id = update_data.get("customer_id", appointment.customer_id)
        vehicle_id = update_data.get("vehicle_id", appointment.vehicle_id)
        if customer_id != appointment.customer_id or vehicle_id != appointment.vehicle_id:
            await self._check_ownership(db, customer_id, vehicle_id)

        if "status" in update_data:
            update_data["status"] = data.status.value

        for field, value in update_data.items():
            setattr(appointment, field, value)

        await db.flush()
        logger.info("Updated appointment %s", appointment_id)
        return await self.get_by_id(db, appointment_id, refresh=True)

    async def delete(self, db: AsyncSession, appointment_id: uuid.UUID) -> None:
        appointment = await self.get_by_id(db, appointment_id)
        await db.delete(appointment)
        await db.flush()
        logger.info("Deleted appointment %s", appointment_id)


appointment_service = AppointmentService()
