"""
Service Layer for the Technician entity
Project: Auto Shop Manager
"""

import logging
import uuid
from typing import List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from autoshop.core.exceptions import BusinessValidationError, NotFoundError
from autoshop.models.technician import Technician
from autoshop.models.work_order import WorkOrder
from autoshop.schemas.enums import INACTIVE_WORK_ORDER_STATUSES
from autoshop.schemas.technician import TechnicianCreate, TechnicianUpdate

logger = logging.getLogger(__name__)


class TechnicianService:
    """
    CRUD on technicians. Deleting only deactivates, so past work orders
    keep their assignee.
    """

    async def get_all(self, db: AsyncSession, include_inactive: bool = False) -> List[Technician]:
        """Lists technicians by name, active ones only unless asked otherwise."""
        query = select(Technician)
        if not include_inactive:
            query = query.where(Technician.is_active.is_(True))
        query = query.order_by(Technician.name)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def get_by_id(self, db: AsyncSession, id: uuid.UUID) -> Technician:
        """Technician detail, inactive ones included."""
        technician = await db.get(Technician, id)

        if not technician:
            logger.warning("Technician not found: %s", id)
            raise NotFoundError("Technician not found")

        return technician

    async def create(self, db: AsyncSession, data: TechnicianCreate) -> Technician:
        technician = Technician(**data.model_dump())
        db.add(technician)
        await db.flush()
        await db.refresh(technician)
        logger.info("Created technician %s (%s)", technician.name, technician.id)
        return technician

    async def update(self, db: AsyncSession, id: uuid.UUID, data: TechnicianUpdate) -> Technician:
        technician = await self.get_by_id(db, id)

        update_data = data.model_dump(exclude_unset=True)
        for k, v in update_data.items():
            setattr(technician, k, v)

        await db.flush()
        await db.refresh(technician)
        logger.info("Updated technician %s", technician.id)
        return technician

    async def delete(self, db: AsyncSession, id: uuid.UUID) -> None:
        """Soft delete. Blocked while active work orders are assigned."""
        technician = await self.get_by_id(db, id)

        wo_query = select(func.count(WorkOrder.id)).where(
            WorkOrder.technician_id == id,
            WorkOrder.status.not_in(INACTIVE_WORK_ORDER_STATUSES),
        )
        wo_count = await db.execute(wo_query)

        if (wo_count.scalar() or 0) > 0:
            logger.warning("Technician %s still has active work orders", id)
            raise BusinessValidationError(
                "Cannot delete technician with active work orders",
                extra={"hasActiveWorkOrders": True},
            )

        technician.is_active = False
        await db.flush()
        logger.info("Deactivated technician %s", id)


technician_service = TechnicianService()
