import logging
import uuid
from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from autoshop.core.database import get_db
from autoshop.schemas.common import SuccessResponse
from autoshop.schemas.technician import TechnicianCreate, TechnicianRead, TechnicianUpdate
from autoshop.services.technician_service import technician_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/technicians",
    tags=["Technicians"],
)


@router.get("", response_model=List[TechnicianRead])
async def get_all_technicians(
    include_inactive: bool = Query(False, alias="includeInactive"),
    db: AsyncSession = Depends(get_db),
):
    """Lists technicians, active ones only by default."""
    technicians = await technician_service.get_all(db, include_inactive=include_inactive)
    return technicians


@router.get("/{id}", response_model=TechnicianRead)
async def get_technician(id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    technician = await technician_service.get_by_id(db, id)
    return technician


@router.post("", response_model=TechnicianRead, status_code=status.HTTP_201_CREATED)
async def create_technician(data: TechnicianCreate, db: AsyncSession = Depends(get_db)):
    technician = await technician_service.create(db, data)
    await db.commit()
    return technician


@router.put("/{id}", response_model=TechnicianRead)
async def update_technician(id: uuid.UUID, data: TechnicianUpdate, db: AsyncSession = Depends(get_db)):
    technician = await technician_service.update(db, id, data)
    await db.commit()
    return technician


@router.delete("/{id}", response_model=SuccessResponse)
async def delete_technician(id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    """Deactivates a technician. Refused while active work orders are assigned."""
    await technician_service.delete(db, id)
    await db.commit()
    return SuccessResponse()
