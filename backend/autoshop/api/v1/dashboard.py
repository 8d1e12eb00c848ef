"""
FastAPI router for the dashboard
Project: Auto Shop Manager
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from autoshop.core.database import get_db
from autoshop.schemas.dashboard import DashboardRead
from autoshop.services.dashboard_service import dashboard_service

router = APIRouter(
    prefix="/dashboard",
    tags=["Dashboard"],
)


@router.get(
    "",
    name="dashboard",
    summary="Shop dashboard",
    description=(
        "Counts, today's appointments, recent and open work orders and "
        "monthly invoiced totals for the last 6 months."
    ),
    response_model=DashboardRead,
    status_code=status.HTTP_200_OK,
)
async def get_dashboard(db: AsyncSession = Depends(get_db)) -> DashboardRead:
    summary = await dashboard_service.get_summary(db)
    return DashboardRead.model_validate(summary, from_attributes=True)
