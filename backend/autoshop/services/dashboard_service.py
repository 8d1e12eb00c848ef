"""
Service layer for the dashboard
Project: Auto Shop Manager

Read-only aggregates over the whole shop:
- entity counts (active work orders, upcoming appointments, low stock)
- today's appointments, recent and oldest open work orders
- invoiced totals of the last months
"""

import datetime
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import extract, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from autoshop.core.calculations import calculate_subtotal, format_date, round_money
from autoshop.models import Appointment, Customer, InventoryItem, Invoice, Vehicle, WorkOrder
from autoshop.schemas.enums import AppointmentStatus, InvoiceStatus, WorkOrderStatus

logger = logging.getLogger(__name__)

ACTIVE_WORK_ORDER_STATUSES = (
    WorkOrderStatus.PENDING.value,
    WorkOrderStatus.IN_PROGRESS.value,
    WorkOrderStatus.WAITING_FOR_PARTS.value,
)

INCOMPLETE_WORK_ORDER_STATUSES = (
    WorkOrderStatus.IN_PROGRESS.value,
    WorkOrderStatus.WAITING_FOR_PARTS.value,
)

UPCOMING_APPOINTMENT_STATUSES = (
    AppointmentStatus.SCHEDULED.value,
    AppointmentStatus.CONFIRMED.value,
)


def month_start(day: datetime.date, months_back: int = 0) -> datetime.date:
    """First day of the month `months_back` months before `day`."""
    index = day.year * 12 + (day.month - 1) - months_back
    return datetime.date(index // 12, index % 12 + 1, 1)


class DashboardService:
    """Aggregates for the dashboard. Reads only."""

    async def _count(self, db: AsyncSession, model, *conditions) -> int:
        query = select(func.count(model.id))
        if conditions:
            query = query.where(*conditions)
        result = await db.execute(query)
        return result.scalar() or 0

    async def monthly_sales(
        self,
        db: AsyncSession,
        today: datetime.date,
        months: int,
    ) -> List[Dict[str, Any]]:
        """
        Sum of non-VOID invoice totals per month, oldest first.

        Every month of the window is present; months without invoices
        report 0.00.
        """
        start = month_start(today, months - 1)
        year = extract("year", Invoice.date).label("year")
        month = extract("month", Invoice.date).label("month")

        result = await db.execute(
            select(year, month, func.sum(Invoice.total).label("total"))
            .where(
                Invoice.status != InvoiceStatus.VOID.value,
                Invoice.date >= start,
            )
            .group_by(year, month)
        )
        totals = {
            (int(row.year), int(row.month)): round_money(row.total or 0)
            for row in result.all()
        }

        sales = []
        for back in range(months - 1, -1, -1):
            first_day = month_start(today, back)
            sales.append({
                "month": first_day,
                "label": format_date(first_day, "%b %Y"),
                "total": totals.get((first_day.year, first_day.month), Decimal("0.00")),
            })
        return sales

    async def get_summary(
        self,
        db: AsyncSession,
        today: Optional[datetime.date] = None,
        limit: int = 5,
        months: int = 6,
    ) -> Dict[str, Any]:
        """
        Builds the dashboard.

        Args:
            db: database session
            today: reference day, defaults to the current date
            limit: size of the appointment and work order lists
            months: number of months in the sales series (current one included)

        Returns:
            dict with the fields of DashboardRead
        """
        today = today or datetime.date.today()

        summary: Dict[str, Any] = {
            "total_customers": await self._count(db, Customer),
            "total_vehicles": await self._count(db, Vehicle),
            "total_work_orders": await self._count(db, WorkOrder),
            "active_work_orders": await self._count(
                db, WorkOrder, WorkOrder.status.in_(ACTIVE_WORK_ORDER_STATUSES)
            ),
            "total_appointments": await self._count(db, Appointment),
            "upcoming_appointments": await self._count(
                db,
                Appointment,
                Appointment.date >= today,
                Appointment.status.in_(UPCOMING_APPOINTMENT_STATUSES),
            ),
            "total_inventory_items": await self._count(db, InventoryItem),
            "low_stock_items": await self._count(
                db, InventoryItem, InventoryItem.quantity <= InventoryItem.min_quantity
            ),
        }

        result = await db.execute(
            select(Appointment)
            .where(Appointment.date == today)
            .order_by(Appointment.start_time.asc())
            .limit(limit)
        )
        summary["todays_appointments"] = list(result.unique().scalars().all())

        result = await db.execute(
            select(WorkOrder)
            .where(WorkOrder.status != WorkOrderStatus.CANCELED.value)
            .order_by(WorkOrder.updated_at.desc())
            .limit(limit)
        )
        recent = list(result.unique().scalars().all())
        summary["recent_work_orders"] = recent
        summary["recent_work_orders_total"] = round_money(
            sum((calculate_subtotal(wo.line_items) for wo in recent), Decimal("0"))
        )

        result = await db.execute(
            select(WorkOrder)
            .where(WorkOrder.status.in_(INCOMPLETE_WORK_ORDER_STATUSES))
            .order_by(WorkOrder.start_date.asc())
            .limit(limit)
        )
        summary["incomplete_work_orders"] = list(result.unique().scalars().all())

        summary["monthly_sales"] = await self.monthly_sales(db, today, months)

        logger.debug(
            "Dashboard for %s: %d active work orders, %d low stock items",
            today, summary["active_work_orders"], summary["low_stock_items"],
        )
        return summary


dashboard_service = DashboardService()
