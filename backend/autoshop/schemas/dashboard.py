"""
Pydantic schemas for the dashboard
Project: Auto Shop Manager
"""

import datetime
from decimal import Decimal
from typing import List

from pydantic import Field

from autoshop.schemas.appointment import AppointmentRead
from autoshop.schemas.common import ApiModel, CustomerSummary, VehicleSummary
from autoshop.schemas.work_order import WorkOrderWithItems


class DashboardWorkOrder(WorkOrderWithItems):
    customer: CustomerSummary
    vehicle: VehicleSummary


class MonthlySales(ApiModel):
    """Invoiced total of one calendar month (VOID invoices excluded)."""
    month: datetime.date = Field(..., description="First day of the month")
    label: str = Field(..., description='E.g. "Oct 2026"')
    total: Decimal


class DashboardRead(ApiModel):
    total_customers: int
    total_vehicles: int
    total_work_orders: int
    active_work_orders: int
    total_appointments: int
    upcoming_appointments: int
    total_inventory_items: int
    low_stock_items: int

    todays_appointments: List[AppointmentRead] = Field(default_factory=list)
    recent_work_orders: List[DashboardWorkOrder] = Field(default_factory=list)
    recent_work_orders_total: Decimal = Decimal("0.00")
    incomplete_work_orders: List[DashboardWorkOrder] = Field(default_factory=list)
    monthly_sales: List[MonthlySales] = Field(default_factory=list)
