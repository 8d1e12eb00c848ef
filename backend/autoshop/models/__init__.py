"""
SQLAlchemy database models
Project: Auto Shop Manager

Central import of every model so that Base.metadata is complete.

Models:
- Customer: shop customers
- Vehicle: vehicles owned by customers
- Technician: shop technicians assignable to work orders
- Appointment: scheduled visits
- WorkOrder / WorkOrderLineItem: service orders and their billable lines
- InventoryItem / InventoryTransaction: stocked parts and their ledger
- Invoice / Payment: billing snapshots of completed work orders
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for every SQLAlchemy model."""
    pass


from autoshop.models.customer import Customer
from autoshop.models.vehicle import Vehicle
from autoshop.models.technician import Technician
from autoshop.models.appointment import Appointment
from autoshop.models.work_order import WorkOrder, WorkOrderLineItem
from autoshop.models.inventory import InventoryItem, InventoryTransaction
from autoshop.models.invoice import Invoice, Payment

__all__ = [
    "Base",
    "Customer",
    "Vehicle",
    "Technician",
    "Appointment",
    "WorkOrder",
    "WorkOrderLineItem",
    "InventoryItem",
    "InventoryTransaction",
    "Invoice",
    "Payment",
]
