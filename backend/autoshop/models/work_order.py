"""
SQLAlchemy models for work orders
Project: Auto Shop Manager

Contains:
- WorkOrder: a service order on a customer's vehicle
- WorkOrderLineItem: billable lines (parts and/or labor) of a work order
"""


from __future__ import annotations
import datetime
import uuid
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, Numeric, String, Text, Uuid, func
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import Mapped, mapped_column, relationship

from autoshop.core.calculations import calculate_line_total
from autoshop.models import Base
from autoshop.models.mixins import TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from autoshop.models.customer import Customer
    from autoshop.models.inventory import InventoryItem
    from autoshop.models.invoice import Invoice
    from autoshop.models.technician import Technician
    from autoshop.models.vehicle import Vehicle


# Status values are defined in autoshop.schemas.enums.WorkOrderStatus


class WorkOrder(Base, UUIDMixin, TimestampMixin):
    """
    A work order: requested/performed service on a vehicle.

    Attributes:
        order_number: generated human readable number (unique)
        status: PENDING, IN_PROGRESS, WAITING_FOR_PARTS, COMPLETED,
            INVOICED, PAID or CANCELED
        description: requested work
        diagnostic_notes: technician findings
        start_date / completion_date: service dates
        customer_id / vehicle_id: owner and vehicle (vehicle belongs to owner)
        technician_id: optional assignee

    Relationships:
        customer, vehicle, technician: joined eagerly
        line_items: ordered by position, loaded with selectin
        invoice: at most one, loaded with selectin
    """

    __tablename__ = "work_orders"

    # ------------------------------------------------------------
    # Relations
    # ------------------------------------------------------------
    customer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("customers.id", ondelete="CASCADE"),
        nullable=False,
        doc="Customer",
    )

    vehicle_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("vehicles.id", ondelete="CASCADE"),
        nullable=False,
        doc="Vehicle (owned by the customer)",
    )

    technician_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("technicians.id", ondelete="SET NULL"),
        nullable=True,
        doc="Assigned technician",
    )

    # ------------------------------------------------------------
    # Order data
    # ------------------------------------------------------------
    order_number: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        unique=True,
        doc="Generated order number, e.g. WO-482913057",
    )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="PENDING",
        doc="Lifecycle status",
    )

    description: Mapped[str] = mapped_column(Text, nullable=False)
    diagnostic_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    start_date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    completion_date: Mapped[Optional[datetime.date]] = mapped_column(Date, nullable=True)

    # ------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------
    customer: Mapped["Customer"] = relationship(
        "Customer",
        back_populates="work_orders",
        lazy="joined",
    )

    vehicle: Mapped["Vehicle"] = relationship(
        "Vehicle",
        back_populates="work_orders",
        lazy="joined",
    )

    technician: Mapped[Optional["Technician"]] = relationship(
        "Technician",
        back_populates="work_orders",
        lazy="joined",
    )

    line_items: Mapped[List["WorkOrderLineItem"]] = relationship(
        "WorkOrderLineItem",
        back_populates="work_order",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="WorkOrderLineItem.position",
        lazy="selectin",
    )

    invoice: Mapped[Optional["Invoice"]] = relationship(
        "Invoice",
        back_populates="work_order",
        uselist=False,
        cascade="all",
        passive_deletes=True,
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_work_orders_status", "status"),
        Index("ix_work_orders_customer_id", "customer_id"),
        Index("ix_work_orders_vehicle_id", "vehicle_id"),
        CheckConstraint(
            "status IN ('PENDING', 'IN_PROGRESS', 'WAITING_FOR_PARTS', 'COMPLETED', "
            "'INVOICED', 'PAID', 'CANCELED')",
            name="ck_work_orders_status",
        ),
        CheckConstraint(
            "completion_date IS NULL OR completion_date >= start_date",
            name="ck_work_orders_dates",
        ),
    )

    @property
    def line_item_count(self) -> int:
        return len(self.line_items)

    def __repr__(self) -> str:
        return f"WorkOrder(order_number={self.order_number!r}, status={self.status!r})"


class WorkOrderLineItem(Base, UUIDMixin, TimestampMixin):
    """
    One billable line of a work order.

    Cost = quantity * unit_price + labor_hours * labor_rate, the labor term
    only when both labor fields are set. A line may reference a stocked part;
    its quantity is then consumed from inventory.
    """

    __tablename__ = "work_order_line_items"

    work_order_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("work_orders.id", ondelete="CASCADE"),
        nullable=False,
    )

    part_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("inventory_items.id", ondelete="SET NULL"),
        nullable=True,
        doc="Referenced inventory item",
    )

    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        doc="Order of the line within the work order",
    )

    description: Mapped[str] = mapped_column(String(255), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    unit_price: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        default=Decimal("0"),
    )

    labor_hours: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 2), nullable=True)
    labor_rate: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)

    # ------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------
    work_order: Mapped["WorkOrder"] = relationship(
        "WorkOrder",
        back_populates="line_items",
    )

    part: Mapped[Optional["InventoryItem"]] = relationship(
        "InventoryItem",
        back_populates="line_items",
        lazy="joined",
    )

    __table_args__ = (
        Index("ix_work_order_line_items_work_order_id", "work_order_id"),
        Index("ix_work_order_line_items_part_id", "part_id"),
        CheckConstraint("quantity > 0", name="ck_work_order_line_items_quantity"),
        CheckConstraint("unit_price >= 0", name="ck_work_order_line_items_unit_price"),
    )

    @hybrid_property
    def line_total(self) -> Decimal:
        return calculate_line_total(
            self.quantity, self.unit_price, self.labor_hours, self.labor_rate
        )

    @line_total.expression
    def line_total(cls):
        return cls.quantity * cls.unit_price + func.coalesce(
            cls.labor_hours * cls.labor_rate, 0
        )

    def __repr__(self) -> str:
        return f"WorkOrderLineItem(description={self.description!r}, quantity={self.quantity!r})"
