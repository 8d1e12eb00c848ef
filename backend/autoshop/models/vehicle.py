"""
SQLAlchemy model for the Vehicle entity
Project: Auto Shop Manager

Vehicles owned by customers.
"""

import uuid
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from autoshop.core.calculations import get_vehicle_display_name
from autoshop.models import Base
from autoshop.models.mixins import TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from autoshop.models.appointment import Appointment
    from autoshop.models.customer import Customer
    from autoshop.models.work_order import WorkOrder


class Vehicle(Base, UUIDMixin, TimestampMixin):
    """
    A vehicle, owned by exactly one customer.

    Attributes:
        customer_id: owning customer
        make, model, year: vehicle identification
        vin: vehicle identification number (unique)
        license_plate, color: optional descriptive data
        mileage: last known odometer reading
        notes: free text

    Relationships:
        customer: owner (joined eagerly)
        work_orders: work orders on this vehicle
        appointments: scheduled visits
    """

    __tablename__ = "vehicles"

    # ------------------------------------------------------------
    # Owner
    # ------------------------------------------------------------
    customer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("customers.id", ondelete="CASCADE"),
        nullable=False,
        doc="Owning customer",
    )

    # ------------------------------------------------------------
    # Vehicle data
    # ------------------------------------------------------------
    make: Mapped[str] = mapped_column(String(100), nullable=False, doc="Manufacturer")
    model: Mapped[str] = mapped_column(String(100), nullable=False, doc="Model")
    year: Mapped[int] = mapped_column(Integer, nullable=False, doc="Model year")

    vin: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        unique=True,
        doc="Vehicle identification number",
    )

    license_plate: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    color: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    mileage: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        doc="Odometer reading",
    )

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # ------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------
    customer: Mapped["Customer"] = relationship(
        "Customer",
        back_populates="vehicles",
        lazy="joined",
    )

    work_orders: Mapped[List["WorkOrder"]] = relationship(
        "WorkOrder",
        back_populates="vehicle",
        cascade="all",
        passive_deletes=True,
        order_by="WorkOrder.created_at.desc()",
    )

    appointments: Mapped[List["Appointment"]] = relationship(
        "Appointment",
        back_populates="vehicle",
        cascade="all",
        passive_deletes=True,
        order_by="Appointment.date.desc()",
    )

    __table_args__ = (
        Index("ix_vehicles_customer_id", "customer_id"),
        Index("ix_vehicles_license_plate", "license_plate"),
        CheckConstraint("year >= 1886", name="ck_vehicles_year"),
        CheckConstraint("mileage IS NULL OR mileage >= 0", name="ck_vehicles_mileage"),
    )

    @property
    def display_name(self) -> str:
        """E.g. "2019 Toyota Camry"."""
        return get_vehicle_display_name(self.make, self.model, self.year)

    def __repr__(self) -> str:
        return f"Vehicle(id={self.id!r}, vin={self.vin!r})"
