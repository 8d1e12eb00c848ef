"""
SQLAlchemy model for appointments
Project: Auto Shop Manager
"""

import datetime
import uuid
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, String, Text, Time, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from autoshop.models import Base
from autoshop.models.mixins import TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from autoshop.models.customer import Customer
    from autoshop.models.vehicle import Vehicle


class Appointment(Base, UUIDMixin, TimestampMixin):
    """
    A scheduled shop visit for a customer's vehicle.

    Status values are defined in autoshop.schemas.enums.AppointmentStatus.
    """

    __tablename__ = "appointments"

    customer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("customers.id", ondelete="CASCADE"),
        nullable=False,
    )

    vehicle_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("vehicles.id", ondelete="CASCADE"),
        nullable=False,
    )

    date: Mapped[datetime.date] = mapped_column(Date, nullable=False, doc="Appointment day")
    start_time: Mapped[datetime.time] = mapped_column(Time, nullable=False)
    end_time: Mapped[datetime.time] = mapped_column(Time, nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="SCHEDULED",
    )

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # ------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------
    customer: Mapped["Customer"] = relationship(
        "Customer",
        back_populates="appointments",
        lazy="joined",
    )

    vehicle: Mapped["Vehicle"] = relationship(
        "Vehicle",
        back_populates="appointments",
        lazy="joined",
    )

    __table_args__ = (
        Index("ix_appointments_date", "date", "start_time"),
        CheckConstraint(
            "status IN ('SCHEDULED', 'CONFIRMED', 'IN_PROGRESS', 'COMPLETED', 'CANCELED', 'NO_SHOW')",
            name="ck_appointments_status",
        ),
        CheckConstraint("end_time > start_time", name="ck_appointments_time_range"),
    )

    def __repr__(self) -> str:
        return f"Appointment(date={self.date!r}, start={self.start_time!r}, status={self.status!r})"
