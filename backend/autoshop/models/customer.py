"""
SQLAlchemy model for the Customer entity
Project: Auto Shop Manager

Shop customers and their contact details.
"""

from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from autoshop.core.calculations import get_full_name
from autoshop.models import Base
from autoshop.models.mixins import TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from autoshop.models.appointment import Appointment
    from autoshop.models.invoice import Invoice
    from autoshop.models.vehicle import Vehicle
    from autoshop.models.work_order import WorkOrder


class Customer(Base, UUIDMixin, TimestampMixin):
    """
    A shop customer.

    Owns vehicles, work orders, appointments and invoices. Deleting a
    customer removes all of them (database-level ON DELETE CASCADE); the
    service layer refuses the delete while any work order is active or any
    invoice is unpaid.

    Attributes:
        first_name, last_name: customer name
        email: unique contact email
        phone: contact phone
        address, city, state, zip_code: postal address (optional)
    """

    __tablename__ = "customers"

    # ------------------------------------------------------------
    # Identity and contact
    # ------------------------------------------------------------
    first_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        doc="First name",
    )

    last_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        doc="Last name",
    )

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        doc="Email address (unique)",
    )

    phone: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        doc="Phone number",
    )

    # ------------------------------------------------------------
    # Address
    # ------------------------------------------------------------
    address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    zip_code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    # ------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------
    vehicles: Mapped[List["Vehicle"]] = relationship(
        "Vehicle",
        back_populates="customer",
        cascade="all",
        passive_deletes=True,
        order_by="Vehicle.created_at.desc()",
    )

    work_orders: Mapped[List["WorkOrder"]] = relationship(
        "WorkOrder",
        back_populates="customer",
        cascade="all",
        passive_deletes=True,
        order_by="WorkOrder.created_at.desc()",
    )

    appointments: Mapped[List["Appointment"]] = relationship(
        "Appointment",
        back_populates="customer",
        cascade="all",
        passive_deletes=True,
        order_by="Appointment.date.desc()",
    )

    invoices: Mapped[List["Invoice"]] = relationship(
        "Invoice",
        back_populates="customer",
        cascade="all",
        passive_deletes=True,
        order_by="Invoice.date.desc()",
    )

    __table_args__ = (
        Index("ix_customers_last_first", "last_name", "first_name"),
    )

    @property
    def full_name(self) -> str:
        return get_full_name(self.first_name, self.last_name)

    def __repr__(self) -> str:
        return f"Customer(id={self.id!r}, email={self.email!r})"
