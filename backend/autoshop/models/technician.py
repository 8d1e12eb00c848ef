from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from autoshop.models import Base
from autoshop.models.mixins import SoftDeleteMixin, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from autoshop.models.work_order import WorkOrder


class Technician(Base, UUIDMixin, TimestampMixin, SoftDeleteMixin):
    """
    Shop technician that work orders can be assigned to.
    """
    __tablename__ = "technicians"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    specialization: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Relationships
    work_orders: Mapped[List["WorkOrder"]] = relationship(
        "WorkOrder",
        back_populates="technician",
        lazy="noload",
    )

    def __repr__(self) -> str:
        return f"Technician(name={self.name!r})"
