"""
SQLAlchemy models for inventory
Project: Auto Shop Manager

Contains:
- InventoryItem: stocked part with on-hand quantity
- InventoryTransaction: audit entry of every quantity change
"""

import uuid
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from autoshop.models import Base
from autoshop.models.mixins import TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from autoshop.models.work_order import WorkOrderLineItem


class InventoryItem(Base, UUIDMixin, TimestampMixin):
    """
    A stocked part.

    `quantity` is only changed through InventoryService.apply_stock_change,
    which records an InventoryTransaction for each change.
    """

    __tablename__ = "inventory_items"

    # ------------------------------------------------------------
    # Catalog data
    # ------------------------------------------------------------
    part_number: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        doc="Part number (unique)",
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    manufacturer: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, doc="Shelf / bin")

    # ------------------------------------------------------------
    # Stock
    # ------------------------------------------------------------
    quantity: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        doc="Quantity on hand",
    )

    min_quantity: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        doc="Reorder threshold",
    )

    # ------------------------------------------------------------
    # Prices
    # ------------------------------------------------------------
    cost_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    selling_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))

    # ------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------
    transactions: Mapped[List["InventoryTransaction"]] = relationship(
        "InventoryTransaction",
        back_populates="inventory_item",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="InventoryTransaction.created_at.desc()",
    )

    line_items: Mapped[List["WorkOrderLineItem"]] = relationship(
        "WorkOrderLineItem",
        back_populates="part",
        lazy="noload",
    )

    __table_args__ = (
        Index("ix_inventory_items_name", "name"),
        Index("ix_inventory_items_category", "category"),
        CheckConstraint("min_quantity >= 0", name="ck_inventory_items_min_quantity"),
        CheckConstraint("cost_price >= 0 AND selling_price >= 0", name="ck_inventory_items_prices"),
    )

    @property
    def is_low_stock(self) -> bool:
        """True when the on-hand quantity is at or below the threshold."""
        return self.quantity <= self.min_quantity

    def __repr__(self) -> str:
        return f"InventoryItem(part_number={self.part_number!r}, quantity={self.quantity!r})"


class InventoryTransaction(Base, UUIDMixin, TimestampMixin):
    """
    Ledger entry for an inventory quantity change.

    Types: PURCHASE, SALE, ADJUSTMENT, RETURN. `quantity` is the absolute
    amount moved, except for ADJUSTMENT where it is the signed change.
    """

    __tablename__ = "inventory_transactions"

    inventory_item_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("inventory_items.id", ondelete="CASCADE"),
        nullable=False,
    )

    type: Mapped[str] = mapped_column(String(20), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    inventory_item: Mapped["InventoryItem"] = relationship(
        "InventoryItem",
        back_populates="transactions",
    )

    __table_args__ = (
        Index("ix_inventory_transactions_item_created", "inventory_item_id", "created_at"),
        CheckConstraint(
            "type IN ('PURCHASE', 'SALE', 'ADJUSTMENT', 'RETURN')",
            name="ck_inventory_transactions_type",
        ),
        CheckConstraint("quantity <> 0", name="ck_inventory_transactions_quantity"),
    )

    def __repr__(self) -> str:
        return f"InventoryTransaction(type={self.type!r}, quantity={self.quantity!r})"
