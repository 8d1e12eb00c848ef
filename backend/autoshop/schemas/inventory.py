"""
Pydantic schemas for inventory
Project: Auto Shop Manager

Stocked parts, manual stock movements and the transaction ledger.
"""

import re
import uuid
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, computed_field, field_validator, model_validator

from autoshop.schemas.common import ApiModel, TimestampedRead, reject_null
from autoshop.schemas.enums import TransactionType


def normalize_part_number(value: Optional[str]) -> Optional[str]:
    """Strips and uppercases a part number; letters, digits, dots, dashes, slashes."""
    if value is None:
        return None
    value = value.strip().upper()
    if not re.match(r"^[A-Z0-9][A-Z0-9./\-]{0,49}$", value):
        raise ValueError("partNumber may only contain letters, digits, '.', '/' and '-'")
    return value


# ------------------------------------------------------------
# Inventory items
# ------------------------------------------------------------

class InventoryItemBase(ApiModel):
    part_number: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)
    manufacturer: Optional[str] = Field(None, max_length=100)
    location: Optional[str] = Field(None, max_length=100)
    min_quantity: int = Field(default=0, ge=0, description="Reorder threshold")
    cost_price: Decimal = Field(default=Decimal("0"), ge=0, max_digits=10, decimal_places=2)
    selling_price: Decimal = Field(default=Decimal("0"), ge=0, max_digits=10, decimal_places=2)


class InventoryItemCreate(InventoryItemBase):
    """
    New stocked part.

    A positive initial `quantity` is booked as a PURCHASE transaction.
    """
    quantity: int = Field(default=0, ge=0, description="Initial quantity on hand")

    @field_validator("part_number")
    @classmethod
    def validate_part_number(cls, v: str) -> str:
        return normalize_part_number(v)


class InventoryItemUpdate(ApiModel):
    """Partial update. The on-hand quantity changes only through transactions."""
    part_number: Optional[str] = Field(None, min_length=1, max_length=50)
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)
    manufacturer: Optional[str] = Field(None, max_length=100)
    location: Optional[str] = Field(None, max_length=100)
    min_quantity: Optional[int] = Field(None, ge=0)
    cost_price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    selling_price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)

    no_nulls = field_validator(
        "part_number", "name", "min_quantity", "cost_price", "selling_price"
    )(reject_null)

    @field_validator("part_number")
    @classmethod
    def validate_part_number(cls, v: Optional[str]) -> Optional[str]:
        return normalize_part_number(v)


class InventoryItemRead(InventoryItemBase, TimestampedRead):
    quantity: int

    @computed_field
    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.min_quantity


# ------------------------------------------------------------
# Transactions
# ------------------------------------------------------------

class InventoryTransactionCreate(ApiModel):
    """
    Manual stock movement.

    PURCHASE and RETURN add `quantity`, SALE removes it, ADJUSTMENT sets the
    on-hand quantity to `quantity` (a physical count).
    """
    type: TransactionType
    quantity: int
    notes: Optional[str] = None

    @model_validator(mode="after")
    def validate_quantity(self):
        if self.type == TransactionType.ADJUSTMENT:
            if self.quantity < 0:
                raise ValueError("Counted quantity cannot be negative")
        elif self.quantity <= 0:
            raise ValueError("quantity must be greater than zero")
        return self


class InventoryTransactionRead(TimestampedRead):
    inventory_item_id: uuid.UUID
    type: TransactionType
    quantity: int
    notes: Optional[str] = None


class InventoryItemDetail(InventoryItemRead):
    transactions: List[InventoryTransactionRead] = Field(default_factory=list)
