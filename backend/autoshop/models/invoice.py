"""
SQLAlchemy models for billing
Project: Auto Shop Manager

Contains:
- Invoice: billing snapshot of a completed work order
- Payment: payments recorded against an invoice
"""

from __future__ import annotations

import uuid
import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from autoshop.models import Base
from autoshop.models.mixins import TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from autoshop.models.customer import Customer
    from autoshop.models.work_order import WorkOrder


class Invoice(Base, UUIDMixin, TimestampMixin):
    """
    An invoice generated from a COMPLETED work order.

    subtotal, tax and total are copied from the work order when the invoice
    is generated and never recomputed afterwards.

    Attributes:
        invoice_number: generated number, e.g. INV-2610-0427 (unique)
        date / due_date: issue and due dates
        status: PENDING, SENT, PARTIALLY_PAID, PAID, OVERDUE or VOID
        subtotal / tax / total: amount snapshot
        customer_id: billed customer
        work_order_id: invoiced work order (one invoice per work order)

    Relationships:
        customer: joined eagerly
        work_order: the invoiced order
        payments: loaded with selectin, oldest first
    """

    __tablename__ = "invoices"

    # ------------------------------------------------------------
    # Relations
    # ------------------------------------------------------------
    customer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("customers.id", ondelete="CASCADE"),
        nullable=False,
    )

    work_order_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("work_orders.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    # ------------------------------------------------------------
    # Invoice data
    # ------------------------------------------------------------
    invoice_number: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        unique=True,
        doc="Generated invoice number",
    )

    date: Mapped[datetime.date] = mapped_column(Date, nullable=False, doc="Issue date")
    due_date: Mapped[datetime.date] = mapped_column(Date, nullable=False, doc="Payment due date")

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="PENDING",
    )

    subtotal: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    tax: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    total: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # ------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------
    customer: Mapped["Customer"] = relationship(
        "Customer",
        back_populates="invoices",
        lazy="joined",
    )

    work_order: Mapped["WorkOrder"] = relationship(
        "WorkOrder",
        back_populates="invoice",
    )

    payments: Mapped[List["Payment"]] = relationship(
        "Payment",
        back_populates="invoice",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Payment.date",
        lazy="selectin",
    )

    @property
    def amount_paid(self) -> Decimal:
        """Sum of recorded payments."""
        return sum((p.amount for p in self.payments), Decimal("0"))

    @property
    def balance_due(self) -> Decimal:
        """Amount still to be collected."""
        return self.total - self.amount_paid

    # ------------------------------------------------------------
    # Indexes and constraints
    # ------------------------------------------------------------
    __table_args__ = (
        Index("ix_invoices_customer_id", "customer_id"),
        Index("ix_invoices_due_date", "due_date"),
        CheckConstraint(
            "status IN ('PENDING', 'SENT', 'PARTIALLY_PAID', 'PAID', 'OVERDUE', 'VOID')",
            name="ck_invoices_status",
        ),
    )

    def __repr__(self) -> str:
        return f"Invoice(invoice_number={self.invoice_number!r}, status={self.status!r})"


class Payment(Base, UUIDMixin, TimestampMixin):
    """
    A payment against an invoice.
    """

    __tablename__ = "payments"

    invoice_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("invoices.id", ondelete="CASCADE"),
        nullable=False,
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    method: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        doc="CASH, CREDIT_CARD, DEBIT_CARD, CHECK, BANK_TRANSFER, ONLINE_PAYMENT",
    )

    reference: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        doc="Check number, card authorization, transfer id",
    )

    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    invoice: Mapped["Invoice"] = relationship(
        "Invoice",
        back_populates="payments",
    )

    __table_args__ = (
        Index("ix_payments_invoice_id", "invoice_id"),
        CheckConstraint("amount > 0", name="ck_payments_amount_positive"),
        CheckConstraint(
            "method IN ('CASH', 'CREDIT_CARD', 'DEBIT_CARD', 'CHECK', 'BANK_TRANSFER', 'ONLINE_PAYMENT')",
            name="ck_payments_method",
        ),
    )

    def __repr__(self) -> str:
        return f"Payment(amount={self.amount!r}, method={self.method!r})"
