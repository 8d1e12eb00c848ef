"""
Enumerations shared by schemas and services
Project: Auto Shop Manager

Stored as plain strings; the models carry matching CHECK constraints.
"""

from enum import Enum


class WorkOrderStatus(str, Enum):
    """
    Work order lifecycle.

    PENDING -> IN_PROGRESS -> WAITING_FOR_PARTS -> COMPLETED -> INVOICED -> PAID,
    CANCELED from any non-terminal state.
    """
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    WAITING_FOR_PARTS = "WAITING_FOR_PARTS"
    COMPLETED = "COMPLETED"
    INVOICED = "INVOICED"
    PAID = "PAID"
    CANCELED = "CANCELED"


class InvoiceStatus(str, Enum):
    PENDING = "PENDING"
    SENT = "SENT"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    PAID = "PAID"
    OVERDUE = "OVERDUE"
    VOID = "VOID"


class PaymentMethod(str, Enum):
    CASH = "CASH"
    CREDIT_CARD = "CREDIT_CARD"
    DEBIT_CARD = "DEBIT_CARD"
    CHECK = "CHECK"
    BANK_TRANSFER = "BANK_TRANSFER"
    ONLINE_PAYMENT = "ONLINE_PAYMENT"


class TransactionType(str, Enum):
    """Inventory ledger entry types."""
    PURCHASE = "PURCHASE"
    SALE = "SALE"
    ADJUSTMENT = "ADJUSTMENT"
    RETURN = "RETURN"


class AppointmentStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    CONFIRMED = "CONFIRMED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELED = "CANCELED"
    NO_SHOW = "NO_SHOW"


# A work order in one of these statuses no longer blocks deletions
INACTIVE_WORK_ORDER_STATUSES = frozenset({
    WorkOrderStatus.COMPLETED.value,
    WorkOrderStatus.CANCELED.value,
    WorkOrderStatus.PAID.value,
})

# A work order in one of these statuses is frozen
LOCKED_WORK_ORDER_STATUSES = frozenset({
    WorkOrderStatus.INVOICED.value,
    WorkOrderStatus.PAID.value,
})

# An invoice in one of these statuses is settled
SETTLED_INVOICE_STATUSES = frozenset({
    InvoiceStatus.PAID.value,
    InvoiceStatus.VOID.value,
})
