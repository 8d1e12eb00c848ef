"""
Business rule predicates
Project: Auto Shop Manager

Pure checks shared by the services: delete guards for customers and
vehicles and the work order lock. They take loaded ORM objects (or
anything with a `status` attribute) and touch no database.
"""

import logging
from typing import Any, Iterable

from autoshop.core.exceptions import BusinessValidationError
from autoshop.schemas.enums import (
    INACTIVE_WORK_ORDER_STATUSES,
    LOCKED_WORK_ORDER_STATUSES,
    SETTLED_INVOICE_STATUSES,
)

logger = logging.getLogger(__name__)


def _status(obj: Any) -> str:
    status = obj.status
    return getattr(status, "value", status)


def is_active_work_order(work_order: Any) -> bool:
    return _status(work_order) not in INACTIVE_WORK_ORDER_STATUSES


def is_unpaid_invoice(invoice: Any) -> bool:
    return _status(invoice) not in SETTLED_INVOICE_STATUSES


def has_active_work_orders(work_orders: Iterable[Any]) -> bool:
    return any(is_active_work_order(wo) for wo in work_orders)


def has_unpaid_invoices(invoices: Iterable[Any]) -> bool:
    return any(is_unpaid_invoice(inv) for inv in invoices)


def is_locked(work_order: Any) -> bool:
    """True once the work order is INVOICED or PAID."""
    return _status(work_order) in LOCKED_WORK_ORDER_STATUSES


def ensure_customer_deletable(customer: Any) -> None:
    """
    Raises BusinessValidationError when the customer has an active work
    order or an unpaid invoice. Both flags are reported in the error body.
    """
    active = has_active_work_orders(customer.work_orders)
    unpaid = has_unpaid_invoices(customer.invoices)
    if active or unpaid:
        logger.warning(
            "Customer %s not deletable: active_work_orders=%s unpaid_invoices=%s",
            customer.id, active, unpaid,
        )
        raise BusinessValidationError(
            "Cannot delete customer with active work orders or unpaid invoices",
            extra={"hasActiveWorkOrders": active, "hasUnpaidInvoices": unpaid},
        )


def ensure_vehicle_deletable(vehicle: Any) -> None:
    if has_active_work_orders(vehicle.work_orders):
        logger.warning("Vehicle %s not deletable: active work orders", vehicle.id)
        raise BusinessValidationError(
            "Cannot delete vehicle with active work orders",
            extra={"hasActiveWorkOrders": True},
        )
