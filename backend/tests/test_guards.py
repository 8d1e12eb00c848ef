"""
Unit tests for the business rule predicates.

Plain objects stand in for ORM rows; the guards only read `status`.
"""

from types import SimpleNamespace

import pytest

from autoshop.core.exceptions import BusinessValidationError
from autoshop.schemas.enums import InvoiceStatus, WorkOrderStatus
from autoshop.services.guards import (
    ensure_customer_deletable,
    ensure_vehicle_deletable,
    has_active_work_orders,
    has_unpaid_invoices,
    is_locked,
)


def row(status):
    return SimpleNamespace(status=status)


class TestWorkOrderPredicates:
    """Active and locked work orders."""

    @pytest.mark.parametrize(
        "status, active",
        [
            (WorkOrderStatus.PENDING, True),
            (WorkOrderStatus.IN_PROGRESS, True),
            (WorkOrderStatus.WAITING_FOR_PARTS, True),
            (WorkOrderStatus.INVOICED, True),
            (WorkOrderStatus.COMPLETED, False),
            (WorkOrderStatus.CANCELED, False),
            (WorkOrderStatus.PAID, False),
        ],
    )
    def test_active(self, status, active):
        assert has_active_work_orders([row(status)]) is active
        assert has_active_work_orders([row(status.value)]) is active

    def test_no_work_orders(self):
        assert has_active_work_orders([]) is False

    def test_locked(self):
        assert is_locked(row("INVOICED"))
        assert is_locked(row(WorkOrderStatus.PAID))
        assert not is_locked(row("COMPLETED"))


class TestInvoicePredicates:
    def test_unpaid(self):
        assert has_unpaid_invoices([row(InvoiceStatus.PAID), row("PARTIALLY_PAID")])
        assert not has_unpaid_invoices([row("PAID"), row(InvoiceStatus.VOID)])


class TestDeleteGuards:
    """Errors carry the flags the client shows."""

    def test_customer_clear(self):
        customer = SimpleNamespace(id=1, work_orders=[row("PAID")], invoices=[row("PAID")])
        ensure_customer_deletable(customer)

    def test_customer_blocked_by_invoice_only(self):
        customer = SimpleNamespace(id=1, work_orders=[row("COMPLETED")], invoices=[row("OVERDUE")])
        with pytest.raises(BusinessValidationError) as exc:
            ensure_customer_deletable(customer)
        assert exc.value.extra == {"hasActiveWorkOrders": False, "hasUnpaidInvoices": True}

    def test_vehicle_blocked(self):
        vehicle = SimpleNamespace(id=1, work_orders=[row("WAITING_FOR_PARTS")])
        with pytest.raises(BusinessValidationError) as exc:
            ensure_vehicle_deletable(vehicle)
        assert exc.value.status_code == 400
        assert exc.value.extra == {"hasActiveWorkOrders": True}
