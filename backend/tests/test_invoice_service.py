"""
Tests for InvoiceService.

Covers invoice generation from a completed work order, the status derived
from payments and its propagation to the work order.
"""

import uuid
from datetime import date, timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest

from autoshop.core.config import settings
from autoshop.core.exceptions import BusinessValidationError, NotFoundError
from autoshop.schemas.enums import InvoiceStatus, PaymentMethod, WorkOrderStatus
from autoshop.schemas.invoice import InvoiceCreate, InvoiceUpdate, PaymentCreate
from autoshop.schemas.work_order import LineItemInput, WorkOrderCreate
from autoshop.services.invoice_service import invoice_service, settled_status
from autoshop.services.work_order_service import work_order_service


@pytest.fixture
def make_order(db, customer, vehicle, part):
    """Work order with 2 brake pads (90.00) and 1.5h labor at 100.00 (150.00)."""
    async def factory(status: WorkOrderStatus = WorkOrderStatus.COMPLETED):
        work_order = await work_order_service.create(
            db,
            WorkOrderCreate(
                description="Brake job",
                start_date=date(2026, 10, 1),
                customer_id=customer.id,
                vehicle_id=vehicle.id,
                status=status,
                line_items=[
                    LineItemInput(
                        description="Brake pads",
                        quantity=2,
                        unit_price=Decimal("45.00"),
                        part_id=part.id,
                    ),
                    LineItemInput(
                        description="Labor",
                        quantity=1,
                        labor_hours=Decimal("1.5"),
                        labor_rate=Decimal("100.00"),
                    ),
                ],
            ),
        )
        await db.commit()
        return work_order

    return factory


@pytest.fixture
async def invoice(db, make_order):
    work_order = await make_order()
    invoice = await invoice_service.create_from_work_order(
        db, InvoiceCreate(work_order_id=work_order.id)
    )
    await db.commit()
    return invoice


def payment(amount: str, method: PaymentMethod = PaymentMethod.CASH) -> PaymentCreate:
    return PaymentCreate(amount=Decimal(amount), method=method)


# ============================================================
# Status derivation
# ============================================================


class TestSettledStatus:
    """Invoice status implied by payments."""

    def make(self, total, paid, status="PENDING"):
        return SimpleNamespace(total=Decimal(total), amount_paid=Decimal(paid), status=status)

    def test_fully_paid(self):
        assert settled_status(self.make("100.00", "100.00")) == "PAID"

    def test_partially_paid(self):
        assert settled_status(self.make("100.00", "0.01", "SENT")) == "PARTIALLY_PAID"

    def test_no_payments_keeps_manual_status(self):
        assert settled_status(self.make("100.00", "0", "OVERDUE")) == "OVERDUE"

    def test_no_payments_after_paid(self):
        assert settled_status(self.make("100.00", "0", "PAID")) == "PENDING"
        assert settled_status(self.make("100.00", "0", "PARTIALLY_PAID")) == "PENDING"


# ============================================================
# Generation
# ============================================================


class TestCreateInvoice:
    """create_from_work_order."""

    async def test_snapshot_amounts(self, db, invoice):
        assert invoice.subtotal == Decimal("240.00")
        assert invoice.tax == Decimal("21.00")
        assert invoice.total == Decimal("261.00")
        assert invoice.status == InvoiceStatus.PENDING.value
        assert invoice.invoice_number.startswith("INV-")
        assert invoice.date == date.today()
        assert invoice.due_date == date.today() + timedelta(days=settings.invoice_due_days)
        assert invoice.balance_due == Decimal("261.00")
        assert invoice.work_order.status == WorkOrderStatus.INVOICED.value

    async def test_explicit_due_date(self, db, make_order):
        work_order = await make_order()
        invoice = await invoice_service.create_from_work_order(
            db, InvoiceCreate(work_order_id=work_order.id, due_date=date(2026, 12, 31))
        )
        assert invoice.due_date == date(2026, 12, 31)

    async def test_only_completed_orders(self, db, make_order):
        work_order = await make_order(WorkOrderStatus.IN_PROGRESS)
        with pytest.raises(BusinessValidationError) as exc:
            await invoice_service.create_from_work_order(
                db, InvoiceCreate(work_order_id=work_order.id)
            )
        assert exc.value.detail == "Only completed work orders can be invoiced"

    async def test_one_invoice_per_work_order(self, db, invoice):
        with pytest.raises(BusinessValidationError) as exc:
            await invoice_service.create_from_work_order(
                db, InvoiceCreate(work_order_id=invoice.work_order_id)
            )
        assert exc.value.detail == "An invoice already exists for this work order"

    async def test_unknown_work_order(self, db):
        with pytest.raises(NotFoundError) as exc:
            await invoice_service.create_from_work_order(
                db, InvoiceCreate(work_order_id=uuid.uuid4())
            )
        assert exc.value.detail == "Work order not found"

    async def test_zero_total_is_settled_on_issue(self, db, customer, vehicle, make_work_order):
        work_order = await make_work_order(
            customer, vehicle, status=WorkOrderStatus.COMPLETED.value
        )

        invoice = await invoice_service.create_from_work_order(
            db, InvoiceCreate(work_order_id=work_order.id)
        )
        await db.commit()

        assert invoice.total == Decimal("0.00")
        assert invoice.status == InvoiceStatus.PAID.value
        assert invoice.work_order.status == WorkOrderStatus.PAID.value

        with pytest.raises(BusinessValidationError) as exc:
            await invoice_service.update(db, invoice.id, InvoiceUpdate(status=InvoiceStatus.PENDING))
        assert exc.value.detail == "Cannot change the status of a paid invoice"

    async def test_list_filters(self, db, invoice, customer):
        assert [i.id for i in await invoice_service.get_all(db)] == [invoice.id]
        assert await invoice_service.get_all(db, status_filter=InvoiceStatus.PAID) == []
        assert len(await invoice_service.get_all(db, customer_id=customer.id)) == 1
        assert len(await invoice_service.get_all(db, search=invoice.invoice_number.lower())) == 1
        assert len(await invoice_service.get_all(db, search="smith")) == 1


# ============================================================
# Update and delete
# ============================================================


class TestUpdateInvoice:
    """Manual status and due date."""

    async def test_update_due_date_and_status(self, db, invoice):
        updated = await invoice_service.update(
            db,
            invoice.id,
            InvoiceUpdate(due_date=date(2027, 1, 15), status=InvoiceStatus.SENT, notes="Emailed"),
        )
        assert updated.due_date == date(2027, 1, 15)
        assert updated.status == InvoiceStatus.SENT.value
        assert updated.notes == "Emailed"

    def test_paid_is_not_a_manual_status(self):
        with pytest.raises(ValueError):
            InvoiceUpdate(status=InvoiceStatus.PAID)

    async def test_void_invoice_is_frozen(self, db, invoice):
        await invoice_service.update(db, invoice.id, InvoiceUpdate(status=InvoiceStatus.VOID))
        await db.commit()

        with pytest.raises(BusinessValidationError) as exc:
            await invoice_service.update(db, invoice.id, InvoiceUpdate(status=InvoiceStatus.PENDING))
        assert exc.value.detail == "Cannot change the status of a void invoice"

        with pytest.raises(BusinessValidationError) as exc:
            await invoice_service.add_payment(db, invoice.id, payment("10.00"))
        assert exc.value.detail == "Cannot add a payment to a void invoice"

    async def test_cannot_void_with_payments(self, db, invoice):
        await invoice_service.add_payment(db, invoice.id, payment("50.00"))
        await db.commit()

        with pytest.raises(BusinessValidationError) as exc:
            await invoice_service.update(db, invoice.id, InvoiceUpdate(status=InvoiceStatus.VOID))
        assert exc.value.detail == "Cannot void an invoice with payments"

        with pytest.raises(BusinessValidationError) as exc:
            await invoice_service.update(db, invoice.id, InvoiceUpdate(status=InvoiceStatus.SENT))
        assert exc.value.detail == "Cannot change the status of an invoice with payments"


class TestDeleteInvoice:
    """Delete returns the work order to COMPLETED."""

    async def test_delete_and_reinvoice(self, db, invoice):
        work_order_id = invoice.work_order_id

        await invoice_service.delete(db, invoice.id)
        await db.commit()

        with pytest.raises(NotFoundError):
            await invoice_service.get_by_id(db, invoice.id)

        work_order = await work_order_service.get_by_id(db, work_order_id, refresh=True)
        assert work_order.status == WorkOrderStatus.COMPLETED.value
        assert work_order.invoice is None

        again = await invoice_service.create_from_work_order(
            db, InvoiceCreate(work_order_id=work_order_id)
        )
        assert again.total == Decimal("261.00")

    async def test_delete_with_payments(self, db, invoice):
        await invoice_service.add_payment(db, invoice.id, payment("1.00"))
        await db.commit()

        with pytest.raises(BusinessValidationError) as exc:
            await invoice_service.delete(db, invoice.id)
        assert exc.value.detail == "Cannot delete an invoice with payments"


# ============================================================
# Payments
# ============================================================


class TestPayments:
    """add_payment / delete_payment."""

    async def test_partial_then_full(self, db, invoice):
        partial = await invoice_service.add_payment(db, invoice.id, payment("100.00"))
        await db.commit()
        assert partial.status == InvoiceStatus.PARTIALLY_PAID.value
        assert partial.amount_paid == Decimal("100.00")
        assert partial.balance_due == Decimal("161.00")
        assert partial.work_order.status == WorkOrderStatus.INVOICED.value

        paid = await invoice_service.add_payment(
            db, invoice.id, payment("161.00", PaymentMethod.CREDIT_CARD)
        )
        await db.commit()
        assert paid.status == InvoiceStatus.PAID.value
        assert paid.balance_due == Decimal("0.00")
        assert paid.work_order.status == WorkOrderStatus.PAID.value
        assert {p.method for p in paid.payments} == {"CASH", "CREDIT_CARD"}

    async def test_payment_defaults_to_today(self, db, invoice):
        updated = await invoice_service.add_payment(db, invoice.id, payment("10.00"))
        assert updated.payments[0].date == date.today()

    async def test_overpayment_rejected(self, db, invoice):
        with pytest.raises(BusinessValidationError) as exc:
            await invoice_service.add_payment(db, invoice.id, payment("261.01"))
        assert exc.value.detail == "Payment amount exceeds the balance due"

    async def test_paid_invoice_rejects_payments(self, db, invoice):
        await invoice_service.add_payment(db, invoice.id, payment("261.00"))
        await db.commit()

        with pytest.raises(BusinessValidationError) as exc:
            await invoice_service.add_payment(db, invoice.id, payment("1.00"))
        assert exc.value.detail == "Invoice is already paid"

    async def test_delete_payment_reverts_status(self, db, invoice):
        await invoice_service.add_payment(db, invoice.id, payment("61.00"))
        paid = await invoice_service.add_payment(db, invoice.id, payment("200.00"))
        await db.commit()
        assert paid.work_order.status == WorkOrderStatus.PAID.value

        last = next(p for p in paid.payments if p.amount == Decimal("200.00"))
        reverted = await invoice_service.delete_payment(db, invoice.id, last.id)
        await db.commit()

        assert reverted.status == InvoiceStatus.PARTIALLY_PAID.value
        assert reverted.balance_due == Decimal("200.00")
        assert reverted.work_order.status == WorkOrderStatus.INVOICED.value

        first = reverted.payments[0]
        pending = await invoice_service.delete_payment(db, invoice.id, first.id)
        assert pending.status == InvoiceStatus.PENDING.value
        assert pending.payments == []

    async def test_delete_unknown_payment(self, db, invoice):
        with pytest.raises(NotFoundError) as exc:
            await invoice_service.delete_payment(db, invoice.id, uuid.uuid4())
        assert exc.value.detail == "Payment not found"
