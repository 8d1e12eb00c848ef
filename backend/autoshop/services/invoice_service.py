"""
Service Layer for invoicing
Project: Auto Shop Manager

Business logic for invoices and payments:
- invoice generation from a COMPLETED work order (amount snapshot)
- invoice numbering with retry on collision
- payments and the derived invoice/work order status
"""

import datetime
import logging
import uuid
from typing import List, Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from autoshop.core.calculations import (
    calculate_subtotal,
    calculate_tax,
    calculate_total,
    format_currency,
    generate_invoice_number,
    round_money,
)
from autoshop.core.config import settings
from autoshop.core.exceptions import BusinessValidationError, ConflictError, NotFoundError
from autoshop.models import Customer, Invoice, Payment, WorkOrder
from autoshop.schemas.enums import InvoiceStatus, WorkOrderStatus
from autoshop.schemas.invoice import InvoiceCreate, InvoiceUpdate, PaymentCreate

logger = logging.getLogger(__name__)


def settled_status(invoice: Invoice) -> str:
    """
    Status implied by the payments recorded on an invoice.

    Fully paid -> PAID, partly paid -> PARTIALLY_PAID. Without payments an
    invoice that was PAID/PARTIALLY_PAID goes back to PENDING; any other
    status is kept.
    """
    paid = invoice.amount_paid
    if paid > 0 and paid >= invoice.total:
        return InvoiceStatus.PAID.value
    if paid > 0:
        return InvoiceStatus.PARTIALLY_PAID.value
    if invoice.status in (InvoiceStatus.PAID.value, InvoiceStatus.PARTIALLY_PAID.value):
        return InvoiceStatus.PENDING.value
    return invoice.status


class InvoiceService:
    """
    Service for invoice and payment operations.

    Async methods without FastAPI dependencies; they flush and leave the
    commit to the route handler.
    """

    # ------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------

    async def get_all(
        self,
        db: AsyncSession,
        search: Optional[str] = None,
        status_filter: Optional[InvoiceStatus] = None,
        customer_id: Optional[uuid.UUID] = None,
    ) -> List[Invoice]:
        """
        Lists invoices, most recent first.

        Args:
            db: database session
            search: case-insensitive match on invoice number and customer name
            status_filter: only invoices in this status
            customer_id: only invoices of this customer
        """
        query = select(Invoice).options(selectinload(Invoice.work_order))

        if status_filter:
            query = query.where(Invoice.status == status_filter.value)
        if customer_id:
            query = query.where(Invoice.customer_id == customer_id)
        if search:
            term = f"%{search.strip()}%"
            matching_customers = select(Customer.id).where(
                or_(Customer.first_name.ilike(term), Customer.last_name.ilike(term))
            )
            query = query.where(
                or_(
                    Invoice.invoice_number.ilike(term),
                    Invoice.customer_id.in_(matching_customers),
                )
            )

        query = query.order_by(Invoice.date.desc(), Invoice.created_at.desc())
        result = await db.execute(query)
        invoices = list(result.unique().scalars().all())

        logger.debug("Fetched %d invoices", len(invoices))
        return invoices

    async def get_by_id(
        self,
        db: AsyncSession,
        invoice_id: uuid.UUID,
        refresh: bool = False,
    ) -> Invoice:
        """
        Fetches an invoice with customer, work order and payments.

        Raises:
            NotFoundError: if the invoice does not exist
        """
        query = (
            select(Invoice)
            .where(Invoice.id == invoice_id)
            .options(selectinload(Invoice.work_order))
        )
        if refresh:
            query = query.execution_options(populate_existing=True)

        result = await db.execute(query)
        invoice = result.unique().scalar_one_or_none()

        if not invoice:
            logger.warning("Invoice not found: %s", invoice_id)
            raise NotFoundError("Invoice not found")

        return invoice

    # ------------------------------------------------------------
    # Invoices
    # ------------------------------------------------------------

    async def _generate_unique_invoice_number(
        self,
        db: AsyncSession,
        issue_date: datetime.date,
    ) -> str:
        for _ in range(settings.number_generation_attempts):
            candidate = generate_invoice_number(today=issue_date)
            result = await db.execute(
                select(Invoice.id).where(Invoice.invoice_number == candidate)
            )
            if result.first() is None:
                return candidate
            logger.info("Invoice number collision on %s, regenerating", candidate)

        logger.error(
            "No unique invoice number after %d attempts", settings.number_generation_attempts
        )
        raise ConflictError("Could not generate a unique invoice number")

    async def create_from_work_order(self, db: AsyncSession, data: InvoiceCreate) -> Invoice:
        """
        Generates the invoice of a COMPLETED work order.

        Steps:
        1. Lock and load the work order with its line items
        2. Reject if it already has an invoice or is not COMPLETED
        3. Snapshot subtotal, tax and total rounded to cents
        4. Generate the invoice number and default the due date
        5. Move the work order to INVOICED (PAID straight away for a zero total)

        Raises:
            NotFoundError: if the work order does not exist
            BusinessValidationError: not completed, or already invoiced
            ConflictError: if no unique invoice number could be generated
        """
        result = await db.execute(
            select(WorkOrder)
            .where(WorkOrder.id == data.work_order_id)
            .with_for_update(of=WorkOrder)
            .execution_options(populate_existing=True)
        )
        work_order = result.unique().scalar_one_or_none()

        if not work_order:
            logger.warning("Work order not found: %s", data.work_order_id)
            raise NotFoundError("Work order not found")

        if work_order.invoice is not None:
            logger.warning(
                "Work order %s already invoiced as %s",
                work_order.order_number, work_order.invoice.invoice_number,
            )
            raise BusinessValidationError("An invoice already exists for this work order")

        if work_order.status != WorkOrderStatus.COMPLETED.value:
            logger.warning(
                "Invoice rejected for %s work order %s", work_order.status, work_order.order_number
            )
            raise BusinessValidationError("Only completed work orders can be invoiced")

        subtotal = round_money(calculate_subtotal(work_order.line_items))
        tax = round_money(calculate_tax(subtotal))
        total = calculate_total(subtotal, tax)

        # Nothing to collect: settled on issue
        settled = total <= 0

        issue_date = datetime.date.today()
        invoice_number = await self._generate_unique_invoice_number(db, issue_date)

        invoice = Invoice(
            invoice_number=invoice_number,
            customer_id=work_order.customer_id,
            work_order_id=work_order.id,
            date=issue_date,
            due_date=data.due_date or issue_date + datetime.timedelta(days=settings.invoice_due_days),
            status=InvoiceStatus.PAID.value if settled else InvoiceStatus.PENDING.value,
            subtotal=subtotal,
            tax=tax,
            total=total,
            notes=data.notes,
        )
        db.add(invoice)
        work_order.status = (
            WorkOrderStatus.PAID.value if settled else WorkOrderStatus.INVOICED.value
        )

        try:
            await db.flush()
        except IntegrityError as e:
            await db.rollback()
            logger.error("Error creating invoice for %s: %s", work_order.order_number, e.orig)
            raise ConflictError("Could not create the invoice")

        logger.info(
            "Created invoice %s for work order %s: total=%s",
            invoice_number, work_order.order_number, format_currency(total),
        )
        return await self.get_by_id(db, invoice.id, refresh=True)

    async def update(
        self,
        db: AsyncSession,
        invoice_id: uuid.UUID,
        data: InvoiceUpdate,
    ) -> Invoice:
        """
        Updates due date, notes and manual status. Amounts are not editable.

        Raises:
            NotFoundError: if the invoice does not exist
            BusinessValidationError: on a status change not allowed by the
                payments already recorded
        """
        invoice = await self.get_by_id(db, invoice_id)
        update_data = data.model_dump(exclude_unset=True)

        new_status = update_data.pop("status", None)
        if new_status is not None and new_status.value != invoice.status:
            if invoice.status == InvoiceStatus.VOID.value:
                raise BusinessValidationError("Cannot change the status of a void invoice")
            if invoice.status == InvoiceStatus.PAID.value:
                raise BusinessValidationError("Cannot change the status of a paid invoice")
            if invoice.payments:
                logger.warning(
                    "Status change to %s rejected on invoice %s with payments",
                    new_status.value, invoice.invoice_number,
                )
                if new_status == InvoiceStatus.VOID:
                    raise BusinessValidationError("Cannot void an invoice with payments")
                raise BusinessValidationError(
                    "Cannot change the status of an invoice with payments"
                )
            invoice.status = new_status.value

        for field, value in update_data.items():
            setattr(invoice, field, value)

        await db.flush()

        logger.info("Updated invoice %s", invoice.invoice_number)
        return await self.get_by_id(db, invoice_id, refresh=True)

    async def delete(self, db: AsyncSession, invoice_id: uuid.UUID) -> None:
        """
        Deletes an invoice without payments; the work order goes back to
        COMPLETED.

        Raises:
            NotFoundError: if the invoice does not exist
            BusinessValidationError: if payments are recorded
        """
        invoice = await self.get_by_id(db, invoice_id)

        if invoice.payments:
            logger.warning("Delete rejected on invoice %s with payments", invoice.invoice_number)
            raise BusinessValidationError("Cannot delete an invoice with payments")

        work_order = invoice.work_order
        if work_order is not None and work_order.status == WorkOrderStatus.INVOICED.value:
            work_order.status = WorkOrderStatus.COMPLETED.value
        elif work_order is not None:
            logger.warning(
                "Work order %s left in status %s", work_order.order_number, work_order.status
            )

        invoice_number = invoice.invoice_number
        await db.delete(invoice)
        await db.flush()

        logger.info("Deleted invoice %s", invoice_number)

    # ------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------

    def _sync_status(self, invoice: Invoice) -> None:
        """Derives the invoice status from its payments and propagates PAID."""
        previous = invoice.status
        invoice.status = settled_status(invoice)

        work_order = invoice.work_order
        if work_order is None:
            return
        if invoice.status == InvoiceStatus.PAID.value:
            work_order.status = WorkOrderStatus.PAID.value
        elif previous == InvoiceStatus.PAID.value and work_order.status == WorkOrderStatus.PAID.value:
            work_order.status = WorkOrderStatus.INVOICED.value

        if previous != invoice.status:
            logger.info(
                "Invoice %s status %s -> %s", invoice.invoice_number, previous, invoice.status
            )

    async def add_payment(
        self,
        db: AsyncSession,
        invoice_id: uuid.UUID,
        data: PaymentCreate,
    ) -> Invoice:
        """
        Records a payment.

        Raises:
            NotFoundError: if the invoice does not exist
            BusinessValidationError: invoice void or already paid, or amount
                above the balance due
        """
        invoice = await self.get_by_id(db, invoice_id)

        if invoice.status == InvoiceStatus.VOID.value:
            raise BusinessValidationError("Cannot add a payment to a void invoice")
        if invoice.status == InvoiceStatus.PAID.value:
            raise BusinessValidationError("Invoice is already paid")

        amount = round_money(data.amount)
        balance = invoice.balance_due
        if amount > balance:
            logger.warning(
                "Payment of %s above balance %s on invoice %s",
                amount, balance, invoice.invoice_number,
            )
            raise BusinessValidationError("Payment amount exceeds the balance due")

        invoice.payments.append(
            Payment(
                amount=amount,
                method=data.method.value,
                reference=data.reference,
                date=data.date or datetime.date.today(),
                notes=data.notes,
            )
        )
        self._sync_status(invoice)
        await db.flush()

        logger.info(
            "Payment of %s recorded on invoice %s", format_currency(amount), invoice.invoice_number
        )
        return await self.get_by_id(db, invoice_id, refresh=True)

    async def delete_payment(
        self,
        db: AsyncSession,
        invoice_id: uuid.UUID,
        payment_id: uuid.UUID,
    ) -> Invoice:
        """
        Removes a payment and recomputes the invoice status.

        Raises:
            NotFoundError: invoice or payment not found
        """
        invoice = await self.get_by_id(db, invoice_id)

        payment = next((p for p in invoice.payments if p.id == payment_id), None)
        if payment is None:
            logger.warning("Payment %s not on invoice %s", payment_id, invoice.invoice_number)
            raise NotFoundError("Payment not found")

        invoice.payments.remove(payment)
        self._sync_status(invoice)
        await db.flush()

        logger.info(
            "Removed payment of %s from invoice %s", payment.amount, invoice.invoice_number
        )
        return await self.get_by_id(db, invoice_id, refresh=True)


invoice_service = InvoiceService()
