"""
Service layer for the Customer entity
Project: Auto Shop Manager

Business logic for customers:
- unique email, checked before writing and backed by the unique index
- delete guard on active work orders and unpaid invoices
- list with vehicle and work order counts
"""

import logging
import uuid
from typing import List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from autoshop.core.exceptions import ConflictError, DuplicateError, NotFoundError
from autoshop.models import Customer, Vehicle, WorkOrder
from autoshop.schemas.customer import CustomerCreate, CustomerUpdate
from autoshop.services.guards import ensure_customer_deletable

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL = "A customer with this email already exists"


class CustomerService:
    """
    CRUD operations on customers.

    Methods are async, take the session as first argument and only flush;
    the route handler commits.

    Usage with Dependency Injection:
        @router.get("/customers")
        async def list_customers(service: CustomerService = Depends(get_customer_service)):
            ...
    """

    async def get_all(
        self,
        db: AsyncSession,
        search: Optional[str] = None,
    ) -> List[Tuple[Customer, int, int]]:
        """
        Lists customers ordered by last name.

        Args:
            db: database session
            search: case-insensitive match on first/last/full name, email, phone

        Returns:
            List of (customer, vehicle_count, work_order_count)
        """
        vehicle_count = (
            select(func.count(Vehicle.id))
            .where(Vehicle.customer_id == Customer.id)
            .correlate(Customer)
            .scalar_subquery()
        )
        work_order_count = (
            select(func.count(WorkOrder.id))
            .where(WorkOrder.customer_id == Customer.id)
            .correlate(Customer)
            .scalar_subquery()
        )

        query = select(
            Customer,
            vehicle_count.label("vehicle_count"),
            work_order_count.label("work_order_count"),
        )

        if search:
            term = f"%{search.strip()}%"
            query = query.where(
                or_(
                    Customer.first_name.ilike(term),
                    Customer.last_name.ilike(term),
                    (Customer.first_name + " " + Customer.last_name).ilike(term),
                    Customer.email.ilike(term),
                    Customer.phone.ilike(term),
                )
            )

        query = query.order_by(Customer.last_name.asc(), Customer.first_name.asc())
        result = await db.execute(query)
        return [(row[0], row[1] or 0, row[2] or 0) for row in result.all()]

    async def get_by_id(
        self,
        db: AsyncSession,
        customer_id: uuid.UUID,
        with_relations: bool = False,
    ) -> Customer:
        """
        Fetches a customer.

        Args:
            db: database session
            customer_id: customer UUID
            with_relations: also load vehicles, work orders (with line items),
                appointments and invoices (with payments)

        Raises:
            NotFoundError: if the customer does not exist
        """
        query = select(Customer).where(Customer.id == customer_id)
        if with_relations:
            query = query.options(
                selectinload(Customer.vehicles),
                selectinload(Customer.work_orders),
                selectinload(Customer.appointments),
                selectinload(Customer.invoices),
            )

        result = await db.execute(query)
        customer = result.scalar_one_or_none()

        if not customer:
            logger.warning("Customer not found: %s", customer_id)
            raise NotFoundError("Customer not found")

        return customer

    async def _check_email_exists(
        self,
        db: AsyncSession,
        email: str,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> None:
        """Raises DuplicateError if another customer uses the email."""
        query = select(Customer.id).where(func.lower(Customer.email) == email.lower())
        if exclude_id is not None:
            query = query.where(Customer.id != exclude_id)

        result = await db.execute(query)
        if result.first() is not None:
            logger.warning("Duplicate customer email: %s", email)
            raise DuplicateError(DUPLICATE_EMAIL)

    async def create(self, db: AsyncSession, data: CustomerCreate) -> Customer:
        """
        Creates a customer.

        Raises:
            DuplicateError: if the email is already used
        """
        await self._check_email_exists(db, data.email)

        customer = Customer(**data.model_dump())
        db.add(customer)

        try:
            await db.flush()
        except IntegrityError as e:
            await db.rollback()
            if "email" in str(e.orig).lower():
                logger.warning("Duplicate customer email on insert: %s", data.email)
                raise DuplicateError(DUPLICATE_EMAIL)
            logger.error("Error creating customer: %s", e.orig)
            raise ConflictError("Could not create the customer")

        logger.info("Created customer %s (%s)", customer.id, customer.email)
        return customer

    async def update(
        self,
        db: AsyncSession,
        customer_id: uuid.UUID,
        data: CustomerUpdate,
    ) -> Customer:
        """
        Partial update of a customer.

        Raises:
            NotFoundError: if the customer does not exist
            DuplicateError: if the new email is already used
        """
        customer = await self.get_by_id(db, customer_id)
        update_data = data.model_dump(exclude_unset=True)

        new_email = update_data.get("email")
        if new_email and new_email.lower() != customer.email.lower():
            await self._check_email_exists(db, new_email, exclude_id=customer_id)

        for field, value in update_data.items():
            setattr(customer, field, value)

        try:
            await db.flush()
        except IntegrityError as e:
            await db.rollback()
            if "email" in str(e.orig).lower():
                raise DuplicateError(DUPLICATE_EMAIL)
            logger.error("Error updating customer: %s", e.orig)
            raise ConflictError("Could not update the customer")

        logger.info("Updated customer %s", customer.id)
        return customer

    async def delete(self, db: AsyncSession, customer_id: uuid.UUID) -> None:
        """
        Deletes a customer and everything they own.

        Raises:
            NotFoundError: if the customer does not exist
            BusinessValidationError: with hasActiveWorkOrders / hasUnpaidInvoices
                flags if a work order is active or an invoice is unpaid
        """
        query = (
            select(Customer)
            .where(Customer.id == customer_id)
            .options(
                selectinload(Customer.work_orders),
                selectinload(Customer.invoices),
            )
        )
        result = await db.execute(query)
        customer = result.scalar_one_or_none()

        if not customer:
            logger.warning("Customer not found: %s", customer_id)
            raise NotFoundError("Customer not found")

        ensure_customer_deletable(customer)

        await db.delete(customer)
        await db.flush()
        logger.info("Deleted customer %s", customer_id)
