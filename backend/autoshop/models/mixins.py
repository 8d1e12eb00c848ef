"""
SQLAlchemy model mixins
Project: Auto Shop Manager

Reusable columns shared by the models.
"""

import datetime
import uuid

from sqlalchemy import Boolean, DateTime, Uuid
from sqlalchemy import event
from sqlalchemy.orm import Mapped, mapped_column, Session
from sqlalchemy.sql import func


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class SoftDeleteMixin:
    """
    Logical deletion.

    Adds is_active; a False value means the record was "deleted" but is kept
    for history (e.g. technicians referenced by old work orders).
    """

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        doc="Soft delete flag: False = deleted",
    )


class TimestampMixin:
    """
    Creation and last update timestamps.

    Both columns get a Python-side default as well as a server default, so
    a freshly flushed object never has expired timestamp attributes (which
    would need a lazy refresh under an AsyncSession).
    """

    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
        doc="Creation timestamp",
    )

    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
        doc="Last update timestamp",
    )


class UUIDMixin:
    """UUID primary key generated client-side."""

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        doc="UUID primary key",
    )


# ------------------------------------------------------------
# Event listeners
# ------------------------------------------------------------
@event.listens_for(Session, "before_flush")
def update_timestamp(session: Session, flush_context, instances) -> None:
    """Refreshes updated_at on every modified object before a flush."""
    now = utcnow()

    for obj in session.dirty:
        if hasattr(obj, "updated_at"):
            if session.is_modified(obj, include_collections=False):
                obj.updated_at = now
