"""
db/base.py

Declarative base and column mixins shared by the incident store models.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """
    Declarative base for places, incident categories and incident reports.
    """


class UuidPrimaryKeyMixin:
    """
    Surrogate UUID key generated client-side, so ids are known before flush.
    """

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )


class TimestampMixin:
    """
    created_at / updated_at columns.

    updated_at moves on every ORM UPDATE, which is how rows rewritten by an
    "import and update" confirmation can be told apart.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=lambda: datetime.now(timezone.utc),
    )
