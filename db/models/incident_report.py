"""
db/models/incident_report.py

Incident report model: the unit created by the bulk import pipeline.
"""

from __future__ import annotations

import uuid
import datetime as dt
from typing import TYPE_CHECKING

from sqlalchemy import Date, ForeignKey, Index, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin, UuidPrimaryKeyMixin

if TYPE_CHECKING:
    from db.models.incident_category import IncidentCategory
    from db.models.place import Place


class CaseStatus:
    ONGOING = "Ongoing"
    RESOLVED = "Resolved"
    PENDING = "Pending"


class IndoorsOrOutdoors:
    INDOORS = "Indoors"
    OUTDOORS = "Outdoors"


class IncidentReport(UuidPrimaryKeyMixin, TimestampMixin, Base):
    """
    One recorded incident.

    ``incident_id`` is the caller-supplied natural key: unique across the
    table and never rewritten after creation. Every other column may be
    replaced by an "import and update" confirmation.
    """

    __tablename__ = "incident_reports"

    incident_id: Mapped[str] = mapped_column(
        String(120),
        nullable=False,
        comment="Caller-supplied natural key",
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    time: Mapped[str] = mapped_column(String(32), nullable=False)
    day_of_week: Mapped[str] = mapped_column(String(16), nullable=False)
    case_status: Mapped[str | None] = mapped_column(
        String(16),
        nullable=True,
        comment="Ongoing, Resolved, Pending",
    )
    event_proximity: Mapped[str | None] = mapped_column(String(255), nullable=True)
    indoors_or_outdoors: Mapped[str | None] = mapped_column(
        String(16),
        nullable=True,
        comment="Indoors, Outdoors",
    )
    place_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("places.id", ondelete="RESTRICT"),
        nullable=False,
    )
    category_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("incident_categories.id", ondelete="RESTRICT"),
        nullable=False,
    )

    # ── Relationships ──────────────────────────────────────────────────────────

    place: Mapped["Place"] = relationship("Place", lazy="joined")
    category: Mapped["IncidentCategory"] = relationship("IncidentCategory", lazy="joined")

    # ── Indexes ────────────────────────────────────────────────────────────────

    __table_args__ = (
        UniqueConstraint("incident_id", name="uq_incident_reports_incident_id"),
        Index("ix_incident_reports_date", "date"),
        Index("ix_incident_reports_case_status", "case_status"),
        Index("ix_incident_reports_place_id", "place_id"),
        Index("ix_incident_reports_category_id", "category_id"),
    )

    def __repr__(self) -> str:
        return f"<IncidentReport id={self.id} incident_id={self.incident_id!r} date={self.date}>"
