"""
db/models/incident_category.py

Incident category model: the (name, group) pair describing an incident kind.
"""

from __future__ import annotations

from sqlalchemy import Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin, UuidPrimaryKeyMixin


class IncidentCategory(UuidPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "incident_categories"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Incident type name, unique case-insensitively",
    )
    category_group: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Broader grouping the incident type belongs to",
    )

    def __repr__(self) -> str:
        return f"<IncidentCategory id={self.id} name={self.name!r} group={self.category_group!r}>"


# Category identity is the name compared case-insensitively.
Index(
    "uq_incident_categories_name_lower",
    func.lower(IncidentCategory.name),
    unique=True,
)
