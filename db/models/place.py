"""
db/models/place.py

Place model: a normalized location description shared by many incidents.
"""

from __future__ import annotations

from sqlalchemy import Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin, UuidPrimaryKeyMixin

# Administrative levels that identify a place. Building, street and
# block/lot are descriptive only and never take part in matching.
PLACE_MATCH_FIELDS: tuple[str, ...] = (
    "barangay",
    "municipality_city",
    "province",
    "region",
)


class Place(UuidPrimaryKeyMixin, TimestampMixin, Base):
    """
    Location referenced by incident reports.

    Identity is structural: two submissions with the same administrative
    levels are the same place, enforced by ``uq_places_locality``.
    """

    __tablename__ = "places"

    house_building_number: Mapped[str | None] = mapped_column(String(120), nullable=True)
    street_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    purok_block_lot: Mapped[str | None] = mapped_column(String(120), nullable=True)
    barangay: Mapped[str] = mapped_column(String(255), nullable=False)
    municipality_city: Mapped[str] = mapped_column(String(255), nullable=False)
    province: Mapped[str] = mapped_column(String(255), nullable=False)
    zip_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    region: Mapped[str] = mapped_column(String(255), nullable=False)

    __table_args__ = (
        UniqueConstraint(*PLACE_MATCH_FIELDS, name="uq_places_locality"),
        Index("ix_places_municipality_city", "municipality_city"),
        Index("ix_places_province", "province"),
    )

    def full_address(self) -> str:
        parts = (
            self.house_building_number,
            self.street_name,
            self.purok_block_lot,
            self.barangay,
            self.municipality_city,
            self.province,
            self.region,
            self.zip_code,
        )
        return ", ".join(part for part in parts if part)

    def __repr__(self) -> str:
        return (
            f"<Place id={self.id} barangay={self.barangay!r} "
            f"municipality_city={self.municipality_city!r}>"
        )
