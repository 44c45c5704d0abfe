"""
app/repositories/reference_repository.py

Persistence helpers for the shared reference entities: places and
incident categories.
"""

from __future__ import annotations

import uuid

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.domain.incident_import import CategoryInput, PlaceInput
from db.models.incident_category import IncidentCategory
from db.models.place import Place


class PlaceRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def find_id_by_locality(self, place: PlaceInput) -> uuid.UUID | None:
        """
        Look up a place by its administrative levels only.
        """

        stmt = select(Place.id).where(
            Place.barangay == place.barangay,
            Place.municipality_city == place.municipality_city,
            Place.province == place.province,
            Place.region == place.region,
        )
        return self._session.execute(stmt).scalars().first()

    def add(self, place: PlaceInput) -> Place:
        """
        Stage a new place with every supplied field. Caller flushes.
        """

        record = Place(
            house_building_number=place.house_building_number,
            street_name=place.street_name,
            purok_block_lot=place.purok_block_lot,
            barangay=place.barangay,
            municipality_city=place.municipality_city,
            province=place.province,
            zip_code=place.zip_code,
            region=place.region,
        )
        self._session.add(record)
        return record

    def exists(self, place_id: uuid.UUID) -> bool:
        stmt = select(Place.id).where(Place.id == place_id)
        return self._session.execute(stmt).first() is not None


class CategoryRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def find_id_by_name(self, category: CategoryInput) -> uuid.UUID | None:
        """
        Case-insensitive exact match on the category name.
        """

        stmt = select(IncidentCategory.id).where(
            func.lower(IncidentCategory.name) == category.name.lower()
        )
        return self._session.execute(stmt).scalars().first()

    def add(self, category: CategoryInput) -> IncidentCategory:
        record = IncidentCategory(name=category.name, category_group=category.group)
        self._session.add(record)
        return record

    def exists(self, category_id: uuid.UUID) -> bool:
        stmt = select(IncidentCategory.id).where(IncidentCategory.id == category_id)
        return self._session.execute(stmt).first() is not None
