"""
app/repositories/incident_report_repository.py

Persistence layer for incident reports.
"""

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.domain.incident_import import NormalizedIncident
from db.models.incident_report import IncidentReport


class IncidentReportRepository:
    """
    Repository for natural-key lookups, inserts and in-place updates.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def fetch_natural_keys(self) -> frozenset[str]:
        """
        Return every committed natural key, read once per analysis run.
        """

        stmt = select(IncidentReport.incident_id)
        return frozenset(self._session.execute(stmt).scalars().all())

    def get_by_incident_id(self, incident_id: str) -> IncidentReport | None:
        stmt = select(IncidentReport).where(IncidentReport.incident_id == incident_id)
        return self._session.execute(stmt).scalars().first()

    def exists(self, incident_id: str) -> bool:
        stmt = select(IncidentReport.id).where(IncidentReport.incident_id == incident_id)
        return self._session.execute(stmt).first() is not None

    def add(
        self,
        incident: NormalizedIncident,
        *,
        place_id: uuid.UUID,
        category_id: uuid.UUID,
    ) -> IncidentReport:
        record = IncidentReport(
            incident_id=incident.incident_id,
            date=incident.date,
            time=incident.time,
            day_of_week=incident.day_of_week,
            case_status=incident.case_status,
            event_proximity=incident.event_proximity,
            indoors_or_outdoors=incident.indoors_or_outdoors,
            place_id=place_id,
            category_id=category_id,
        )
        self._session.add(record)
        return record

    def apply_update(
        self,
        record: IncidentReport,
        incident: NormalizedIncident,
        *,
        place_id: uuid.UUID,
        category_id: uuid.UUID,
    ) -> IncidentReport:
        """
        Overwrite the mutable fields; the natural key is left untouched.
        """

        record.date = incident.date
        record.time = incident.time
        record.day_of_week = incident.day_of_week
        record.case_status = incident.case_status
        record.event_proximity = incident.event_proximity
        record.indoors_or_outdoors = incident.indoors_or_outdoors
        record.place_id = place_id
        record.category_id = category_id
        return record
