"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.incident_category import IncidentCategory
from db.models.incident_report import CaseStatus, IncidentReport, IndoorsOrOutdoors
from db.models.place import PLACE_MATCH_FIELDS, Place

__all__ = [
    "CaseStatus",
    "IncidentCategory",
    "IncidentReport",
    "IndoorsOrOutdoors",
    "PLACE_MATCH_FIELDS",
    "Place",
]
