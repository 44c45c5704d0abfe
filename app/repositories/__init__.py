"""
app/repositories package marker.
"""

from app.repositories.incident_report_repository import IncidentReportRepository
from app.repositories.reference_repository import CategoryRepository, PlaceRepository

__all__ = [
    "CategoryRepository",
    "IncidentReportRepository",
    "PlaceRepository",
]
