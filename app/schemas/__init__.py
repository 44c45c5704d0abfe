"""
app/schemas package marker.
"""

from app.schemas.incident_import import (
    ImportAnalysisResponse,
    ImportConfirmationErrorResponse,
    ImportConfirmationRequest,
    ImportConfirmationResponse,
    IncidentReportResponse,
)

__all__ = [
    "ImportAnalysisResponse",
    "ImportConfirmationErrorResponse",
    "ImportConfirmationRequest",
    "ImportConfirmationResponse",
    "IncidentReportResponse",
]
