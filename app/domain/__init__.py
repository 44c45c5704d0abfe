"""
app/domain package marker.
"""

from app.domain.incident_import import (
    AnalysisReport,
    ConfirmationRequest,
    ConfirmationResult,
    ImportAction,
    NormalizedIncident,
    ResolvedIncidentRow,
    RowBucket,
    RowValidationError,
)

__all__ = [
    "AnalysisReport",
    "ConfirmationRequest",
    "ConfirmationResult",
    "ImportAction",
    "NormalizedIncident",
    "ResolvedIncidentRow",
    "RowBucket",
    "RowValidationError",
]
