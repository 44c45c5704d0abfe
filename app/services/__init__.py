"""
app/services package marker.
"""

from app.services.import_analysis_service import (
    ImportAnalysisError,
    ImportAnalysisService,
    get_import_analysis_service,
)
from app.services.import_confirmation_service import (
    ImportCommitError,
    ImportConfirmationService,
    get_import_confirmation_service,
)

__all__ = [
    "ImportAnalysisError",
    "ImportAnalysisService",
    "get_import_analysis_service",
    "ImportCommitError",
    "ImportConfirmationService",
    "get_import_confirmation_service",
]
