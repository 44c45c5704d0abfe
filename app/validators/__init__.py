"""
app/validators package marker.
"""

from app.validators.import_schema_validator import (
    ImportSchemaValidator,
    ImportStructureError,
    MissingColumnsError,
)
from app.validators.incident_row_validator import IncidentRowValidator

__all__ = [
    "ImportSchemaValidator",
    "ImportStructureError",
    "IncidentRowValidator",
    "MissingColumnsError",
]
