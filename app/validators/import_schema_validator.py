"""
app/validators/import_schema_validator.py

Header validation for incident report uploads.
"""

from __future__ import annotations

from typing import Any, Sequence

TEMPLATE_VERSION = "2024.1"

REQUIRED_COLUMNS: tuple[str, ...] = (
    "IncidentID",
    "Date",
    "Time",
    "DayOfWeek",
    "Barangay",
    "MunicipalityCity",
    "Province",
    "Region",
    "IncidentType",
    "IncidentCategory",
)

OPTIONAL_COLUMNS: tuple[str, ...] = (
    "CaseStatus",
    "EventProximity",
    "IndoorsOrOutdoors",
    "HouseBuildingNumber",
    "StreetName",
    "PurokBlockLot",
    "ZipCode",
)

# Column order of the downloadable template.
TEMPLATE_COLUMNS: tuple[str, ...] = (
    "IncidentID",
    "Date",
    "Time",
    "DayOfWeek",
    "CaseStatus",
    "EventProximity",
    "IndoorsOrOutdoors",
    "HouseBuildingNumber",
    "StreetName",
    "PurokBlockLot",
    "Barangay",
    "MunicipalityCity",
    "Province",
    "ZipCode",
    "Region",
    "IncidentType",
    "IncidentCategory",
)


class ImportStructureError(ValueError):
    """
    Raised when an upload cannot be analysed at all.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message}


class MissingColumnsError(ImportStructureError):
    """
    Raised when the header row lacks one or more required columns.
    """

    def __init__(self, missing: Sequence[str]) -> None:
        self.missing = tuple(missing)
        super().__init__(
            f"Missing required columns: {', '.join(self.missing)}. "
            f"Expected includes: {', '.join(REQUIRED_COLUMNS)}."
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "missing_columns": list(self.missing),
            "template_version": TEMPLATE_VERSION,
        }


class ImportSchemaValidator:
    """
    Checks that an upload header declares every required column.
    """

    def __init__(self, *, required_columns: Sequence[str] = REQUIRED_COLUMNS) -> None:
        self._required_columns = tuple(required_columns)

    @property
    def required_columns(self) -> tuple[str, ...]:
        return self._required_columns

    def validate(self, headers: Sequence[Any]) -> list[str]:
        """
        Return the cleaned header labels or raise MissingColumnsError.
        """

        cleaned = [str(header).strip() for header in headers if header is not None and str(header).strip()]
        present = set(cleaned)
        missing = [column for column in self._required_columns if column not in present]
        if missing:
            raise MissingColumnsError(missing)
        return cleaned
