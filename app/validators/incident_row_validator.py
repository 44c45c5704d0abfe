"""
app/validators/incident_row_validator.py

Row-level validation and type parsing for incident report uploads.
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Any, Mapping

from app.domain.incident_import import (
    CategoryInput,
    NormalizedIncident,
    PlaceInput,
    RowValidationError,
)
from app.validators.import_schema_validator import REQUIRED_COLUMNS
from db.models.incident_category import IncidentCategory
from db.models.incident_report import CaseStatus, IncidentReport, IndoorsOrOutdoors
from db.models.place import Place

DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%m/%d/%y",
    "%d-%b-%Y",
    "%B %d, %Y",
    "%b %d, %Y",
)

ALLOWED_CASE_STATUSES: tuple[str, ...] = (
    CaseStatus.ONGOING,
    CaseStatus.RESOLVED,
    CaseStatus.PENDING,
)

ALLOWED_SETTINGS: tuple[str, ...] = (
    IndoorsOrOutdoors.INDOORS,
    IndoorsOrOutdoors.OUTDOORS,
)

MISSING_VALUE_MESSAGE = "Required field is missing or empty."

# Upload column -> store column whose VARCHAR length bounds the value.
COLUMN_LENGTH_LIMITS: dict[str, int] = {
    column: target.type.length
    for column, target in (
        ("IncidentID", IncidentReport.__table__.c.incident_id),
        ("Time", IncidentReport.__table__.c.time),
        ("DayOfWeek", IncidentReport.__table__.c.day_of_week),
        ("EventProximity", IncidentReport.__table__.c.event_proximity),
        ("HouseBuildingNumber", Place.__table__.c.house_building_number),
        ("StreetName", Place.__table__.c.street_name),
        ("PurokBlockLot", Place.__table__.c.purok_block_lot),
        ("Barangay", Place.__table__.c.barangay),
        ("MunicipalityCity", Place.__table__.c.municipality_city),
        ("Province", Place.__table__.c.province),
        ("ZipCode", Place.__table__.c.zip_code),
        ("Region", Place.__table__.c.region),
        ("IncidentType", IncidentCategory.__table__.c.name),
        ("IncidentCategory", IncidentCategory.__table__.c.category_group),
    )
}


class IncidentRowValidator:
    """
    Validates one raw upload row and converts it into a NormalizedIncident.

    Stateless: the same row always yields the same result.
    """

    def __init__(self, *, required_columns: tuple[str, ...] = REQUIRED_COLUMNS) -> None:
        self._required_columns = required_columns

    def is_completely_empty_row(self, row: Mapping[str, Any]) -> bool:
        """
        Return True when all values in the row are empty or whitespace.
        """

        return all(self._is_blank(value) for value in row.values())

    def extract_incident_id(self, row: Mapping[str, Any]) -> str | None:
        """
        Return the trimmed natural key, or None when the cell is blank.
        """

        return self._parse_optional_string(row.get("IncidentID"))

    def normalize_row(
        self,
        *,
        raw_row: Mapping[str, Any],
        row_number: int,
    ) -> tuple[NormalizedIncident | None, list[RowValidationError]]:
        """
        Validate and parse one raw row.

        A missing required field ends validation for the row: format checks
        only run once every required value is present.
        """

        errors: list[RowValidationError] = []
        for column in self._required_columns:
            value = raw_row.get(column)
            if self._is_blank(value):
                errors.append(
                    RowValidationError(
                        row_number=row_number,
                        field=column,
                        message=MISSING_VALUE_MESSAGE,
                        value=self._stringify_value(value),
                    )
                )
        if errors:
            return None, errors

        incident_date = self._parse_date(
            value=raw_row.get("Date"),
            row_number=row_number,
            errors=errors,
        )
        case_status = self._parse_optional_choice(
            value=raw_row.get("CaseStatus"),
            column="CaseStatus",
            allowed=ALLOWED_CASE_STATUSES,
            row_number=row_number,
            errors=errors,
        )
        indoors_or_outdoors = self._parse_optional_choice(
            value=raw_row.get("IndoorsOrOutdoors"),
            column="IndoorsOrOutdoors",
            allowed=ALLOWED_SETTINGS,
            row_number=row_number,
            errors=errors,
        )
        self._check_lengths(raw_row=raw_row, row_number=row_number, errors=errors)

        if errors or incident_date is None:
            return None, errors

        place = PlaceInput(
            barangay=self._required_string(raw_row.get("Barangay")),
            municipality_city=self._required_string(raw_row.get("MunicipalityCity")),
            province=self._required_string(raw_row.get("Province")),
            region=self._required_string(raw_row.get("Region")),
            house_building_number=self._parse_optional_string(raw_row.get("HouseBuildingNumber")),
            street_name=self._parse_optional_string(raw_row.get("StreetName")),
            purok_block_lot=self._parse_optional_string(raw_row.get("PurokBlockLot")),
            zip_code=self._parse_optional_string(raw_row.get("ZipCode")),
        )
        category = CategoryInput(
            name=self._required_string(raw_row.get("IncidentType")),
            group=self._required_string(raw_row.get("IncidentCategory")),
        )

        return (
            NormalizedIncident(
                incident_id=self._required_string(raw_row.get("IncidentID")),
                date=incident_date,
                time=self._parse_time(raw_row.get("Time")),
                day_of_week=self._required_string(raw_row.get("DayOfWeek")),
                place=place,
                category=category,
                case_status=case_status,
                event_proximity=self._parse_optional_string(raw_row.get("EventProximity")),
                indoors_or_outdoors=indoors_or_outdoors,
            ),
            [],
        )

    def _parse_date(
        self,
        *,
        value: Any,
        row_number: int,
        errors: list[RowValidationError],
    ) -> date | None:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value

        raw = str(value).strip()
        normalized = raw[:-1] + "+00:00" if raw.endswith("Z") else raw
        try:
            return datetime.fromisoformat(normalized).date()
        except ValueError:
            pass

        for fmt in DATE_FORMATS:
            try:
                return datetime.strptime(raw, fmt).date()
            except ValueError:
                continue

        errors.append(
            RowValidationError(
                row_number=row_number,
                field="Date",
                message="Invalid date format.",
                value=self._stringify_value(value),
            )
        )
        return None

    def _check_lengths(
        self,
        *,
        raw_row: Mapping[str, Any],
        row_number: int,
        errors: list[RowValidationError],
    ) -> None:
        for column, limit in COLUMN_LENGTH_LIMITS.items():
            raw_value = raw_row.get(column)
            if column == "Time" and not self._is_blank(raw_value):
                value = self._parse_time(raw_value)
            else:
                value = self._parse_optional_string(raw_value)
            if value is not None and len(value) > limit:
                errors.append(
                    RowValidationError(
                        row_number=row_number,
                        field=column,
                        message=f"Value exceeds {limit} characters.",
                        value=value,
                    )
                )

    def _parse_optional_choice(
        self,
        *,
        value: Any,
        column: str,
        allowed: tuple[str, ...],
        row_number: int,
        errors: list[RowValidationError],
    ) -> str | None:
        if self._is_blank(value):
            return None

        # Matched case-insensitively; the canonical spelling is what gets stored.
        lookup = {choice.lower(): choice for choice in allowed}
        canonical = lookup.get(str(value).strip().lower())
        if canonical is None:
            errors.append(
                RowValidationError(
                    row_number=row_number,
                    field=column,
                    message=f"Invalid value. Must be one of: {', '.join(allowed)}.",
                    value=self._stringify_value(value),
                )
            )
        return canonical

    @staticmethod
    def _parse_time(value: Any) -> str:
        if isinstance(value, datetime):
            return value.strftime("%H:%M")
        if isinstance(value, time):
            return value.strftime("%H:%M")
        return str(value).strip()

    @staticmethod
    def _required_string(value: Any) -> str:
        return str(value).strip()

    def _parse_optional_string(self, value: Any) -> str | None:
        if self._is_blank(value):
            return None
        return str(value).strip()

    @staticmethod
    def _is_blank(value: Any) -> bool:
        if value is None:
            return True
        return str(value).strip() == ""

    @staticmethod
    def _stringify_value(value: Any) -> str | None:
        if value is None:
            return None
        return str(value)
