"""
app/domain/incident_import.py

Domain models used by the incident report bulk import flow.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date
from enum import Enum


class RowBucket(str, Enum):
    """
    Classification of one analysed row. Every row lands in exactly one.
    """

    NEW_VALID = "new_valid"
    UPDATE_CANDIDATE = "update_candidate"
    INVALID_NEW = "invalid_new"
    INVALID_DUPLICATE = "invalid_duplicate"


class ImportAction(str, Enum):
    IMPORT_NEW_ONLY = "import_new_only"
    IMPORT_AND_UPDATE = "import_and_update"


class AnalysisState(str, Enum):
    PARSING = "parsing"
    VALIDATING_SCHEMA = "validating_schema"
    PROCESSING_ROWS = "processing_rows"
    REPORTED = "reported"
    REJECTED = "rejected"


@dataclass(frozen=True)
class PlaceInput:
    """
    Denormalized place attributes taken from one upload row.
    """

    barangay: str
    municipality_city: str
    province: str
    region: str
    house_building_number: str | None = None
    street_name: str | None = None
    purok_block_lot: str | None = None
    zip_code: str | None = None

    @property
    def match_key(self) -> tuple[str, str, str, str]:
        return (self.barangay, self.municipality_city, self.province, self.region)


@dataclass(frozen=True)
class CategoryInput:
    name: str
    group: str

    @property
    def match_key(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class NormalizedIncident:
    """
    Typed incident fields produced by the row normalizer.
    """

    incident_id: str
    date: date
    time: str
    day_of_week: str
    place: PlaceInput
    category: CategoryInput
    case_status: str | None = None
    event_proximity: str | None = None
    indoors_or_outdoors: str | None = None


@dataclass(frozen=True)
class RowValidationError:
    """
    One field-level problem found in an upload row.
    """

    row_number: int
    field: str
    message: str
    value: str | None = None


@dataclass(frozen=True)
class ResolvedIncidentRow:
    """
    A row that passed validation, with its reference identifiers.

    ``place_id`` / ``category_id`` are None only when reference creation is
    deferred to confirmation and the entity did not exist at analysis time.
    """

    row_number: int
    incident: NormalizedIncident
    place_id: uuid.UUID | None
    category_id: uuid.UUID | None

    @property
    def incident_id(self) -> str:
        return self.incident.incident_id


@dataclass(frozen=True)
class InvalidRow:
    row_number: int
    incident_id: str | None
    errors: tuple[RowValidationError, ...]


@dataclass
class AnalysisReport:
    """
    Complete result of analysing one upload. Nothing here is persisted.
    """

    file_name: str
    total_rows: int = 0
    blank_rows_skipped: int = 0
    snapshot_size: int = 0
    state: AnalysisState = AnalysisState.REPORTED
    new_valid: list[ResolvedIncidentRow] = field(default_factory=list)
    update_candidates: list[ResolvedIncidentRow] = field(default_factory=list)
    invalid_new: list[InvalidRow] = field(default_factory=list)
    invalid_duplicates: list[InvalidRow] = field(default_factory=list)
    validation_errors: list[RowValidationError] = field(default_factory=list)
    duplicate_validation_errors: list[RowValidationError] = field(default_factory=list)
    validation_errors_truncated: bool = False

    def counts(self) -> dict[str, int]:
        return {
            RowBucket.NEW_VALID.value: len(self.new_valid),
            RowBucket.UPDATE_CANDIDATE.value: len(self.update_candidates),
            RowBucket.INVALID_NEW.value: len(self.invalid_new),
            RowBucket.INVALID_DUPLICATE.value: len(self.invalid_duplicates),
        }


@dataclass(frozen=True)
class ConfirmationRequest:
    action: ImportAction
    new_rows: list[ResolvedIncidentRow] = field(default_factory=list)
    update_rows: list[ResolvedIncidentRow] = field(default_factory=list)


@dataclass(frozen=True)
class SkippedRow:
    row_number: int
    incident_id: str
    message: str


@dataclass(frozen=True)
class ConfirmationResult:
    created_count: int
    updated_count: int
    skipped: list[SkippedRow] = field(default_factory=list)
