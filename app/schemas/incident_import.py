"""
app/schemas/incident_import.py

Request and response schemas for the incident report import endpoints.

The row lists of an analysis response are exactly what the caller echoes
back to the confirmation endpoint, so ``IncidentRowPayload`` serves both.
"""

from __future__ import annotations

import datetime as dt
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.domain.incident_import import (
    AnalysisReport,
    CategoryInput,
    ConfirmationRequest,
    ImportAction,
    InvalidRow,
    NormalizedIncident,
    PlaceInput,
    ResolvedIncidentRow,
    RowValidationError,
)


class PlacePayload(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    barangay: str = Field(..., min_length=1)
    municipality_city: str = Field(..., min_length=1)
    province: str = Field(..., min_length=1)
    region: str = Field(..., min_length=1)
    house_building_number: str | None = None
    street_name: str | None = None
    purok_block_lot: str | None = None
    zip_code: str | None = None


class CategoryPayload(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1)
    group: str = Field(..., min_length=1)


class IncidentRowPayload(BaseModel):
    """
    One accepted row as reported by analysis and echoed back on confirmation.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    row_number: int = Field(..., ge=1)
    incident_id: str = Field(..., min_length=1)
    date: dt.date
    time: str = Field(..., min_length=1)
    day_of_week: str = Field(..., min_length=1)
    case_status: Literal["Ongoing", "Resolved", "Pending"] | None = None
    event_proximity: str | None = None
    indoors_or_outdoors: Literal["Indoors", "Outdoors"] | None = None
    place: PlacePayload
    category: CategoryPayload
    place_id: UUID | None = None
    category_id: UUID | None = None

    @classmethod
    def from_domain(cls, row: ResolvedIncidentRow) -> IncidentRowPayload:
        incident = row.incident
        return cls(
            row_number=row.row_number,
            incident_id=incident.incident_id,
            date=incident.date,
            time=incident.time,
            day_of_week=incident.day_of_week,
            case_status=incident.case_status,
            event_proximity=incident.event_proximity,
            indoors_or_outdoors=incident.indoors_or_outdoors,
            place=PlacePayload(
                barangay=incident.place.barangay,
                municipality_city=incident.place.municipality_city,
                province=incident.place.province,
                region=incident.place.region,
                house_building_number=incident.place.house_building_number,
                street_name=incident.place.street_name,
                purok_block_lot=incident.place.purok_block_lot,
                zip_code=incident.place.zip_code,
            ),
            category=CategoryPayload(name=incident.category.name, group=incident.category.group),
            place_id=row.place_id,
            category_id=row.category_id,
        )

    def to_domain(self) -> ResolvedIncidentRow:
        return ResolvedIncidentRow(
            row_number=self.row_number,
            incident=NormalizedIncident(
                incident_id=self.incident_id,
                date=self.date,
                time=self.time,
                day_of_week=self.day_of_week,
                place=PlaceInput(**self.place.model_dump()),
                category=CategoryInput(name=self.category.name, group=self.category.group),
                case_status=self.case_status,
                event_proximity=self.event_proximity,
                indoors_or_outdoors=self.indoors_or_outdoors,
            ),
            place_id=self.place_id,
            category_id=self.category_id,
        )


class ValidationErrorResponse(BaseModel):
    """
    API response model for one row-level validation error.
    """

    row_number: int = Field(..., ge=1)
    field: str
    message: str
    value: str | None = None

    @classmethod
    def from_domain(cls, error: RowValidationError) -> ValidationErrorResponse:
        return cls(
            row_number=error.row_number,
            field=error.field,
            message=error.message,
            value=error.value,
        )


class InvalidRowResponse(BaseModel):
    row_number: int = Field(..., ge=1)
    incident_id: str | None = None
    errors: list[ValidationErrorResponse] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, row: InvalidRow) -> InvalidRowResponse:
        return cls(
            row_number=row.row_number,
            incident_id=row.incident_id,
            errors=[ValidationErrorResponse.from_domain(error) for error in row.errors],
        )


class AnalysisCountsResponse(BaseModel):
    new_valid: int = Field(..., ge=0)
    update_candidate: int = Field(..., ge=0)
    invalid_new: int = Field(..., ge=0)
    invalid_duplicate: int = Field(..., ge=0)


class ImportAnalysisResponse(BaseModel):
    """
    API response model for one analysed upload.
    """

    file_name: str
    state: str
    analysed_at: dt.datetime
    total_rows: int = Field(..., ge=0)
    blank_rows_skipped: int = Field(..., ge=0)
    snapshot_size: int = Field(..., ge=0)
    reference_creation_deferred: bool
    counts: AnalysisCountsResponse
    new_rows: list[IncidentRowPayload] = Field(default_factory=list)
    update_rows: list[IncidentRowPayload] = Field(default_factory=list)
    invalid_new: list[InvalidRowResponse] = Field(default_factory=list)
    invalid_duplicates: list[InvalidRowResponse] = Field(default_factory=list)
    validation_errors: list[ValidationErrorResponse] = Field(default_factory=list)
    duplicate_validation_errors: list[ValidationErrorResponse] = Field(default_factory=list)
    validation_errors_truncated: bool = False

    @classmethod
    def from_report(
        cls,
        report: AnalysisReport,
        *,
        analysed_at: dt.datetime,
        reference_creation_deferred: bool,
    ) -> ImportAnalysisResponse:
        return cls(
            file_name=report.file_name,
            state=report.state.value,
            analysed_at=analysed_at,
            total_rows=report.total_rows,
            blank_rows_skipped=report.blank_rows_skipped,
            snapshot_size=report.snapshot_size,
            reference_creation_deferred=reference_creation_deferred,
            counts=AnalysisCountsResponse(**report.counts()),
            new_rows=[IncidentRowPayload.from_domain(row) for row in report.new_valid],
            update_rows=[IncidentRowPayload.from_domain(row) for row in report.update_candidates],
            invalid_new=[InvalidRowResponse.from_domain(row) for row in report.invalid_new],
            invalid_duplicates=[InvalidRowResponse.from_domain(row) for row in report.invalid_duplicates],
            validation_errors=[
                ValidationErrorResponse.from_domain(error) for error in report.validation_errors
            ],
            duplicate_validation_errors=[
                ValidationErrorResponse.from_domain(error)
                for error in report.duplicate_validation_errors
            ],
            validation_errors_truncated=report.validation_errors_truncated,
        )


class ImportConfirmationRequest(BaseModel):
    """
    Payload echoed back from an analysis response.
    """

    action: ImportAction
    new_rows: list[IncidentRowPayload] = Field(default_factory=list)
    update_rows: list[IncidentRowPayload] = Field(default_factory=list)

    def to_domain(self) -> ConfirmationRequest:
        return ConfirmationRequest(
            action=self.action,
            new_rows=[row.to_domain() for row in self.new_rows],
            update_rows=[row.to_domain() for row in self.update_rows],
        )


class SkippedRowResponse(BaseModel):
    row_number: int = Field(..., ge=1)
    incident_id: str
    message: str


class ImportConfirmationResponse(BaseModel):
    created_count: int = Field(..., ge=0)
    updated_count: int = Field(..., ge=0)
    skipped_or_failed: list[SkippedRowResponse] = Field(default_factory=list)


class CommitErrorDetail(BaseModel):
    row: int | None = None
    incident_id: str | None = None
    message: str


class ImportConfirmationErrorResponse(BaseModel):
    """
    Body returned when a confirmation transaction is aborted.
    """

    message: str
    error: CommitErrorDetail
    created_count: int = 0
    updated_count: int = 0


class IncidentReportResponse(BaseModel):
    id: UUID
    incident_id: str
    date: dt.date
    time: str = Field(..., min_length=1)
    day_of_week: str = Field(..., min_length=1)
    case_status: str | None = None
    event_proximity: str | None = None
    indoors_or_outdoors: str | None = None
    place_id: UUID
    category_id: UUID
    full_address: str
    category_name: str
    category_group: str
    created_at: dt.datetime
    updated_at: dt.datetime
