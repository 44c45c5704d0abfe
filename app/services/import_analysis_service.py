"""
app/services/import_analysis_service.py

Analysis phase of the incident report bulk import.

One upload moves through

    parsing -> validating_schema -> processing_rows -> reported

or stops in ``rejected`` when the file cannot be read or its header lacks a
required column. Rows are processed one at a time in source order. A bad row
never aborts the run: it is reported in an invalid bucket with its errors.

No incident report is written here. Places and categories are created on
first sight (and committed per row so concurrent importers can see them)
unless reference creation is deferred to confirmation.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Mapping

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_import_settings
from app.domain.incident_import import (
    AnalysisReport,
    AnalysisState,
    InvalidRow,
    ResolvedIncidentRow,
    RowBucket,
    RowValidationError,
)
from app.readers.tabular_reader import TabularReader
from app.repositories.incident_report_repository import IncidentReportRepository
from app.services.duplicate_classifier import NaturalKeySnapshot, classify
from app.services.reference_resolver import (
    CategoryResolver,
    PlaceResolver,
    ReferenceResolutionError,
    ReferenceResolver,
)
from app.validators.import_schema_validator import ImportSchemaValidator, ImportStructureError
from app.validators.incident_row_validator import IncidentRowValidator

logger = logging.getLogger(__name__)


class ImportAnalysisError(RuntimeError):
    """
    Raised when the store cannot be read or written during analysis.
    """


class ImportAnalysisService:
    """
    Drives reader, validators, resolvers and classifier over one upload.
    """

    def __init__(
        self,
        *,
        max_validation_errors: int,
        log_validation_errors: bool,
        defer_reference_creation: bool = False,
        reader: TabularReader | None = None,
        schema_validator: ImportSchemaValidator | None = None,
        row_validator: IncidentRowValidator | None = None,
    ) -> None:
        self._max_validation_errors = max(1, max_validation_errors)
        self._log_validation_errors = log_validation_errors
        self._defer_reference_creation = defer_reference_creation
        self._reader = reader or TabularReader()
        self._schema_validator = schema_validator or ImportSchemaValidator()
        self._row_validator = row_validator or IncidentRowValidator()

    @property
    def defers_reference_creation(self) -> bool:
        return self._defer_reference_creation

    def analyze(
        self,
        *,
        content: bytes,
        file_name: str,
        db: Session,
        content_type: str | None = None,
    ) -> AnalysisReport:
        """
        Analyse one upload and return the full report.

        Raises:
            ImportStructureError: the file is unreadable or misses required
                columns. No row has been looked at and nothing was written.
            ImportAnalysisError: the store failed underneath the run.
        """

        state = AnalysisState.PARSING
        logger.info("Import analysis started file=%r", file_name)
        try:
            table = self._reader.read(
                content=content,
                file_name=file_name,
                content_type=content_type,
            )
            state = AnalysisState.VALIDATING_SCHEMA
            self._schema_validator.validate(table.headers)
        except ImportStructureError as exc:
            logger.warning(
                "Import analysis %s file=%r during %s: %s",
                AnalysisState.REJECTED.value,
                file_name,
                state.value,
                exc,
            )
            raise

        state = AnalysisState.PROCESSING_ROWS
        try:
            snapshot = NaturalKeySnapshot.of(IncidentReportRepository(db).fetch_natural_keys())
        except SQLAlchemyError as exc:
            raise ImportAnalysisError("Failed to read existing incident IDs.") from exc
        logger.debug(
            "Import analysis file=%r state=%s rows=%d snapshot_size=%d",
            file_name,
            state.value,
            len(table.rows),
            len(snapshot),
        )

        create_missing = not self._defer_reference_creation
        place_resolver = PlaceResolver(db, create_missing=create_missing)
        category_resolver = CategoryResolver(db, create_missing=create_missing)

        report = AnalysisReport(file_name=file_name, snapshot_size=len(snapshot))
        for row_number, raw_row in table.rows:
            if self._row_validator.is_completely_empty_row(raw_row):
                report.blank_rows_skipped += 1
                continue
            report.total_rows += 1
            self._process_row(
                db=db,
                raw_row=raw_row,
                row_number=row_number,
                snapshot=snapshot,
                place_resolver=place_resolver,
                category_resolver=category_resolver,
                report=report,
            )

        report.state = AnalysisState.REPORTED
        counts = report.counts()
        logger.info(
            "Import analysis complete file=%r rows=%d new=%d updates=%d "
            "invalid_new=%d invalid_duplicates=%d blank_skipped=%d",
            file_name,
            report.total_rows,
            counts[RowBucket.NEW_VALID.value],
            counts[RowBucket.UPDATE_CANDIDATE.value],
            counts[RowBucket.INVALID_NEW.value],
            counts[RowBucket.INVALID_DUPLICATE.value],
            report.blank_rows_skipped,
        )
        return report

    # ------------------------------------------------------------------
    # Row processing
    # ------------------------------------------------------------------

    def _process_row(
        self,
        *,
        db: Session,
        raw_row: Mapping[str, Any],
        row_number: int,
        snapshot: NaturalKeySnapshot,
        place_resolver: PlaceResolver,
        category_resolver: CategoryResolver,
        report: AnalysisReport,
    ) -> None:
        incident_id = self._row_validator.extract_incident_id(raw_row)
        incident, errors = self._row_validator.normalize_row(
            raw_row=raw_row,
            row_number=row_number,
        )

        place_id = None
        category_id = None
        if incident is not None:
            place_id = self._resolve_reference(
                resolver=place_resolver,
                item=incident.place,
                row_number=row_number,
                errors=errors,
            )
            category_id = self._resolve_reference(
                resolver=category_resolver,
                item=incident.category,
                row_number=row_number,
                errors=errors,
            )
            if not self._defer_reference_creation:
                self._publish_references(db)

        bucket = classify(incident_id, snapshot, is_valid=not errors)
        logger.debug("Row %s incident_id=%r classified as %s", row_number, incident_id, bucket.value)

        if bucket is RowBucket.NEW_VALID or bucket is RowBucket.UPDATE_CANDIDATE:
            resolved = ResolvedIncidentRow(
                row_number=row_number,
                incident=incident,
                place_id=place_id,
                category_id=category_id,
            )
            if bucket is RowBucket.NEW_VALID:
                report.new_valid.append(resolved)
            else:
                report.update_candidates.append(resolved)
            return

        invalid = InvalidRow(row_number=row_number, incident_id=incident_id, errors=tuple(errors))
        if bucket is RowBucket.INVALID_DUPLICATE:
            report.invalid_duplicates.append(invalid)
            target = report.duplicate_validation_errors
        else:
            report.invalid_new.append(invalid)
            target = report.validation_errors
        for error in errors:
            self._record_error(report, target, error)

    def _resolve_reference(
        self,
        *,
        resolver: ReferenceResolver[Any],
        item: Any,
        row_number: int,
        errors: list[RowValidationError],
    ) -> Any:
        try:
            return resolver.resolve(item)
        except ReferenceResolutionError as exc:
            errors.append(
                RowValidationError(
                    row_number=row_number,
                    field=exc.entity,
                    message=exc.message,
                    value=exc.key,
                )
            )
            return None

    @staticmethod
    def _publish_references(db: Session) -> None:
        try:
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise ImportAnalysisError("Failed to persist reference entities.") from exc

    def _record_error(
        self,
        report: AnalysisReport,
        target: list[RowValidationError],
        error: RowValidationError,
    ) -> None:
        if self._log_validation_errors:
            logger.warning(
                "Import validation error row=%s field=%s message=%s value=%r",
                error.row_number,
                error.field,
                error.message,
                error.value,
            )

        captured = len(report.validation_errors) + len(report.duplicate_validation_errors)
        if captured < self._max_validation_errors:
            target.append(error)
        else:
            report.validation_errors_truncated = True


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_import_analysis_service() -> ImportAnalysisService:
    """
    Build and cache the analysis service with env-driven settings.
    """

    settings = get_import_settings()
    return ImportAnalysisService(
        max_validation_errors=settings.max_validation_errors,
        log_validation_errors=settings.log_validation_errors,
        defer_reference_creation=settings.defer_reference_creation,
    )
