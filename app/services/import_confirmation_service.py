"""
app/services/import_confirmation_service.py

Confirmation phase of the incident report bulk import.

The operator echoes back the rows accepted from an analysis report together
with an action. Everything is applied in one transaction: the first failing
row rolls the whole call back and nothing from it is committed.

The analysis snapshot may be stale by now, so every row is re-checked
against the current store before it is written:

- a new row whose incident ID now exists is a conflict;
- an update row whose incident ID has disappeared is a conflict;
- a referenced place or category that no longer exists is a conflict.
"""

from __future__ import annotations

import logging
import uuid
from functools import lru_cache
from typing import Any, Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.incident_import import (
    ConfirmationRequest,
    ConfirmationResult,
    ImportAction,
    ResolvedIncidentRow,
    SkippedRow,
)
from app.repositories.incident_report_repository import IncidentReportRepository
from app.repositories.reference_repository import CategoryRepository, PlaceRepository
from app.services.reference_resolver import (
    CategoryResolver,
    PlaceResolver,
    ReferenceResolutionError,
)

logger = logging.getLogger(__name__)


class ImportCommitError(RuntimeError):
    """
    Raised when a confirmation is aborted. Nothing from the call was committed.
    """

    def __init__(
        self,
        *,
        message: str,
        row_number: int | None = None,
        incident_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.row_number = row_number
        self.incident_id = incident_id

    def to_dict(self) -> dict[str, Any]:
        return {
            "row": self.row_number,
            "incident_id": self.incident_id,
            "message": self.message,
        }


class _ConfirmationRun:
    """
    Per-call state: repositories and resolvers bound to one session.
    """

    def __init__(self, db: Session) -> None:
        self.db = db
        self.incidents = IncidentReportRepository(db)
        self.places = PlaceRepository(db)
        self.categories = CategoryRepository(db)
        self.place_resolver = PlaceResolver(db)
        self.category_resolver = CategoryResolver(db)


class ImportConfirmationService:
    """
    Applies a confirmed import as a single all-or-nothing transaction.
    """

    def confirm(self, *, request: ConfirmationRequest, db: Session) -> ConfirmationResult:
        include_updates = request.action is ImportAction.IMPORT_AND_UPDATE
        update_rows = request.update_rows if include_updates else []
        logger.info(
            "Import confirmation started action=%s new_rows=%d update_rows=%d",
            request.action.value,
            len(request.new_rows),
            len(update_rows),
        )

        run = _ConfirmationRun(db)
        created_count = 0
        updated_count = 0
        try:
            self._ensure_unique_incident_ids([*request.new_rows, *update_rows])

            for row in request.new_rows:
                self._create_row(run, row)
                created_count += 1

            for row in update_rows:
                self._update_row(run, row)
                updated_count += 1

            try:
                db.commit()
            except SQLAlchemyError as exc:
                raise ImportCommitError(message="Failed to commit import transaction.") from exc
        except ImportCommitError as exc:
            db.rollback()
            logger.warning(
                "Import confirmation aborted row=%s incident_id=%r: %s",
                exc.row_number,
                exc.incident_id,
                exc.message,
            )
            raise

        skipped = []
        if not include_updates:
            skipped = [
                SkippedRow(
                    row_number=row.row_number,
                    incident_id=row.incident_id,
                    message="Update not applied: action is import_new_only.",
                )
                for row in request.update_rows
            ]

        logger.info(
            "Import confirmation committed created=%d updated=%d skipped=%d",
            created_count,
            updated_count,
            len(skipped),
        )
        return ConfirmationResult(
            created_count=created_count,
            updated_count=updated_count,
            skipped=skipped,
        )

    # ------------------------------------------------------------------
    # Row handlers
    # ------------------------------------------------------------------

    def _create_row(self, run: _ConfirmationRun, row: ResolvedIncidentRow) -> None:
        try:
            if run.incidents.exists(row.incident_id):
                raise ImportCommitError(
                    message="Incident ID already exists (created after analysis).",
                    row_number=row.row_number,
                    incident_id=row.incident_id,
                )
            place_id, category_id = self._reference_ids(run, row)
            run.incidents.add(row.incident, place_id=place_id, category_id=category_id)
            run.db.flush()
        except SQLAlchemyError as exc:
            raise ImportCommitError(
                message=f"Failed to create: {exc.__class__.__name__}.",
                row_number=row.row_number,
                incident_id=row.incident_id,
            ) from exc
        logger.debug("Row %s: created incident %s", row.row_number, row.incident_id)

    def _update_row(self, run: _ConfirmationRun, row: ResolvedIncidentRow) -> None:
        try:
            record = run.incidents.get_by_incident_id(row.incident_id)
            if record is None:
                raise ImportCommitError(
                    message="Incident ID not found during update (deleted after analysis).",
                    row_number=row.row_number,
                    incident_id=row.incident_id,
                )
            place_id, category_id = self._reference_ids(run, row)
            run.incidents.apply_update(record, row.incident, place_id=place_id, category_id=category_id)
            run.db.flush()
        except SQLAlchemyError as exc:
            raise ImportCommitError(
                message=f"Failed to update: {exc.__class__.__name__}.",
                row_number=row.row_number,
                incident_id=row.incident_id,
            ) from exc
        logger.debug("Row %s: updated incident %s", row.row_number, row.incident_id)

    def _reference_ids(
        self,
        run: _ConfirmationRun,
        row: ResolvedIncidentRow,
    ) -> tuple[uuid.UUID, uuid.UUID]:
        """
        Reuse the ids resolved during analysis; resolve proposed entities now.
        """

        try:
            if row.place_id is None:
                place_id = run.place_resolver.resolve(row.incident.place)
            elif run.places.exists(row.place_id):
                place_id = row.place_id
            else:
                raise ImportCommitError(
                    message="Referenced place no longer exists.",
                    row_number=row.row_number,
                    incident_id=row.incident_id,
                )

            if row.category_id is None:
                category_id = run.category_resolver.resolve(row.incident.category)
            elif run.categories.exists(row.category_id):
                category_id = row.category_id
            else:
                raise ImportCommitError(
                    message="Referenced category no longer exists.",
                    row_number=row.row_number,
                    incident_id=row.incident_id,
                )
        except ReferenceResolutionError as exc:
            raise ImportCommitError(
                message=exc.message,
                row_number=row.row_number,
                incident_id=row.incident_id,
            ) from exc

        return place_id, category_id

    @staticmethod
    def _ensure_unique_incident_ids(rows: Iterable[ResolvedIncidentRow]) -> None:
        seen: set[str] = set()
        for row in rows:
            if row.incident_id in seen:
                raise ImportCommitError(
                    message="Incident ID appears more than once in this confirmation.",
                    row_number=row.row_number,
                    incident_id=row.incident_id,
                )
            seen.add(row.incident_id)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_import_confirmation_service() -> ImportConfirmationService:
    return ImportConfirmationService()
