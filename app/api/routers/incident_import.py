"""
app/api/routers/incident_import.py

Incident report bulk import HTTP endpoints.
"""

from __future__ import annotations

import csv
import io
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Response, UploadFile, status
from sqlalchemy.orm import Session

from app.api.dependencies import get_tabular_upload
from app.config import ImportSettings, get_import_settings
from app.repositories.incident_report_repository import IncidentReportRepository
from app.schemas.incident_import import (
    ImportAnalysisResponse,
    ImportConfirmationErrorResponse,
    ImportConfirmationRequest,
    ImportConfirmationResponse,
    IncidentReportResponse,
    SkippedRowResponse,
)
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
from app.validators.import_schema_validator import (
    TEMPLATE_COLUMNS,
    TEMPLATE_VERSION,
    ImportStructureError,
)
from db.session import get_db

router = APIRouter(prefix="/incident-reports", tags=["incident-import"])


@router.post("/import", response_model=ImportAnalysisResponse)
def analyze_import(
    file: UploadFile = Depends(get_tabular_upload),
    db: Session = Depends(get_db),
    analysis_service: ImportAnalysisService = Depends(get_import_analysis_service),
    settings: ImportSettings = Depends(get_import_settings),
) -> ImportAnalysisResponse:
    """
    Analyse one upload. No incident report is written.
    """

    try:
        content = file.file.read(settings.max_upload_bytes + 1)
        if len(content) > settings.max_upload_bytes:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"Upload exceeds {settings.max_upload_bytes} bytes.",
            )
        report = analysis_service.analyze(
            content=content,
            file_name=file.filename or "upload",
            content_type=file.content_type,
            db=db,
        )
    except ImportStructureError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.to_dict(),
        ) from exc
    except ImportAnalysisError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to analyse import file.",
        ) from exc
    finally:
        file.file.close()

    return ImportAnalysisResponse.from_report(
        report,
        analysed_at=datetime.now(tz=timezone.utc),
        reference_creation_deferred=analysis_service.defers_reference_creation,
    )


@router.post(
    "/import/confirm",
    response_model=ImportConfirmationResponse,
    responses={status.HTTP_409_CONFLICT: {"model": ImportConfirmationErrorResponse}},
)
def confirm_import(
    body: ImportConfirmationRequest,
    db: Session = Depends(get_db),
    confirmation_service: ImportConfirmationService = Depends(get_import_confirmation_service),
) -> ImportConfirmationResponse:
    """
    Apply the echoed rows atomically. Any failing row aborts the whole call.
    """

    try:
        result = confirmation_service.confirm(request=body.to_domain(), db=db)
    except ImportCommitError as exc:
        failed_row = f"row {exc.row_number}" if exc.row_number is not None else "commit"
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=ImportConfirmationErrorResponse(
                message=f"Error processing {failed_row}. Import aborted.",
                error=exc.to_dict(),
            ).model_dump(),
        ) from exc

    return ImportConfirmationResponse(
        created_count=result.created_count,
        updated_count=result.updated_count,
        skipped_or_failed=[
            SkippedRowResponse(
                row_number=skipped.row_number,
                incident_id=skipped.incident_id,
                message=skipped.message,
            )
            for skipped in result.skipped
        ],
    )


@router.get("/import/template")
def download_import_template() -> Response:
    """
    Return an empty CSV carrying the expected header row.
    """

    buffer = io.StringIO()
    csv.writer(buffer).writerow(TEMPLATE_COLUMNS)
    return Response(
        content=buffer.getvalue(),
        media_type="text/csv",
        headers={
            "Content-Disposition": f'attachment; filename="incident_import_template_{TEMPLATE_VERSION}.csv"',
        },
    )


@router.get("/{incident_id}", response_model=IncidentReportResponse)
def get_incident_report(
    incident_id: str,
    db: Session = Depends(get_db),
) -> IncidentReportResponse:
    record = IncidentReportRepository(db).get_by_incident_id(incident_id.strip())
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Incident {incident_id!r} not found.",
        )

    return IncidentReportResponse(
        id=record.id,
        incident_id=record.incident_id,
        date=record.date,
        time=record.time,
        day_of_week=record.day_of_week,
        case_status=record.case_status,
        event_proximity=record.event_proximity,
        indoors_or_outdoors=record.indoors_or_outdoors,
        place_id=record.place_id,
        category_id=record.category_id,
        full_address=record.place.full_address(),
        category_name=record.category.name,
        category_group=record.category.category_group,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )
