"""
tests/test_import_confirmation_service.py

Confirmation is all-or-nothing and re-checks every row against the
current store, not the analysis snapshot.
"""

from __future__ import annotations

import datetime as dt

import pytest
from sqlalchemy import select

from app.domain.incident_import import (
    CategoryInput,
    ConfirmationRequest,
    ImportAction,
    NormalizedIncident,
    PlaceInput,
)
from app.services.import_analysis_service import ImportAnalysisService
from app.services.import_confirmation_service import ImportCommitError, ImportConfirmationService
from db.models import IncidentCategory, IncidentReport, Place


def _analyze(db_session, content, *, defer: bool = False):
    service = ImportAnalysisService(
        max_validation_errors=50,
        log_validation_errors=False,
        defer_reference_creation=defer,
    )
    return service.analyze(content=content, file_name="incidents.csv", db=db_session)


def _request(report, action: ImportAction = ImportAction.IMPORT_AND_UPDATE) -> ConfirmationRequest:
    return ConfirmationRequest(
        action=action,
        new_rows=list(report.new_valid),
        update_rows=list(report.update_candidates),
    )


@pytest.fixture()
def service() -> ImportConfirmationService:
    return ImportConfirmationService()


def test_round_trip_creates_and_updates(db_session, seed_incident, make_row, make_csv, service) -> None:
    seed_incident("INC-0002")
    report = _analyze(
        db_session,
        make_csv(
            [
                make_row(IncidentID="INC-0001"),
                make_row(IncidentID="INC-0002", CaseStatus="Resolved", DayOfWeek="Monday"),
            ]
        ),
    )

    result = service.confirm(request=_request(report), db=db_session)

    assert (result.created_count, result.updated_count) == (1, 1)
    assert result.skipped == []
    db_session.expire_all()

    created = db_session.execute(
        select(IncidentReport).where(IncidentReport.incident_id == "INC-0001")
    ).scalar_one()
    assert created.place.barangay == "San Isidro"
    assert created.category.name == "Theft"

    updated = db_session.execute(
        select(IncidentReport).where(IncidentReport.incident_id == "INC-0002")
    ).scalar_one()
    assert updated.case_status == "Resolved"
    assert updated.day_of_week == "Monday"
    assert updated.place.barangay == "San Isidro"


def test_failing_row_rolls_back_everything(
    db_session, seed_incident, make_row, make_csv, service, row_count
) -> None:
    report = _analyze(
        db_session,
        make_csv([make_row(IncidentID="INC-0001"), make_row(IncidentID="INC-0002")]),
    )
    # Another importer commits INC-0002 between analysis and confirmation.
    seed_incident("INC-0002")

    with pytest.raises(ImportCommitError) as excinfo:
        service.confirm(request=_request(report), db=db_session)

    assert excinfo.value.row_number == 3
    assert excinfo.value.incident_id == "INC-0002"
    assert "already exists" in excinfo.value.message
    assert excinfo.value.to_dict() == {
        "row": 3,
        "incident_id": "INC-0002",
        "message": excinfo.value.message,
    }
    remaining = db_session.execute(select(IncidentReport.incident_id)).scalars().all()
    assert remaining == ["INC-0002"]
    assert row_count(db_session, IncidentReport) == 1


def test_update_target_deleted_after_analysis_aborts(
    db_session, seed_incident, make_row, make_csv, service, row_count
) -> None:
    record = seed_incident("INC-0002")
    report = _analyze(
        db_session,
        make_csv([make_row(IncidentID="INC-0001"), make_row(IncidentID="INC-0002")]),
    )
    db_session.delete(record)
    db_session.commit()

    with pytest.raises(ImportCommitError) as excinfo:
        service.confirm(request=_request(report), db=db_session)

    assert "not found during update" in excinfo.value.message
    assert excinfo.value.incident_id == "INC-0002"
    assert row_count(db_session, IncidentReport) == 0


def test_deleted_reference_aborts(db_session, make_row, make_csv, service) -> None:
    report = _analyze(db_session, make_csv([make_row()]))
    db_session.delete(db_session.get(Place, report.new_valid[0].place_id))
    db_session.commit()

    with pytest.raises(ImportCommitError) as excinfo:
        service.confirm(request=_request(report), db=db_session)

    assert excinfo.value.message == "Referenced place no longer exists."


def test_import_new_only_skips_update_rows(db_session, seed_incident, make_row, make_csv, service) -> None:
    seed_incident("INC-0002")
    report = _analyze(
        db_session,
        make_csv([make_row(IncidentID="INC-0001"), make_row(IncidentID="INC-0002", CaseStatus="Resolved")]),
    )

    result = service.confirm(
        request=_request(report, ImportAction.IMPORT_NEW_ONLY),
        db=db_session,
    )

    assert (result.created_count, result.updated_count) == (1, 0)
    assert [(row.row_number, row.incident_id) for row in result.skipped] == [(3, "INC-0002")]
    untouched = db_session.execute(
        select(IncidentReport).where(IncidentReport.incident_id == "INC-0002")
    ).scalar_one()
    assert untouched.case_status == "Pending"


def test_repeated_incident_id_in_request_aborts(db_session, make_row, make_csv, service, row_count) -> None:
    report = _analyze(
        db_session,
        make_csv([make_row(IncidentID="INC-0001"), make_row(IncidentID="INC-0001")]),
    )
    assert len(report.new_valid) == 2

    with pytest.raises(ImportCommitError) as excinfo:
        service.confirm(request=_request(report), db=db_session)

    assert excinfo.value.row_number == 3
    assert row_count(db_session, IncidentReport) == 0


def test_deferred_references_are_created_inside_the_transaction(
    db_session, seed_incident, make_row, make_csv, service, row_count
) -> None:
    report = _analyze(
        db_session,
        make_csv(
            [
                make_row(IncidentID="INC-0001", Barangay="Magugpo"),
                make_row(IncidentID="INC-0002", Barangay="Magugpo"),
            ]
        ),
        defer=True,
    )
    assert row_count(db_session, Place) == 0

    result = service.confirm(request=_request(report), db=db_session)

    assert result.created_count == 2
    assert row_count(db_session, Place) == 1
    assert row_count(db_session, IncidentCategory) == 1


def test_aborted_deferred_confirmation_leaves_no_references(
    db_session, seed_incident, make_row, make_csv, service, row_count
) -> None:
    report = _analyze(
        db_session,
        make_csv([make_row(IncidentID="INC-0001", Barangay="Magugpo"), make_row(IncidentID="INC-0002")]),
        defer=True,
    )
    seed_incident("INC-0002", barangay="Poblacion", category="Robbery")

    with pytest.raises(ImportCommitError):
        service.confirm(request=_request(report), db=db_session)

    assert db_session.execute(select(Place.barangay)).scalars().all() == ["Poblacion"]
    assert db_session.execute(select(IncidentCategory.name)).scalars().all() == ["Robbery"]


def test_new_row_round_trips_every_field(db_session, make_row, make_csv, service) -> None:
    report = _analyze(db_session, make_csv([make_row(CaseStatus="pending", IndoorsOrOutdoors="indoors")]))
    analysed = report.new_valid[0].incident

    result = service.confirm(request=_request(report, ImportAction.IMPORT_NEW_ONLY), db=db_session)
    assert result.created_count == 1
    db_session.expire_all()

    stored = db_session.execute(
        select(IncidentReport).where(IncidentReport.incident_id == "INC-0001")
    ).scalar_one()
    round_tripped = NormalizedIncident(
        incident_id=stored.incident_id,
        date=stored.date,
        time=stored.time,
        day_of_week=stored.day_of_week,
        place=PlaceInput(
            barangay=stored.place.barangay,
            municipality_city=stored.place.municipality_city,
            province=stored.place.province,
            region=stored.place.region,
            house_building_number=stored.place.house_building_number,
            street_name=stored.place.street_name,
            purok_block_lot=stored.place.purok_block_lot,
            zip_code=stored.place.zip_code,
        ),
        category=CategoryInput(name=stored.category.name, group=stored.category.category_group),
        case_status=stored.case_status,
        event_proximity=stored.event_proximity,
        indoors_or_outdoors=stored.indoors_or_outdoors,
    )

    assert round_tripped == analysed
    assert round_tripped == NormalizedIncident(
        incident_id="INC-0001",
        date=dt.date(2024, 3, 15),
        time="14:30",
        day_of_week="Friday",
        place=PlaceInput(
            barangay="San Isidro",
            municipality_city="Tagum City",
            province="Davao del Norte",
            region="Region XI",
            house_building_number="12",
            street_name="Rizal St.",
            purok_block_lot="Purok 3",
            zip_code="8100",
        ),
        category=CategoryInput(name="Theft", group="Property"),
        case_status="Pending",
        event_proximity="Near market",
        indoors_or_outdoors="Indoors",
    )
