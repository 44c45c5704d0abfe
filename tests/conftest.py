"""
Shared fixtures for import pipeline tests.

Repository and service tests run against an in-memory SQLite database.
pysqlite needs its implicit transaction handling switched off for
SAVEPOINTs to behave, which the reference resolver relies on.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Callable, Generator, Iterable, Mapping
from datetime import date

import pytest
from sqlalchemy import create_engine, event, func, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.validators.import_schema_validator import TEMPLATE_COLUMNS
from db.base import Base
from db.models import IncidentCategory, IncidentReport, Place
from db.session import build_session_factory


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record) -> None:  # noqa: ANN001
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn) -> None:  # noqa: ANN001
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker:
    return build_session_factory(engine)


@pytest.fixture()
def db_session(session_factory: sessionmaker) -> Generator[Session, None, None]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def default_row(**overrides: object) -> dict[str, object]:
    row: dict[str, object] = {
        "IncidentID": "INC-0001",
        "Date": "2024-03-15",
        "Time": "14:30",
        "DayOfWeek": "Friday",
        "CaseStatus": "Ongoing",
        "EventProximity": "Near market",
        "IndoorsOrOutdoors": "Outdoors",
        "HouseBuildingNumber": "12",
        "StreetName": "Rizal St.",
        "PurokBlockLot": "Purok 3",
        "Barangay": "San Isidro",
        "MunicipalityCity": "Tagum City",
        "Province": "Davao del Norte",
        "ZipCode": "8100",
        "Region": "Region XI",
        "IncidentType": "Theft",
        "IncidentCategory": "Property",
    }
    row.update(overrides)
    return row


def build_csv(
    rows: Iterable[Mapping[str, object]],
    headers: Iterable[str] = TEMPLATE_COLUMNS,
) -> bytes:
    header_list = list(headers)
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=header_list, extrasaction="ignore")
    writer.writeheader()
    for row in rows:
        writer.writerow({key: ("" if value is None else value) for key, value in row.items()})
    return buffer.getvalue().encode("utf-8")


@pytest.fixture()
def seed_incident(db_session: Session) -> Callable[..., IncidentReport]:
    """Commit one incident (with its place and category) and return it."""

    def _seed(incident_id: str, *, barangay: str = "Poblacion", category: str = "Robbery") -> IncidentReport:
        place = db_session.execute(select(Place).where(Place.barangay == barangay)).scalars().first()
        if place is None:
            place = Place(
                barangay=barangay,
                municipality_city="Tagum City",
                province="Davao del Norte",
                region="Region XI",
            )
            db_session.add(place)
        incident_category = (
            db_session.execute(
                select(IncidentCategory).where(func.lower(IncidentCategory.name) == category.lower())
            )
            .scalars()
            .first()
        )
        if incident_category is None:
            incident_category = IncidentCategory(name=category, category_group="Property")
            db_session.add(incident_category)
        db_session.flush()

        record = IncidentReport(
            incident_id=incident_id,
            date=date(2023, 12, 1),
            time="08:00",
            day_of_week="Friday",
            case_status="Pending",
            place_id=place.id,
            category_id=incident_category.id,
        )
        db_session.add(record)
        db_session.commit()
        return record

    return _seed


def count_rows(session: Session, model: type) -> int:
    return session.execute(select(func.count()).select_from(model)).scalar_one()


@pytest.fixture()
def make_row() -> Callable[..., dict[str, object]]:
    return default_row


@pytest.fixture()
def make_csv() -> Callable[..., bytes]:
    return build_csv


@pytest.fixture()
def row_count() -> Callable[[Session, type], int]:
    return count_rows
