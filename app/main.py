from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError

from app.api.routers import incident_import_router
from app.config import startup_errors
from db.base import Base
from db.session import get_engine

logger = logging.getLogger(__name__)


def _validate_env() -> None:
    """
    Fail fast, listing every configuration problem at once.
    """

    errors = startup_errors()
    if errors:
        raise RuntimeError(
            "Startup validation failed. Missing or invalid environment variables:\n"
            + "\n".join(f"  - {error}" for error in errors)
        )


def _configure_logging() -> None:
    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _check_store() -> None:
    """
    Verify the database answers and carries every import table.

    Does NOT auto-migrate; run ``alembic upgrade head`` first.
    """

    engine = get_engine()
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
            present = set(inspect(connection).get_table_names())
    except SQLAlchemyError as exc:
        raise RuntimeError("Incident store unavailable.") from exc
    logger.info("Database connectivity confirmed")

    missing = sorted(set(Base.metadata.tables) - present)
    if missing:
        logger.critical(
            "Schema mismatch: import tables absent from the database: %s. "
            "Run 'alembic upgrade head' and restart.",
            ", ".join(missing),
        )
        raise RuntimeError(f"Schema mismatch: missing tables {', '.join(missing)}.")
    logger.info("Database schema validated")


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    _check_store()
    yield


def create_app() -> FastAPI:
    """
    Create and configure the incident import API.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="Incident Import API",
        version="1.0.0",
        lifespan=_lifespan,
    )
    application.include_router(incident_import_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
