"""
db/session.py

Engine and session wiring for the incident store.

Sessions never expire on commit: the analysis phase commits reference
entities row by row and keeps using the objects it already loaded.
"""

from __future__ import annotations

from collections.abc import Generator
from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from db.config import get_pool_settings, resolve_database_url


def create_db_engine(database_url: str | None = None) -> Engine:
    url = database_url or resolve_database_url()
    if not url.startswith("postgresql"):
        # Confirmation needs real transactions and SAVEPOINTs.
        raise RuntimeError("The incident store only supports PostgreSQL URLs.")

    pool = get_pool_settings()
    return create_engine(
        url,
        echo=pool.echo,
        pool_pre_ping=True,
        pool_recycle=pool.pool_recycle,
        pool_size=pool.pool_size,
        max_overflow=pool.max_overflow,
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """Shared engine, created on first use."""
    return create_db_engine()


@lru_cache(maxsize=1)
def _session_factory() -> sessionmaker:
    return build_session_factory(get_engine())


def SessionLocal() -> Session:
    return _session_factory()()


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency: one session per request, always closed.
    """

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
