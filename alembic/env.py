"""
Alembic environment for the incident import schema.

Migrations only ever target PostgreSQL; the models use generic column types
but the revisions pin PostgreSQL UUIDs and functional indexes.
"""

from __future__ import annotations

import os
from logging.config import fileConfig
from typing import Any

from alembic import context
from sqlalchemy import engine_from_config, pool

from db.base import Base
from db.config import load_env_files, normalize_postgres_url, resolve_database_url
from db.models import IncidentCategory, IncidentReport, Place  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

_COMPARE_OPTIONS: dict[str, Any] = {
    "compare_type": True,
    "compare_server_default": True,
}


def _migration_url() -> str:
    """
    Pick the database URL for this migration run.

    Order: ``-x db_url=...``, ALEMBIC_DATABASE_URL, ``sqlalchemy.url`` from
    alembic.ini, then the application's own DATABASE_URL resolution.
    """

    load_env_files()

    candidates = (
        context.get_x_argument(as_dictionary=True).get("db_url"),
        os.getenv("ALEMBIC_DATABASE_URL"),
        (config.get_main_option("sqlalchemy.url") or "").strip(),
    )
    url = next((normalize_postgres_url(value) for value in candidates if value), None)
    if url is None:
        url = resolve_database_url()

    if not url.startswith("postgresql"):
        raise RuntimeError("Incident import migrations require a PostgreSQL URL.")
    return url


def run_migrations_offline() -> None:
    context.configure(
        url=_migration_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_COMPARE_OPTIONS,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = _migration_url()
    connectable = engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata, **_COMPARE_OPTIONS)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
