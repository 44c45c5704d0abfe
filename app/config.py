"""
app/config.py

Application configuration: startup checks and import settings.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import env_bool, env_int, load_env_files

_ALLOWED_APP_MODES = {"cloud"}
_DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    load_env_files()


def startup_errors() -> list[str]:
    """
    Collect every missing or invalid startup variable.

    APP_MODE must be 'cloud' and a database URL must be configured; local
    SQLite fallbacks are not accepted.
    """

    _load_env_once()
    errors: list[str] = []

    app_mode = os.getenv("APP_MODE", "").strip().lower()
    if not app_mode:
        errors.append("APP_MODE is not set. It must be explicitly set to 'cloud'.")
    elif app_mode not in _ALLOWED_APP_MODES:
        errors.append(
            f"APP_MODE='{app_mode}' is not valid. Allowed values: {sorted(_ALLOWED_APP_MODES)}."
        )

    if not any(os.getenv(name, "").strip() for name in ("DATABASE_URL", "CLOUD_DATABASE_URL")):
        errors.append(
            "No database URL configured. Set DATABASE_URL or CLOUD_DATABASE_URL. "
            "SQLite and local database fallbacks are not permitted."
        )
    return errors


@dataclass(frozen=True)
class ImportSettings:
    """
    Runtime settings for the incident report bulk import.

    ``defer_reference_creation`` keeps the analysis phase free of writes:
    unknown places and categories are proposed in the report and only
    created by the confirmation transaction.
    """

    max_validation_errors: int = 500
    log_validation_errors: bool = True
    max_upload_bytes: int = _DEFAULT_MAX_UPLOAD_BYTES
    defer_reference_creation: bool = False


@lru_cache(maxsize=1)
def get_import_settings() -> ImportSettings:
    """
    Return cached import settings from environment variables.
    """

    _load_env_once()
    return ImportSettings(
        max_validation_errors=max(1, env_int("IMPORT_MAX_VALIDATION_ERRORS", 500)),
        log_validation_errors=env_bool("IMPORT_LOG_VALIDATION_ERRORS", True),
        max_upload_bytes=max(1024, env_int("IMPORT_MAX_UPLOAD_BYTES", _DEFAULT_MAX_UPLOAD_BYTES)),
        defer_reference_creation=env_bool("IMPORT_DEFER_REFERENCE_CREATION", False),
    )
