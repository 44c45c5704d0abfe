"""
Environment-driven configuration for the incident store.

Values come from the process environment, optionally seeded from `.env`
and `.env.local` at the project root. Process variables always win.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

_PROJECT_ROOT = Path(__file__).resolve().parents[1]
_ENV_FILES = (".env", ".env.local")
_TRUE_VALUES = {"1", "true", "yes", "on"}
_CLOUD_LIKE_ENVIRONMENTS = {"prod", "production", "staging", "cloud"}
_DRIVER_PREFIXES = (
    ("postgres://", "postgresql+psycopg://"),
    ("postgresql://", "postgresql+psycopg://"),
)


def _parse_env_line(raw_line: str) -> tuple[str, str] | None:
    line = raw_line.strip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    key, value = line.split("=", 1)
    key = key.strip()
    if not key:
        return None
    return key, value.strip().strip('"').strip("'")


def load_env_files() -> None:
    """
    Seed os.environ from KEY=VALUE lines in the project env files.
    """

    for filename in _ENV_FILES:
        env_path = _PROJECT_ROOT / filename
        if not env_path.is_file():
            continue
        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            parsed = _parse_env_line(raw_line)
            if parsed is not None:
                os.environ.setdefault(*parsed)


def env_bool(name: str, default: bool) -> bool:
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in _TRUE_VALUES


def env_int(name: str, default: int) -> int:
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value.strip())
    except ValueError:
        return default


def normalize_postgres_url(url: str) -> str:
    """
    Point bare postgres URLs at the psycopg 3 driver.
    """

    for prefix, replacement in _DRIVER_PREFIXES:
        if url.startswith(prefix):
            return replacement + url[len(prefix):]
    return url


def resolve_database_url() -> str:
    """
    Resolve the incident store URL.

    DATABASE_URL wins. Otherwise CLOUD_DATABASE_URL is used when ENVIRONMENT
    is cloud-like, then LOCAL_DATABASE_URL.
    """

    load_env_files()

    environment = os.getenv("ENVIRONMENT", "local").strip().lower()
    candidates = [os.getenv("DATABASE_URL")]
    if environment in _CLOUD_LIKE_ENVIRONMENTS:
        candidates.append(os.getenv("CLOUD_DATABASE_URL"))
    candidates.append(os.getenv("LOCAL_DATABASE_URL"))

    for candidate in candidates:
        if candidate and candidate.strip():
            return normalize_postgres_url(candidate.strip())

    raise RuntimeError(
        "No incident database URL configured. Set DATABASE_URL, or configure "
        "LOCAL_DATABASE_URL / CLOUD_DATABASE_URL."
    )


@dataclass(frozen=True)
class PoolSettings:
    echo: bool = False
    pool_recycle: int = 1800
    pool_size: int = 5
    max_overflow: int = 10


@lru_cache(maxsize=1)
def get_pool_settings() -> PoolSettings:
    load_env_files()
    return PoolSettings(
        echo=env_bool("SQL_ECHO", False),
        pool_recycle=env_int("DB_POOL_RECYCLE", 1800),
        pool_size=max(1, env_int("DB_POOL_SIZE", 5)),
        max_overflow=max(0, env_int("DB_MAX_OVERFLOW", 10)),
    )
