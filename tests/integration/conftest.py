import os
from collections.abc import Generator
from pathlib import Path
from typing import Any

import psycopg
import pytest

from app.config.settings import Settings
from app.database.connection import close_pool, get_connection, init_pool
from app.database.repositories.saved_records_repository import SavedRecordsRepository

_SCHEMA = Path(__file__).resolve().parents[2] / "sql" / "saved_records.sql"


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "docscan_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            conn.execute(_SCHEMA.read_text())
            conn.commit()
    except Exception as e:
        close_pool()
        pytest.skip(
            f"PostgreSQL test DB not available: {e}. "
            "Set DB_* env to point at a disposable database"
        )
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def clean_records(integration_pool: None) -> Generator[None, None, None]:
    """Start and finish each test with an empty saved_records table."""
    with get_connection() as conn:
        conn.execute("TRUNCATE saved_records RESTART IDENTITY")
        conn.commit()
    yield
    with get_connection() as conn:
        conn.execute("TRUNCATE saved_records RESTART IDENTITY")
        conn.commit()


@pytest.fixture
def repo(clean_records: None) -> SavedRecordsRepository:
    return SavedRecordsRepository()
