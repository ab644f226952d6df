"""
Pytest configuration and shared fixtures

Integration tests get a fresh PostgreSQL database per test (created from
schema.sql and dropped afterwards). When no PostgreSQL server is reachable
those tests are skipped; unit tests never touch a database.
"""

import asyncio
import os
import sys
from pathlib import Path

import asyncpg
import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from config import DatabaseConfig
from container import RepositoryContainer
from database import DatabaseConnection
from tests.test_config import TEST_DB_CONFIG, SCHEMA_FILE
from tests.test_fixtures import SampleDataFactory

_UNAVAILABLE_ERRORS = (OSError, asyncio.TimeoutError, asyncpg.PostgresError, asyncpg.InterfaceError)


def pytest_configure(config):
    """Mark that we're in test mode"""
    os.environ['APP_ENV'] = 'test'


async def _system_connection():
    return await asyncpg.connect(
        host=TEST_DB_CONFIG['host'],
        port=TEST_DB_CONFIG['port'],
        user=TEST_DB_CONFIG['user'],
        password=TEST_DB_CONFIG['password'],
        database='postgres',
        ssl='prefer',
        timeout=5,
    )


async def _create_test_database():
    """Create test database (dropping any leftover copy) and load the schema"""
    sys_conn = await _system_connection()
    try:
        await sys_conn.execute(f'DROP DATABASE IF EXISTS {TEST_DB_CONFIG["database"]}')
        await sys_conn.execute(f'CREATE DATABASE {TEST_DB_CONFIG["database"]}')
    finally:
        await sys_conn.close()

    conn = await asyncpg.connect(
        host=TEST_DB_CONFIG['host'],
        port=TEST_DB_CONFIG['port'],
        user=TEST_DB_CONFIG['user'],
        password=TEST_DB_CONFIG['password'],
        database=TEST_DB_CONFIG['database'],
        ssl='prefer',
    )
    try:
        await conn.execute(SCHEMA_FILE.read_text(encoding='utf-8'))
    finally:
        await conn.close()


async def _drop_test_database():
    """Drop the test database"""
    sys_conn = await _system_connection()
    try:
        await sys_conn.execute("""
            SELECT pg_terminate_backend(pg_stat_activity.pid)
            FROM pg_stat_activity
            WHERE pg_stat_activity.datname = $1
              AND pid <> pg_backend_pid()
        """, TEST_DB_CONFIG["database"])
        await sys_conn.execute(f'DROP DATABASE IF EXISTS {TEST_DB_CONFIG["database"]}')
    finally:
        await sys_conn.close()


@pytest.fixture(scope="function")
async def db_connection():
    """
    DatabaseConnection on a fresh test database - the same object
    repositories and relation queries use in production.
    """
    try:
        await _create_test_database()
    except _UNAVAILABLE_ERRORS as e:
        pytest.skip(f"PostgreSQL not available for integration tests: {e}")

    config = DatabaseConfig(ssl_mode='prefer', min_pool_size=1, max_pool_size=5, **TEST_DB_CONFIG)
    db = DatabaseConnection(config)
    await db.connect()

    yield db

    await db.disconnect()
    await _drop_test_database()


@pytest.fixture(scope="function")
async def repos(db_connection):
    """RepositoryContainer initialized with the test database"""
    return RepositoryContainer(db_connection)


@pytest.fixture(scope="function")
async def sample_data(repos):
    """SampleDataFactory bound to the test database"""
    return SampleDataFactory(repos)
