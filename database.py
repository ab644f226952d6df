"""
Database connection management
Async PostgreSQL operations using asyncpg
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, List, Optional

import asyncpg

from config import DatabaseConfig

logger = logging.getLogger(__name__)


class DatabaseConnection:
    """
    Owns the asyncpg pool and exposes the statement methods the
    repositories and relation queries call.
    """

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self.pool: Optional[asyncpg.Pool] = None

    async def connect(self):
        """Initialize connection pool"""
        if self.pool is not None:
            logger.warning("Connection pool already initialized")
            return

        try:
            self.pool = await asyncpg.create_pool(
                host=self.config.host,
                port=self.config.port,
                database=self.config.database,
                user=self.config.user,
                password=self.config.password,
                min_size=self.config.min_pool_size,
                max_size=self.config.max_pool_size,
                command_timeout=self.config.command_timeout,
                ssl=self.config.ssl_setting,
            )
            logger.info(f"✅ Connected to PostgreSQL at {self.config.host}:{self.config.port}/{self.config.database}")
        except Exception as e:
            logger.error(f"❌ Failed to connect to database: {e}")
            raise

    async def disconnect(self):
        """Close connection pool"""
        if self.pool is not None:
            await self.pool.close()
            self.pool = None
            logger.info("Database connection pool closed")

    @asynccontextmanager
    async def acquire(self):
        """
        Acquire a connection from the pool.

        Usage:
            async with db.acquire() as conn:
                rows = await conn.fetch("SELECT * FROM users")
        """
        if self.pool is None:
            raise RuntimeError("Database not connected. Call connect() first.")

        async with self.pool.acquire() as connection:
            yield connection

    async def execute(self, query: str, *args, timeout: Optional[float] = None) -> str:
        """
        Execute a statement without returning rows

        Returns:
            Status string (e.g., "INSERT 0 1")
        """
        async with self.acquire() as conn:
            return await conn.execute(query, *args, timeout=timeout)

    async def fetch(self, query: str, *args, timeout: Optional[float] = None) -> List[asyncpg.Record]:
        """Fetch multiple rows"""
        async with self.acquire() as conn:
            return await conn.fetch(query, *args, timeout=timeout)

    async def fetchrow(self, query: str, *args, timeout: Optional[float] = None) -> Optional[asyncpg.Record]:
        """Fetch a single row, or None"""
        async with self.acquire() as conn:
            return await conn.fetchrow(query, *args, timeout=timeout)

    async def fetchval(self, query: str, *args, column: int = 0, timeout: Optional[float] = None) -> Any:
        """Fetch a single value"""
        async with self.acquire() as conn:
            return await conn.fetchval(query, *args, column=column, timeout=timeout)

    @asynccontextmanager
    async def transaction(self):
        """
        Run statements inside one transaction.

        Yields the underlying asyncpg connection. Hand it to RelationQueries
        (or any repository) so several calls commit or roll back together:

            async with db.transaction() as conn:
                await RelationQueries(conn, "organization_user_relations", Organizations, Users).insert(...)
                await RelationQueries(conn, "organization_role_user_relations", ...).delete(...)
        """
        async with self.acquire() as conn:
            async with conn.transaction():
                yield conn

    async def check_connection(self) -> bool:
        """
        Check if database connection is healthy

        Returns:
            True if connection is healthy
        """
        try:
            result = await self.fetchval("SELECT 1")
            return result == 1
        except (asyncpg.PostgresError, OSError, RuntimeError) as e:
            logger.error(f"Connection check failed: {e}")
            return False

    async def get_all_tables(self) -> List[str]:
        """List all tables in the public schema"""
        query = """
            SELECT table_name
            FROM information_schema.tables
            WHERE table_schema = 'public'
            AND table_type = 'BASE TABLE'
            ORDER BY table_name
        """
        result = await self.fetch(query)
        return [row['table_name'] for row in result]


class DatabaseMigration:
    """
    Loads the bootstrap schema
    """

    def __init__(self, db: DatabaseConnection):
        self.db = db

    async def apply_schema(self, schema_file: str):
        """
        Apply database schema from SQL file in a single transaction

        Args:
            schema_file: Path to schema.sql file
        """
        logger.info(f"Applying schema from {schema_file}...")

        with open(schema_file, 'r', encoding='utf-8') as f:
            schema_sql = f.read()

        try:
            async with self.db.transaction() as conn:
                await conn.execute(schema_sql)
            logger.info("✅ Schema applied successfully")
        except Exception as e:
            logger.error(f"❌ Failed to apply schema: {e}")
            raise

    async def check_schema_exists(self) -> bool:
        """Check if database schema is initialized"""
        tables = await self.db.get_all_tables()
        return len(tables) > 0

    async def initialize_database(self, schema_file: str):
        """
        Initialize database with schema unless tables already exist

        Args:
            schema_file: Path to schema.sql file
        """
        if await self.check_schema_exists():
            logger.warning("⚠️  Database schema already exists. Skipping initialization.")
            return

        logger.info("Initializing database...")
        await self.apply_schema(schema_file)
        logger.info("✅ Database initialized successfully")


# Singleton instance
_db_instance: Optional[DatabaseConnection] = None


def get_database(config: Optional[DatabaseConfig] = None) -> DatabaseConnection:
    """
    Get or create database connection instance

    Args:
        config: Database configuration (uses environment if not provided)
    """
    global _db_instance

    if _db_instance is None:
        if config is None:
            config = DatabaseConfig.from_environment()
        _db_instance = DatabaseConnection(config)

    return _db_instance


async def init_database(config: Optional[DatabaseConfig] = None) -> DatabaseConnection:
    """Create (if needed) and connect the shared database instance"""
    db = get_database(config)
    await db.connect()
    return db


async def close_database():
    """Close database connection"""
    global _db_instance

    if _db_instance is not None:
        await _db_instance.disconnect()
        _db_instance = None
