"""
Database configuration for PostgreSQL
Environment-aware configuration based on APP_ENV
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Optional
from urllib.parse import quote_plus

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Environment modes
EnvironmentMode = Literal["development", "test", "production"]

_ENVIRONMENT_MODES = ("development", "test", "production")


def load_app_environment(mode: Optional[str] = None) -> str:
    """
    Load environment variables from the matching .env file.

    Priority:
    1. Explicit 'mode' argument
    2. APP_ENV environment variable
    3. Default to 'development'

    Loads .env.{mode} if it exists, falling back to .env
    """
    if not mode:
        mode = os.getenv('APP_ENV', 'development')

    base_path = Path(__file__).parent
    env_file = base_path / f'.env.{mode}'
    if not env_file.exists():
        env_file = base_path / '.env'

    if env_file.exists():
        logger.debug(f"Loading config from {env_file}")
        # override=False keeps variables already set by the host process
        load_dotenv(env_file, override=False)
    else:
        logger.debug(f"No config file found for mode '{mode}', using process environment")

    return mode


@dataclass
class DatabaseConfig:
    """PostgreSQL database configuration"""

    host: str
    port: int
    database: str
    user: str
    password: str

    # Pool settings handed straight to asyncpg.create_pool
    min_pool_size: int = 2
    max_pool_size: int = 10
    command_timeout: int = 60  # seconds

    ssl_mode: str = "prefer"

    @property
    def asyncpg_dsn(self) -> str:
        """Get asyncpg DSN format"""
        return (
            f"postgresql://{self.user}:{quote_plus(self.password)}"
            f"@{self.host}:{self.port}/{self.database}"
        )

    @property
    def ssl_setting(self):
        """asyncpg accepts True (require), False (disable) or 'prefer'"""
        if self.ssl_mode == 'require':
            return True
        if self.ssl_mode == 'disable':
            return False
        return 'prefer'

    @classmethod
    def from_environment(cls, mode: Optional[EnvironmentMode] = None) -> 'DatabaseConfig':
        """
        Load configuration from environment variables

        Environment variables:
        - APP_ENV: Environment mode (development, test, production)
        - DB_HOST: Database host (default: localhost)
        - DB_PORT: Database port (default: 5432)
        - DB_NAME: Database name (default: identity_db)
        - DB_USER: Database user (default: postgres)
        - DB_PASSWORD: Database password
        - DB_SSL_MODE: SSL mode (default: prefer, require in production)
        - DB_MIN_POOL_SIZE / DB_MAX_POOL_SIZE: Pool bounds
        - DB_COMMAND_TIMEOUT: Per-statement timeout in seconds
        """
        mode = load_app_environment(mode)

        config = cls(
            host=os.getenv('DB_HOST', 'localhost'),
            port=int(os.getenv('DB_PORT', '5432')),
            database=os.getenv('DB_NAME', 'identity_db'),
            user=os.getenv('DB_USER', 'postgres'),
            password=os.getenv('DB_PASSWORD', ''),
            ssl_mode=os.getenv('DB_SSL_MODE', 'require' if mode == 'production' else 'prefer'),
            min_pool_size=int(os.getenv('DB_MIN_POOL_SIZE', '2')),
            max_pool_size=int(os.getenv('DB_MAX_POOL_SIZE', '10')),
            command_timeout=int(os.getenv('DB_COMMAND_TIMEOUT', '60')),
        )

        config.validate_safety(mode)
        return config

    def validate_safety(self, mode: str):
        """Ensure configuration is safe for the requested mode"""
        if mode == 'test':
            if 'test' not in self.database:
                raise ValueError(
                    f"SAFETY ERROR: Test mode requested but database is '{self.database}'. "
                    "Test database must contain 'test'."
                )
            if 'prod' in self.database:
                raise ValueError(
                    f"SAFETY ERROR: Test mode requested but database '{self.database}' appears to be production."
                )

        if mode == 'production' and self.ssl_mode != 'require':
            logger.warning(f"⚠️  Production database connection without required SSL (ssl_mode={self.ssl_mode})")

    @classmethod
    def for_testing(cls) -> 'DatabaseConfig':
        """Configuration for test PostgreSQL database"""
        return cls(
            host='localhost',
            port=5432,
            database='identity_relations_test',
            user='postgres',
            password='postgres',
        )


def get_environment_mode() -> EnvironmentMode:
    """Get current environment mode from APP_ENV variable"""
    mode = os.getenv('APP_ENV', 'development').lower()
    if mode not in _ENVIRONMENT_MODES:
        mode = 'development'
    return mode  # type: ignore


def is_test_mode() -> bool:
    """Check if running in test mode"""
    return get_environment_mode() == 'test'


def is_production_mode() -> bool:
    """Check if running in production mode"""
    return get_environment_mode() == 'production'
