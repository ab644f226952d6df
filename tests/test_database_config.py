"""
Tests for environment-driven database configuration
"""

import pytest

from config import DatabaseConfig, get_environment_mode, is_production_mode, is_test_mode


@pytest.fixture
def clean_env(monkeypatch):
    for name in ('APP_ENV', 'DB_HOST', 'DB_PORT', 'DB_NAME', 'DB_USER', 'DB_PASSWORD',
                 'DB_SSL_MODE', 'DB_MIN_POOL_SIZE', 'DB_MAX_POOL_SIZE', 'DB_COMMAND_TIMEOUT'):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestDatabaseConfig:

    def test_defaults_from_environment(self, clean_env):
        config = DatabaseConfig.from_environment('development')

        assert config.host == 'localhost'
        assert config.port == 5432
        assert config.database == 'identity_db'
        assert config.ssl_mode == 'prefer'

    def test_reads_db_variables(self, clean_env):
        clean_env.setenv('DB_HOST', 'db.internal')
        clean_env.setenv('DB_PORT', '6543')
        clean_env.setenv('DB_NAME', 'identity_relations_test')
        clean_env.setenv('DB_MAX_POOL_SIZE', '20')
        clean_env.setenv('DB_COMMAND_TIMEOUT', '5')

        config = DatabaseConfig.from_environment('test')

        assert config.host == 'db.internal'
        assert config.port == 6543
        assert config.max_pool_size == 20
        assert config.command_timeout == 5

    def test_production_requires_ssl_by_default(self, clean_env):
        config = DatabaseConfig.from_environment('production')
        assert config.ssl_mode == 'require'
        assert config.ssl_setting is True

    def test_test_mode_refuses_non_test_database(self, clean_env):
        clean_env.setenv('DB_NAME', 'identity_db')
        with pytest.raises(ValueError, match="SAFETY ERROR"):
            DatabaseConfig.from_environment('test')

    def test_test_mode_refuses_production_database(self, clean_env):
        clean_env.setenv('DB_NAME', 'identity_prod_test')
        with pytest.raises(ValueError, match="production"):
            DatabaseConfig.from_environment('test')

    def test_dsn_escapes_password(self):
        config = DatabaseConfig(host='h', port=5432, database='d', user='u', password='p@ss word')
        assert config.asyncpg_dsn == 'postgresql://u:p%40ss+word@h:5432/d'

    @pytest.mark.parametrize("ssl_mode, expected", [
        ('require', True),
        ('disable', False),
        ('prefer', 'prefer'),
    ])
    def test_ssl_setting(self, ssl_mode, expected):
        config = DatabaseConfig.for_testing()
        config.ssl_mode = ssl_mode
        assert config.ssl_setting == expected


class TestEnvironmentMode:

    def test_unknown_mode_falls_back_to_development(self, clean_env):
        clean_env.setenv('APP_ENV', 'staging')
        assert get_environment_mode() == 'development'

    def test_mode_helpers(self, clean_env):
        clean_env.setenv('APP_ENV', 'TEST')
        assert is_test_mode() is True
        assert is_production_mode() is False
