# database/config.py
"""Database configuration for different environments."""

import os
from typing import Any, Dict

from sqlalchemy.pool import StaticPool

from config import DATABASE_FILE


class DatabaseConfig:
    """Database configuration manager."""

    @staticmethod
    def get_database_url(environment: str = 'development') -> str:
        """Get database URL for specified environment."""

        configs = {
            'development': {
                'url': os.getenv('DEV_DATABASE_URL', f'sqlite:///{DATABASE_FILE}')
            },
            'production': {
                'url': os.getenv('DATABASE_URL', f'sqlite:///{DATABASE_FILE}')
            },
            'testing': {
                'url': os.getenv('TEST_DATABASE_URL', 'sqlite://')
            }
        }

        return configs.get(environment, configs['development'])['url']

    @staticmethod
    def get_engine_kwargs(database_url: str) -> Dict[str, Any]:
        """Get SQLAlchemy engine configuration for a URL."""

        base_config = {
            'echo': os.getenv('SQL_DEBUG', 'false').lower() == 'true',
        }

        if database_url.startswith('sqlite'):
            # Timers and command handlers share the engine across threads
            base_config['connect_args'] = {
                'check_same_thread': False,
                'timeout': 20
            }
            if database_url in ('sqlite://', 'sqlite:///:memory:'):
                # One shared connection, otherwise every checkout sees an empty database
                base_config['poolclass'] = StaticPool
        else:
            base_config['pool_pre_ping'] = True

        return base_config

    @staticmethod
    def ensure_sqlite_directory(database_url: str) -> None:
        """Create the parent directory of a file-backed SQLite database."""
        prefix = 'sqlite:///'
        if not database_url.startswith(prefix) or database_url.endswith(':memory:'):
            return
        path = database_url[len(prefix):]
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
