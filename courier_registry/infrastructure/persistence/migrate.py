"""Database migration utilities.

Migrations run before the server starts. ``migrations/env.py`` drives them
through the async engine, so the same asyncpg URL serves both.
"""

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config as AlembicConfig

logger = logging.getLogger(__name__)

# Project root where alembic.ini lives
PROJECT_ROOT = Path(__file__).parent.parent.parent.parent


def get_alembic_config(database_url: str) -> AlembicConfig:
    """Create Alembic config with the given database URL."""
    config = AlembicConfig(str(PROJECT_ROOT / "alembic.ini"))
    config.set_main_option("script_location", str(PROJECT_ROOT / "migrations"))
    config.set_main_option("sqlalchemy.url", database_url)
    return config


def run_migrations(database_url: str, revision: str = "head") -> None:
    """Upgrade the database schema to ``revision``."""
    command.upgrade(get_alembic_config(database_url), revision)
    logger.info("Database migrations complete (revision=%s)", revision)
