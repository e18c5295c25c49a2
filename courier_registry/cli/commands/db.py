"""Database schema commands."""

import sys

from courier_registry.cli.console import get_console
from courier_registry.config import RegistryConfig, configure_logging
from courier_registry.infrastructure.persistence.migrate import run_migrations


def migrate(revision: str = "head") -> None:
    """Apply migrations up to ``revision``.

    Args:
        revision: Alembic revision to upgrade to.
    """
    console = get_console()
    config = RegistryConfig()
    configure_logging(config.logging)

    try:
        run_migrations(config.database.url, revision)
    except Exception as e:
        console.error(f"Migration failed: {e}", hint="Is PostGIS installed on the target database?")
        sys.exit(1)
    console.success(f"Database at revision {revision}")
