"""Configuration inspection commands."""

import os

import cyclopts
from sqlalchemy.engine import make_url

from courier_registry.cli.console import get_console
from courier_registry.config import RegistryConfig

app = cyclopts.App(name="config", help="Inspect the effective configuration")


@app.command
def show() -> None:
    """Print the configuration the server would start with."""
    config = RegistryConfig()
    config_file = os.environ.get("REGISTRY_CONFIG_FILE") or "(none)"

    get_console().settings(
        [
            ("config file", config_file),
            ("server", f"{config.server.host}:{config.server.port}"),
            # Password stays masked
            ("database", make_url(config.database.url).render_as_string(hide_password=True)),
            ("log level", config.logging.level),
            ("log file", config.logging.file or "(stderr)"),
            ("metadata path", config.verifier.metadata_path),
            ("probe timeout", f"{config.verifier.timeout_seconds}s"),
            (
                "default point",
                f"{config.discovery.default_latitude}, {config.discovery.default_longitude}",
            ),
            ("refresh drain", f"{config.refresh.shutdown_timeout}s"),
        ],
        title=config.server.name,
    )
