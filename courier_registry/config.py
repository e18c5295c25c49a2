import logging
import os
import sys
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource


CONFIG_FILE_ENV = "REGISTRY_CONFIG_FILE"
LOG_FILE_ENV = "REGISTRY_LOG_FILE"

# Loggers that are chatty at INFO and only interesting when something breaks
QUIET_LOGGERS = ("httpx", "httpcore", "asyncio", "sqlalchemy.engine")


class _Section(BaseModel):
    model_config = ConfigDict(frozen=True)


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Settings read from the YAML file named by ``REGISTRY_CONFIG_FILE``.

    A missing variable or file contributes nothing; a file that is not a
    mapping at the top level is rejected.
    """

    def __init__(self, settings_cls: type[BaseSettings]) -> None:
        super().__init__(settings_cls)
        self._data = self._read()

    @staticmethod
    def _read() -> dict[str, Any]:
        name = os.environ.get(CONFIG_FILE_ENV)
        if not name or not Path(name).is_file():
            return {}
        data = yaml.safe_load(Path(name).read_text()) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{name}: expected a mapping of config sections")
        return data

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        return dict(self._data)


class Server(_Section):
    """Server configuration (nested in RegistryConfig, uses env_nested_delimiter)."""

    name: str = "Courier Instance Registry"
    version: str = "0.1.0"
    description: str = "Discovery and verification registry for courier instances"
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: tuple[str, ...] = ("*",)


class DatabaseConfig(_Section):
    """Database configuration. PostGIS is required for region storage and ranking."""

    url: str = "postgresql+asyncpg://localhost:5432/registry"
    echo: bool = False
    pool_size: int = 5
    max_overflow: int = 10


class LoggingConfig(_Section):
    """Logging configuration (nested in RegistryConfig, uses env_nested_delimiter)."""

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    @property
    def file(self) -> str | None:
        """Log file path, taken from the environment only."""
        return os.environ.get(LOG_FILE_ENV)


class VerifierConfig(_Section):
    """Metadata probe settings."""

    metadata_path: str = "/metadata"
    timeout_seconds: float = 5.0


class DiscoveryConfig(_Section):
    """Reference point used when a client does not send coordinates (Princeton, NJ)."""

    default_latitude: float = 40.344
    default_longitude: float = -74.6514


class RefreshConfig(_Section):
    """Detached refresh worker settings."""

    shutdown_timeout: float = 10.0  # Seconds to let in-flight refreshes finish on shutdown


class RegistryConfig(BaseSettings):
    """Process-wide configuration, built once at startup and injected everywhere."""

    server: Server = Server()
    database: DatabaseConfig = DatabaseConfig()
    logging: LoggingConfig = LoggingConfig()
    verifier: VerifierConfig = VerifierConfig()
    discovery: DiscoveryConfig = DiscoveryConfig()
    refresh: RefreshConfig = RefreshConfig()

    model_config = {
        "env_prefix": "REGISTRY_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_nested_delimiter": "__",  # Allows REGISTRY_DATABASE__URL override
        "frozen": True,
        "extra": "ignore",
    }

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to include YAML config.

        Priority (highest to lowest):
        1. init_settings - values passed to RegistryConfig()
        2. env_settings - environment variables
        3. dotenv_settings - .env file
        4. yaml_settings - REGISTRY_CONFIG_FILE yaml
        5. file_secret_settings - secrets from files
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def configure_logging(config: LoggingConfig) -> None:
    """Install a single root handler (stderr, or the file in ``REGISTRY_LOG_FILE``).

    Called once from ``create_app`` before anything logs; calling it again
    replaces the handler instead of stacking a second one.
    """
    if config.file:
        log_path = Path(config.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_path)
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(config.format, datefmt=config.date_format))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(config.level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(
        "Logging at %s to %s", config.level, config.file or "stderr"
    )
