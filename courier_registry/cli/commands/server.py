"""Server commands."""

import logfire
import uvicorn

from courier_registry.cli.console import get_console
from courier_registry.config import RegistryConfig


def serve(
    host: str | None = None,
    port: int | None = None,
    reload: bool = False,
) -> None:
    """Start the registry server in the foreground.

    Args:
        host: Host to bind to. Defaults to ``server.host`` from config.
        port: Port to listen on. Defaults to ``server.port`` from config.
        reload: Restart on source changes (development only).
    """
    config = RegistryConfig()
    host = host or config.server.host
    port = port or config.server.port

    # Logfire must be configured before the app is created
    logfire.configure(
        service_name="courier-registry",
        service_version=config.server.version,
        send_to_logfire="if-token-present",
    )

    get_console().success(f"Serving {config.server.name} on http://{host}:{port}")
    uvicorn.run(
        "courier_registry.application.api.rest.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_config=None,
    )
