"""Global test fixtures."""

import os

import logfire

# Keep developer config files and tokens out of test runs.
# This must happen at module load time, not in a fixture
os.environ.pop("REGISTRY_CONFIG_FILE", None)
os.environ.pop("REGISTRY_LOG_FILE", None)

logfire.configure(send_to_logfire=False, console=False)
