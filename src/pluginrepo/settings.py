"""Environment-driven settings for pluginrepo.

Each setting is read when asked for, so tests and CI jobs can flip them
with plain environment variables.
"""

import os
from pathlib import Path

# Enables the (slow) download-and-hash check of every binary
BINARY_VALIDATION_ENV_VAR = "BINARY_VALIDATION"

# Catalog location
CATALOG_PATH_ENV_VAR = "PLUGINREPO_INDEX"
DEFAULT_CATALOG_PATH = Path("repo-index.yml")

# Checksum verification tuning
WORKERS_ENV_VAR = "PLUGINREPO_WORKERS"
DEFAULT_WORKERS = 1
HTTP_TIMEOUT_ENV_VAR = "PLUGINREPO_HTTP_TIMEOUT"
DEFAULT_HTTP_TIMEOUT_SECONDS = 60.0


def is_binary_validation_enabled() -> bool:
    """Return True only when BINARY_VALIDATION is exactly "true"."""
    return os.environ.get(BINARY_VALIDATION_ENV_VAR) == "true"


def get_catalog_path() -> Path:
    """Get the catalog path.

    Resolution order:
    1. PLUGINREPO_INDEX environment variable (if set)
    2. Default: ./repo-index.yml
    """
    env_value = os.environ.get(CATALOG_PATH_ENV_VAR)
    if env_value:
        return Path(env_value).expanduser()
    return DEFAULT_CATALOG_PATH


def get_workers() -> int:
    """Get the number of parallel checksum workers (at least 1).

    Raises:
        ValueError: If PLUGINREPO_WORKERS is not a positive integer.
    """
    env_value = os.environ.get(WORKERS_ENV_VAR)
    if not env_value:
        return DEFAULT_WORKERS
    try:
        workers = int(env_value)
    except ValueError as e:
        msg = f"{WORKERS_ENV_VAR} must be an integer, got '{env_value}'"
        raise ValueError(msg) from e
    if workers < 1:
        msg = f"{WORKERS_ENV_VAR} must be at least 1, got {workers}"
        raise ValueError(msg)
    return workers


def get_http_timeout() -> float:
    """Get the per-request HTTP timeout in seconds.

    Raises:
        ValueError: If PLUGINREPO_HTTP_TIMEOUT is not a positive number.
    """
    env_value = os.environ.get(HTTP_TIMEOUT_ENV_VAR)
    if not env_value:
        return DEFAULT_HTTP_TIMEOUT_SECONDS
    try:
        timeout = float(env_value)
    except ValueError as e:
        msg = f"{HTTP_TIMEOUT_ENV_VAR} must be a number, got '{env_value}'"
        raise ValueError(msg) from e
    if timeout <= 0:
        msg = f"{HTTP_TIMEOUT_ENV_VAR} must be positive, got {timeout}"
        raise ValueError(msg)
    return timeout
