"""Error types and formatting utilities for pluginrepo.

Catalog-level errors (``ParseError``, ``SortError``) describe the document as
a whole. Everything else is a ``CheckFailure`` tied to one plugin and,
where relevant, one of its binaries.
"""

from dataclasses import dataclass

import yaml
from pydantic import ValidationError

from pluginrepo import cli_logger, exit_codes


class CatalogError(Exception):
    """Base class for every error raised while validating a catalog."""

    rule = "catalog"


class ParseError(CatalogError):
    """Raised when the catalog bytes do not match the catalog schema."""

    rule = "parse"


class SortError(CatalogError):
    """Raised when the catalog cannot be sorted or is not in canonical order."""

    rule = "sorted"


class CheckFailure(CatalogError):
    """A violated rule on a single plugin or binary."""

    rule = "check"

    def __init__(
        self,
        message: str,
        *,
        plugin_name: str,
        platform: str | None = None,
        url: str | None = None,
    ) -> None:
        """Initialize with the message and the entity that failed."""
        self.plugin_name = plugin_name
        self.platform = platform
        self.url = url
        super().__init__(message)


class VersionError(CheckFailure):
    """Raised when a plugin version is not a valid semantic version."""

    rule = "semver"


class InsecureTransportError(CheckFailure):
    """Raised when a binary URL is not served over a secure transport."""

    rule = "https"


class UnknownPlatformError(CheckFailure):
    """Raised when a binary platform is not a supported platform."""

    rule = "platform"


class ChecksumFormatError(CheckFailure):
    """Raised when a declared checksum is not 40 lowercase hex characters."""

    rule = "checksum-format"


class DuplicatePluginError(CheckFailure):
    """Raised when two plugins share the same name."""

    rule = "unique-name"


class NetworkError(CheckFailure):
    """Raised when a binary download fails at the transport level."""

    rule = "network"


class DownloadError(CheckFailure):
    """Raised when a binary download answers with a non-success status."""

    rule = "download"

    def __init__(
        self,
        message: str,
        *,
        status: int,
        plugin_name: str,
        platform: str | None = None,
        url: str | None = None,
    ) -> None:
        """Initialize with the HTTP status that was received."""
        self.status = status
        super().__init__(message, plugin_name=plugin_name, platform=platform, url=url)


class ChecksumMismatchError(CheckFailure):
    """Raised when downloaded content does not hash to the declared checksum."""

    rule = "checksum"

    def __init__(
        self,
        message: str,
        *,
        actual: str,
        plugin_name: str,
        platform: str | None = None,
        url: str | None = None,
    ) -> None:
        """Initialize with the checksum that was actually computed."""
        self.actual = actual
        super().__init__(message, plugin_name=plugin_name, platform=platform, url=url)


@dataclass(frozen=True)
class DuplicatePlatformWarning:
    """A plugin lists the same platform more than once."""

    plugin_name: str
    platform: str

    def __str__(self) -> str:
        return f"Plugin '{self.plugin_name}' lists platform '{self.platform}' more than once"


def format_validation_errors(error: ValidationError) -> str:
    """Format Pydantic ValidationError into clean, user-friendly message.

    Removes Pydantic-specific URLs and technical jargon, producing a message
    suitable for CLI output.

    Args:
        error: The Pydantic ValidationError to format.

    Returns:
        A clean, human-readable error message.
    """
    messages = []

    for err in error.errors():
        # e.g. "plugins.3.binaries.0.url"
        loc = ".".join(str(part) for part in err["loc"])
        error_type = err["type"]

        if error_type == "missing":
            messages.append(f"'{loc}': field is required")
        elif error_type == "string_type":
            messages.append(f"'{loc}': expected string")
        elif error_type == "list_type":
            messages.append(f"'{loc}': expected list")
        elif error_type == "too_short":
            messages.append(f"'{loc}': must not be empty")
        elif error_type in ("dict_type", "model_type"):
            messages.append(f"'{loc}': expected mapping")
        elif error_type == "value_error":
            messages.append(f"'{loc}': {err['ctx']['error']}")
        else:
            messages.append(f"'{loc}': {err['msg'].lower()}")

    return "; ".join(messages)


def handle_cli_error(error: Exception) -> int:
    """Handle an unhandled exception at the CLI boundary.

    Formats the error into a clean message and returns an exit code,
    keeping raw tracebacks away from the user.

    Args:
        error: The exception to handle.

    Returns:
        An exit code from exit_codes.
    """
    if isinstance(error, ParseError):
        cli_logger.error(f"Invalid catalog: {error}")
        return exit_codes.CATALOG_INVALID

    if isinstance(error, FileNotFoundError):
        cli_logger.error(f"Catalog not found: {error.filename}")
        return exit_codes.CATALOG_NOT_FOUND

    if isinstance(error, OSError):
        if error.filename:
            cli_logger.error(f"{error.strerror}: {error.filename}")
        else:
            cli_logger.error(str(error))
        return exit_codes.GENERAL_ERROR

    if isinstance(error, yaml.YAMLError):
        cli_logger.error(f"Invalid YAML: {error}")
        return exit_codes.CATALOG_INVALID

    cli_logger.error(f"Unexpected error: {error}")
    return exit_codes.GENERAL_ERROR
