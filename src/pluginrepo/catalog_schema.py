"""Catalog schema definitions using Pydantic.

This module defines the schema for the ``repo-index.yml`` catalog: a root
mapping with a ``plugins`` list, each plugin carrying one or more
downloadable binaries.
"""

from datetime import date
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from yaml.constructor import SafeConstructor

from pluginrepo.errors import ParseError, format_validation_errors

# Supported OS/architecture tags for binaries. Never mutated at runtime.
VALID_PLATFORMS: tuple[str, ...] = (
    "osx",
    "osx-arm64",
    "linux32",
    "linux64",
    "linux-arm32",
    "linux-arm64",
    "win32",
    "win64",
)

TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


def _without_timestamps(resolvers: dict[str, list[tuple[str, Any]]]) -> dict[str, list[tuple[str, Any]]]:
    return {
        first: [(tag, regexp) for tag, regexp in entries if tag != TIMESTAMP_TAG]
        for first, entries in resolvers.items()
    }


class CatalogLoader(yaml.SafeLoader):
    """SafeLoader that reads timestamps as plain strings.

    ``created: 2015-01-08`` stays the string the maintainer wrote, so the
    canonical form never rewrites it.
    """

    yaml_implicit_resolvers = _without_timestamps(yaml.SafeLoader.yaml_implicit_resolvers)


class CatalogDumper(yaml.SafeDumper):
    """SafeDumper that writes timestamp-looking strings unquoted."""

    yaml_implicit_resolvers = _without_timestamps(yaml.SafeDumper.yaml_implicit_resolvers)


class AuthorSchema(BaseModel):
    """A plugin author."""

    name: str = Field(description="Author name")
    homepage: str | None = Field(default=None, description="Author website")
    contact: str | None = Field(default=None, description="Email or other contact")


class BinarySchema(BaseModel):
    """A downloadable build of a plugin for one platform."""

    platform: str = Field(description="OS/architecture tag, one of VALID_PLATFORMS")
    url: str = Field(description="Download URL")
    checksum: str = Field(description="Lowercase hex SHA-1 of the downloaded file")


class PluginSchema(BaseModel):
    """A plugin entry in the catalog."""

    name: str = Field(min_length=1, description="Plugin name, unique within the catalog")
    description: str | None = Field(default=None, description="One-line description")
    version: str = Field(description="Semantic version of the published binaries")
    created: str | None = Field(default=None, description="First publication time, as written")
    updated: str | None = Field(default=None, description="Last update time, as written")
    company: str | None = Field(default=None, description="Publishing company")
    authors: list[AuthorSchema] | None = Field(default=None, description="Plugin authors")
    homepage: str | None = Field(default=None, description="Project homepage")
    binaries: list[BinarySchema] = Field(min_length=1, description="Published binaries")

    @field_validator("version", mode="before")
    @classmethod
    def version_as_string(cls, v: Any) -> Any:
        """Keep unquoted numeric YAML versions (e.g. ``1.0``) as strings.

        They are reported by the semver check instead of aborting the parse.
        """
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("created", "updated", mode="before")
    @classmethod
    def timestamp_as_written(cls, v: Any) -> Any:
        """Accept YAML timestamps, keeping their original spelling."""
        if isinstance(v, date):
            return v.isoformat()
        if isinstance(v, str) and not SafeConstructor.timestamp_regexp.match(v):
            msg = f"'{v}' is not a timestamp"
            raise ValueError(msg)
        return v


class CatalogSchema(BaseModel):
    """Root schema for the catalog file."""

    plugins: list[PluginSchema] = Field(
        default_factory=list,
        description="Plugins in file order",
    )


def read_catalog(path: Path) -> bytes:
    """Read raw catalog bytes from disk.

    Raises:
        FileNotFoundError: If the catalog does not exist.
    """
    if not path.exists():
        msg = f"Catalog not found at {path}"
        raise FileNotFoundError(2, msg, str(path))
    return path.read_bytes()


def parse_catalog(raw: bytes) -> CatalogSchema:
    """Parse raw catalog bytes into a CatalogSchema.

    Plugin and binary order is preserved exactly as found in the file.
    An empty document is an empty catalog.

    Args:
        raw: The catalog file contents.

    Returns:
        Validated CatalogSchema instance.

    Raises:
        ParseError: If the bytes are not YAML or do not match the schema.
    """
    try:
        data = yaml.load(raw, Loader=CatalogLoader)  # noqa: S506
    except yaml.YAMLError as e:
        msg = f"Invalid YAML: {e}"
        raise ParseError(msg) from e

    if data is None:
        return CatalogSchema()

    if not isinstance(data, dict):
        msg = f"Catalog root must be a mapping, got {type(data).__name__}"
        raise ParseError(msg)

    try:
        return CatalogSchema.model_validate(data)
    except ValidationError as e:
        raise ParseError(format_validation_errors(e)) from e
