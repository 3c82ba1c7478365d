"""Structural checks on catalog entries.

Each ``check_*`` function inspects one plugin (or one of its binaries) and
raises a ``CheckFailure`` subclass on violation. None of them touch the
network or the catalog file.
"""

import re
from collections import Counter
from urllib.parse import urlsplit

import semver

from pluginrepo.catalog_schema import VALID_PLATFORMS, BinarySchema, CatalogSchema, PluginSchema
from pluginrepo.errors import (
    ChecksumFormatError,
    DuplicatePlatformWarning,
    DuplicatePluginError,
    InsecureTransportError,
    UnknownPlatformError,
    VersionError,
)

# Loose secure-download pattern, matched anywhere via re.search. Unlike the
# strict scheme check it accepts "httpsx://" and any URL containing "ftps".
SECURE_DOWNLOAD_PATTERN = re.compile(r"^https|ftps")

CHECKSUM_PATTERN = re.compile(r"^[0-9a-f]{40}$")

RELEASES_HELP_URL = "https://help.github.com/articles/creating-releases"


def check_version(plugin: PluginSchema) -> None:
    """Require the plugin version to be a valid semantic version.

    Both the parser and the library's own validity predicate must accept it.
    """
    msg = f"Plugin '{plugin.name}' has a non-semver version '{plugin.version}'"
    try:
        semver.Version.parse(plugin.version)
    except (ValueError, TypeError) as e:
        raise VersionError(msg, plugin_name=plugin.name) from e

    if not semver.Version.is_valid(plugin.version):
        raise VersionError(msg, plugin_name=plugin.name)


def check_transport_scheme(plugin: PluginSchema, binary: BinarySchema) -> None:
    """Require the binary URL scheme to be exactly ``https``."""
    context = {"plugin_name": plugin.name, "platform": binary.platform, "url": binary.url}
    try:
        scheme = urlsplit(binary.url).scheme
    except ValueError as e:
        msg = f"Plugin '{plugin.name}' has an unparseable URL '{binary.url}' for platform '{binary.platform}'"
        raise InsecureTransportError(msg, **context) from e

    if scheme != "https":
        msg = (
            f"Plugin '{plugin.name}' links to '{binary.url}' for platform "
            f"'{binary.platform}' with scheme '{scheme}', expected 'https'"
        )
        raise InsecureTransportError(msg, **context)


def check_secure_download_prefix(plugin: PluginSchema, binary: BinarySchema) -> None:
    """Require the binary URL to look like an https/ftps link."""
    if SECURE_DOWNLOAD_PATTERN.search(binary.url) is None:
        msg = (
            f"Plugin '{plugin.name}' links to a binary URL '{binary.url}' that cannot be "
            f"downloaded over SSL (begins with https/ftps). Please provide a secure download "
            f"link to your binaries, for example with GitHub Releases: {RELEASES_HELP_URL}"
        )
        raise InsecureTransportError(
            msg, plugin_name=plugin.name, platform=binary.platform, url=binary.url
        )


def check_platform(plugin: PluginSchema, binary: BinarySchema) -> None:
    """Require the binary platform to be one of VALID_PLATFORMS."""
    if binary.platform not in VALID_PLATFORMS:
        msg = (
            f"Plugin '{plugin.name}' contains a platform '{binary.platform}' that is invalid. "
            f"Please use one of the following: '{', '.join(VALID_PLATFORMS)}'"
        )
        raise UnknownPlatformError(
            msg, plugin_name=plugin.name, platform=binary.platform, url=binary.url
        )


def check_checksum_format(plugin: PluginSchema, binary: BinarySchema) -> None:
    """Require the declared checksum to be 40 lowercase hex characters."""
    if CHECKSUM_PATTERN.match(binary.checksum) is None:
        msg = (
            f"Plugin '{plugin.name}' declares checksum '{binary.checksum}' for platform "
            f"'{binary.platform}'; expected 40 lowercase hex characters (SHA-1)"
        )
        raise ChecksumFormatError(
            msg, plugin_name=plugin.name, platform=binary.platform, url=binary.url
        )


def find_duplicate_names(catalog: CatalogSchema) -> list[DuplicatePluginError]:
    """Return one error per plugin name that appears more than once."""
    counts = Counter(plugin.name for plugin in catalog.plugins)
    return [
        DuplicatePluginError(
            f"Plugin name '{name}' appears {count} times in the catalog",
            plugin_name=name,
        )
        for name, count in counts.items()
        if count > 1
    ]


def find_duplicate_platforms(plugin: PluginSchema) -> list[DuplicatePlatformWarning]:
    """Return one warning per platform listed more than once by a plugin."""
    counts = Counter(binary.platform for binary in plugin.binaries)
    return [
        DuplicatePlatformWarning(plugin_name=plugin.name, platform=platform)
        for platform, count in counts.items()
        if count > 1
    ]
