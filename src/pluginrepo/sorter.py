"""Canonical serialization of the catalog.

The canonical form lists plugins by name and each plugin's binaries by
(platform, url). Fields follow model declaration order whatever their order
in the file: name, description, version, created, updated, company,
authors, homepage, binaries for a plugin and platform, url, checksum for a
binary. Comparing ``sort_catalog(raw)`` against ``raw`` byte-for-byte tells
whether the file on disk is already canonical.
"""

import yaml

from pluginrepo.catalog_schema import BinarySchema, CatalogDumper, CatalogSchema, PluginSchema, parse_catalog
from pluginrepo.errors import ParseError, SortError

# Long descriptions and URLs must stay on one line
_NO_WRAP = 1 << 16


def _binary_key(binary: BinarySchema) -> tuple[str, str]:
    return (binary.platform, binary.url)


def _sorted_plugin(plugin: PluginSchema) -> PluginSchema:
    return plugin.model_copy(update={"binaries": sorted(plugin.binaries, key=_binary_key)})


def serialize_catalog(catalog: CatalogSchema) -> bytes:
    """Serialize a catalog in its given order with a fixed field layout.

    Unset optional fields are omitted and timestamps are written unquoted,
    exactly as they were read.
    The empty catalog serializes to ``plugins: []``.
    """
    data = catalog.model_dump(mode="json", exclude_none=True)
    text = yaml.dump(
        data,
        Dumper=CatalogDumper,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
        width=_NO_WRAP,
    )
    return text.encode("utf-8")


def sort_catalog(raw: bytes) -> bytes:
    """Return the canonical form of raw catalog bytes.

    Pure function of its input; nothing is written back to storage.

    Raises:
        SortError: If the input cannot be parsed.
    """
    try:
        catalog = parse_catalog(raw)
    except ParseError as e:
        msg = f"Cannot sort catalog: {e}"
        raise SortError(msg) from e

    # sorted() is stable, so duplicate names keep their file order
    plugins = sorted(catalog.plugins, key=lambda plugin: plugin.name)
    canonical = CatalogSchema(plugins=[_sorted_plugin(plugin) for plugin in plugins])
    return serialize_catalog(canonical)
