"""Shared test fixtures for pluginrepo tests."""

import hashlib
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import yaml

BINARY_CONTENT = b"\x7fELF fake plugin binary"
BINARY_SHA1 = hashlib.sha1(BINARY_CONTENT).hexdigest()

PLUGIN_FIELDS = ("name", "description", "version", "created", "updated", "company", "authors", "homepage", "binaries")


def binary_entry(platform: str = "linux64", url: str | None = None, checksum: str = BINARY_SHA1) -> dict[str, str]:
    """Build a raw binary mapping as it appears in repo-index.yml."""
    return {
        "platform": platform,
        "url": url or f"https://example.com/releases/plugin-{platform}",
        "checksum": checksum,
    }


def plugin_entry(
    name: str = "plugin-a",
    version: str = "1.0.0",
    binaries: list[dict[str, str]] | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """Build a raw plugin mapping as it appears in repo-index.yml.

    Known fields come out in canonical order; unknown extras go last.
    """
    entry = {
        "name": name,
        "version": version,
        "binaries": binaries if binaries is not None else [binary_entry()],
        **extra,
    }
    known = {key: entry[key] for key in PLUGIN_FIELDS if key in entry}
    return {**known, **entry}


def dump_catalog(plugins: list[dict[str, Any]]) -> bytes:
    """Dump plugins as catalog bytes, keeping key order (block style).

    Plugins are written in the order given, so callers control sortedness.
    """
    text = yaml.safe_dump({"plugins": plugins}, default_flow_style=False, sort_keys=False)
    return text.encode("utf-8")


@pytest.fixture
def write_catalog(tmp_path: Path) -> Callable[[bytes], Path]:
    """Return a helper that writes catalog bytes to tmp_path/repo-index.yml."""

    def _write(raw: bytes) -> Path:
        path = tmp_path / "repo-index.yml"
        path.write_bytes(raw)
        return path

    return _write


@pytest.fixture(autouse=True)
def _clear_settings_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the caller's environment from switching on network checks."""
    for name in ("BINARY_VALIDATION", "PLUGINREPO_INDEX", "PLUGINREPO_WORKERS", "PLUGINREPO_HTTP_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
