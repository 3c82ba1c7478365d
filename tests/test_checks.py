"""Tests for structural catalog checks."""

import pytest

from pluginrepo.catalog_schema import VALID_PLATFORMS, BinarySchema, CatalogSchema, PluginSchema
from pluginrepo.checks import (
    check_checksum_format,
    check_platform,
    check_secure_download_prefix,
    check_transport_scheme,
    check_version,
    find_duplicate_names,
    find_duplicate_platforms,
)
from pluginrepo.errors import (
    ChecksumFormatError,
    DuplicatePlatformWarning,
    InsecureTransportError,
    UnknownPlatformError,
    VersionError,
)
from tests.conftest import BINARY_SHA1


def _plugin(name: str = "demo", version: str = "1.0.0", binaries: list[BinarySchema] | None = None) -> PluginSchema:
    return PluginSchema(name=name, version=version, binaries=binaries or [_binary()])


def _binary(platform: str = "linux64", url: str = "https://example.com/demo", checksum: str = BINARY_SHA1) -> BinarySchema:
    return BinarySchema(platform=platform, url=url, checksum=checksum)


class TestCheckVersion:
    """Tests for the semantic version check."""

    @pytest.mark.parametrize(
        "version",
        ["0.0.1", "1.2.3", "10.20.30", "1.0.0-rc.1", "1.0.0-alpha+build.5", "2.0.0+20240101"],
    )
    def test_accepts_semver(self, version: str) -> None:
        check_version(_plugin(version=version))

    @pytest.mark.parametrize(
        "version",
        ["1.0", "v1.0.0", "1", "", "1.0.0.0", "01.0.0", "1.0.0-", "latest"],
    )
    def test_rejects_non_semver(self, version: str) -> None:
        with pytest.raises(VersionError) as exc_info:
            check_version(_plugin(name="broken", version=version))

        assert exc_info.value.plugin_name == "broken"
        assert "non-semver" in str(exc_info.value)


class TestCheckTransportScheme:
    """Tests for the strict https scheme check."""

    def test_accepts_https(self) -> None:
        check_transport_scheme(_plugin(), _binary(url="https://example.com/x"))

    @pytest.mark.parametrize(
        "url",
        [
            "http://example.com/x",
            "ftp://example.com/x",
            "ftps://example.com/x",
            "httpsx://example.com/x",
            "HTTPS-ish",
            "example.com/x",
        ],
    )
    def test_rejects_other_schemes(self, url: str) -> None:
        # Given
        binary = _binary(platform="osx", url=url)

        # When/Then
        with pytest.raises(InsecureTransportError) as exc_info:
            check_transport_scheme(_plugin(name="demo"), binary)

        assert exc_info.value.plugin_name == "demo"
        assert exc_info.value.platform == "osx"
        assert exc_info.value.url == url

    def test_unparseable_url_is_rejected(self) -> None:
        with pytest.raises(InsecureTransportError, match="unparseable"):
            check_transport_scheme(_plugin(), _binary(url="https://[::1/broken"))


class TestCheckSecureDownloadPrefix:
    """Tests for the loose https/ftps pattern check."""

    @pytest.mark.parametrize(
        "url",
        [
            "https://example.com/x",
            "ftps://example.com/x",
            # Accepted here but rejected by the strict scheme check
            "httpsx://example.com/x",
        ],
    )
    def test_accepts_secure_looking_urls(self, url: str) -> None:
        check_secure_download_prefix(_plugin(), _binary(url=url))

    @pytest.mark.parametrize("url", ["http://example.com/x", "ftp://example.com/x"])
    def test_rejects_insecure_urls(self, url: str) -> None:
        with pytest.raises(InsecureTransportError, match="cannot be downloaded over SSL"):
            check_secure_download_prefix(_plugin(), _binary(url=url))

    def test_differs_from_strict_check(self) -> None:
        """The two checks disagree on httpsx://, which is why both run."""
        binary = _binary(url="httpsx://example.com/x")

        check_secure_download_prefix(_plugin(), binary)
        with pytest.raises(InsecureTransportError):
            check_transport_scheme(_plugin(), binary)


class TestCheckPlatform:
    """Tests for the platform membership check."""

    @pytest.mark.parametrize("platform", VALID_PLATFORMS)
    def test_accepts_known_platforms(self, platform: str) -> None:
        check_platform(_plugin(), _binary(platform=platform))

    @pytest.mark.parametrize("platform", ["amd64-beos", "Linux64", "darwin", ""])
    def test_rejects_unknown_platforms(self, platform: str) -> None:
        with pytest.raises(UnknownPlatformError) as exc_info:
            check_platform(_plugin(name="demo"), _binary(platform=platform))

        assert exc_info.value.platform == platform
        assert "linux64" in str(exc_info.value)


class TestCheckChecksumFormat:
    """Tests for the checksum format check."""

    def test_accepts_lowercase_sha1(self) -> None:
        check_checksum_format(_plugin(), _binary(checksum="a" * 40))

    @pytest.mark.parametrize(
        "checksum",
        ["A" * 40, "a" * 39, "a" * 41, "g" * 40, "a" * 64, ""],
    )
    def test_rejects_malformed_checksums(self, checksum: str) -> None:
        with pytest.raises(ChecksumFormatError):
            check_checksum_format(_plugin(), _binary(checksum=checksum))


class TestDuplicates:
    """Tests for duplicate name and platform detection."""

    def test_duplicate_names_are_reported_once_per_name(self) -> None:
        catalog = CatalogSchema(plugins=[_plugin("a"), _plugin("b"), _plugin("a"), _plugin("a")])

        errors = find_duplicate_names(catalog)

        assert [e.plugin_name for e in errors] == ["a"]
        assert "3 times" in str(errors[0])

    def test_unique_names_report_nothing(self) -> None:
        assert find_duplicate_names(CatalogSchema(plugins=[_plugin("a"), _plugin("b")])) == []

    def test_duplicate_platforms_are_warnings(self) -> None:
        plugin = _plugin(
            "demo",
            binaries=[
                _binary("osx", url="https://a.example.com"),
                _binary("osx", url="https://b.example.com"),
                _binary("linux64"),
            ],
        )

        assert find_duplicate_platforms(plugin) == [DuplicatePlatformWarning(plugin_name="demo", platform="osx")]
