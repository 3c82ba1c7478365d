"""Download-and-hash verification of published binaries.

Each binary is fetched over HTTP(S) and its SHA-1 compared with the
checksum declared in the catalog. A transient 5xx answer gets exactly one
retry; transport errors are not retried at all.
"""

from __future__ import annotations

import hashlib
import http.client
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import BinaryIO, Protocol
from urllib.error import HTTPError
from urllib.request import Request, urlopen

from pluginrepo import __version__
from pluginrepo.catalog_schema import BinarySchema, CatalogSchema, PluginSchema
from pluginrepo.errors import ChecksumMismatchError, CheckFailure, DownloadError, NetworkError
from pluginrepo.settings import DEFAULT_HTTP_TIMEOUT_SECONDS

# Statuses that earn a single retry
TRANSIENT_STATUSES = frozenset({500, 502, 503, 504})

USER_AGENT = f"pluginrepo/{__version__}"

# Failures reported per binary instead of aborting the run. urllib raises
# ValueError for URLs it cannot request and HTTPException for broken
# responses (bad status line, truncated body).
TRANSPORT_ERRORS = (OSError, ValueError, http.client.HTTPException)


@dataclass
class FetchResponse:
    """An HTTP response whose body has not been read yet."""

    status: int
    body: BinaryIO

    def read(self) -> bytes:
        """Read the whole body."""
        return self.body.read()

    def close(self) -> None:
        """Release the underlying connection."""
        self.body.close()


class BinaryFetcher(Protocol):
    """Protocol for issuing a GET against a binary URL."""

    def get(self, url: str) -> FetchResponse:
        """Return the response for url.

        Raises OSError for transport failures (DNS, refused, timeout,
        malformed URL or response).
        Non-2xx statuses are returned, not raised.
        """
        ...


class UrllibFetcher:
    """Fetches binaries with urllib, without authentication."""

    def __init__(self, timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS) -> None:
        self._timeout = timeout

    def get(self, url: str) -> FetchResponse:
        """GET url, turning HTTP error statuses into ordinary responses.

        Raises:
            OSError: On any transport failure, including URLs urllib cannot
                request and responses http.client cannot parse.
        """
        try:
            request = Request(url, headers={"User-Agent": USER_AGENT}, method="GET")
            response = urlopen(request, timeout=self._timeout)  # noqa: S310
        except HTTPError as e:
            return FetchResponse(status=e.code, body=e)
        except (ValueError, http.client.HTTPException) as e:
            msg = f"{type(e).__name__}: {e}"
            raise OSError(msg) from e
        return FetchResponse(status=response.getcode(), body=response)


def _get(fetcher: BinaryFetcher, url: str, plugin_name: str, platform: str) -> FetchResponse:
    try:
        return fetcher.get(url)
    except TRANSPORT_ERRORS as e:
        msg = f"Failed to download '{plugin_name}' for platform '{platform}' from {url}: {e}"
        raise NetworkError(msg, plugin_name=plugin_name, platform=platform, url=url) from e


def verify_checksum(
    url: str,
    declared_checksum: str,
    fetcher: BinaryFetcher,
    *,
    plugin_name: str,
    platform: str,
) -> None:
    """Download url and check its SHA-1 against declared_checksum.

    Args:
        url: Binary download URL.
        declared_checksum: Hex SHA-1 from the catalog (compared lowercased).
        fetcher: Issues the GET requests.
        plugin_name: Owning plugin, for error messages.
        platform: Binary platform, for error messages.

    Raises:
        NetworkError: On a transport failure while connecting or reading.
        DownloadError: If the final status is outside [200, 400).
        ChecksumMismatchError: If the content hashes to something else.
    """
    response = _get(fetcher, url, plugin_name, platform)
    if response.status in TRANSIENT_STATUSES:
        response.close()
        response = _get(fetcher, url, plugin_name, platform)

    try:
        if not 200 <= response.status < 400:
            msg = (
                f"Failed to retrieve '{plugin_name}' for platform '{platform}' "
                f"(HTTP {response.status}), can't compute SHA-1 from URL {url}"
            )
            raise DownloadError(
                msg, status=response.status, plugin_name=plugin_name, platform=platform, url=url
            )
        try:
            content = response.read()
        except TRANSPORT_ERRORS as e:
            msg = f"Failed to read '{plugin_name}' for platform '{platform}' from {url}: {e}"
            raise NetworkError(msg, plugin_name=plugin_name, platform=platform, url=url) from e
    finally:
        response.close()

    actual = hashlib.sha1(content).hexdigest()  # noqa: S324
    if actual != declared_checksum.lower():
        msg = (
            f"Plugin '{plugin_name}' has an invalid checksum for platform '{platform}': "
            f"declared {declared_checksum}, downloaded file hashes to {actual}"
        )
        raise ChecksumMismatchError(
            msg, actual=actual, plugin_name=plugin_name, platform=platform, url=url
        )


@dataclass
class BinaryCheck:
    """Outcome of verifying one binary. ``error`` is None on success."""

    plugin_name: str
    platform: str
    url: str
    error: CheckFailure | None = None

    @property
    def passed(self) -> bool:
        """Return True if the checksum matched."""
        return self.error is None


class ChecksumVerifier:
    """Verifies every binary of a catalog, sequentially or with a thread pool.

    Results always come back in catalog order, whatever the worker count.
    """

    def __init__(
        self,
        fetcher: BinaryFetcher,
        workers: int = 1,
        on_check: Callable[[str, str], None] | None = None,
    ) -> None:
        if workers < 1:
            msg = f"workers must be at least 1, got {workers}"
            raise ValueError(msg)
        self._fetcher = fetcher
        self._workers = workers
        self._on_check = on_check

    def verify_binary(self, plugin: PluginSchema, binary: BinarySchema) -> BinaryCheck:
        """Verify a single binary, capturing its failure instead of raising."""
        if self._on_check is not None:
            self._on_check(plugin.name, binary.platform)
        check = BinaryCheck(plugin_name=plugin.name, platform=binary.platform, url=binary.url)
        try:
            verify_checksum(
                binary.url,
                binary.checksum,
                self._fetcher,
                plugin_name=plugin.name,
                platform=binary.platform,
            )
        except CheckFailure as e:
            check.error = e
        return check

    def verify_all(self, catalog: CatalogSchema) -> list[BinaryCheck]:
        """Verify every binary in the catalog, in catalog order."""
        pairs = [(plugin, binary) for plugin in catalog.plugins for binary in plugin.binaries]
        if self._workers == 1:
            return [self.verify_binary(plugin, binary) for plugin, binary in pairs]

        with ThreadPoolExecutor(max_workers=self._workers) as executor:
            futures = [executor.submit(self.verify_binary, plugin, binary) for plugin, binary in pairs]
            return [future.result() for future in futures]
