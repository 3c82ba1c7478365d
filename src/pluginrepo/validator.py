"""Whole-catalog validation.

Runs every check over every plugin and binary and collects the failures
instead of stopping at the first one. Only a catalog that cannot be parsed
aborts the run.
"""

from collections.abc import Callable
from dataclasses import dataclass, field

from pluginrepo.catalog_schema import CatalogSchema, parse_catalog
from pluginrepo.checks import (
    check_checksum_format,
    check_platform,
    check_secure_download_prefix,
    check_transport_scheme,
    check_version,
    find_duplicate_names,
    find_duplicate_platforms,
)
from pluginrepo.checksum import BinaryFetcher, ChecksumVerifier, UrllibFetcher
from pluginrepo.errors import CatalogError, CheckFailure, DuplicatePlatformWarning, SortError
from pluginrepo.settings import BINARY_VALIDATION_ENV_VAR
from pluginrepo.sorter import sort_catalog

SORT_HINT = "please run 'pluginrepo sort' and replace the file with its output"

BINARY_CHECK_SKIPPED = (
    f"SHA-1 binary checking. To enable, set the {BINARY_VALIDATION_ENV_VAR} "
    "env variable to 'true' or pass --binaries"
)

BinaryCheckHook = Callable[[str, str], None]


@dataclass
class AllValid:
    """Every check that ran passed."""

    skipped: list[str] = field(default_factory=list)
    warnings: list[DuplicatePlatformWarning] = field(default_factory=list)


@dataclass
class ValidationFailed:
    """At least one check failed. Failures are in catalog order."""

    failures: list[CatalogError]
    skipped: list[str] = field(default_factory=list)
    warnings: list[DuplicatePlatformWarning] = field(default_factory=list)


ValidationOutcome = AllValid | ValidationFailed


def _structural_failures(catalog: CatalogSchema) -> tuple[list[CatalogError], list[DuplicatePlatformWarning]]:
    failures: list[CatalogError] = list(find_duplicate_names(catalog))
    warnings: list[DuplicatePlatformWarning] = []

    for plugin in catalog.plugins:
        try:
            check_version(plugin)
        except CheckFailure as e:
            failures.append(e)

        for binary in plugin.binaries:
            for check in (
                check_transport_scheme,
                check_secure_download_prefix,
                check_platform,
                check_checksum_format,
            ):
                try:
                    check(plugin, binary)
                except CheckFailure as e:
                    failures.append(e)

        warnings.extend(find_duplicate_platforms(plugin))

    return failures, warnings


def validate_catalog(
    raw: bytes,
    *,
    binary_validation: bool = False,
    fetcher: BinaryFetcher | None = None,
    workers: int = 1,
    on_binary_check: BinaryCheckHook | None = None,
) -> ValidationOutcome:
    """Validate raw catalog bytes.

    Args:
        raw: Catalog file contents.
        binary_validation: Download every binary and verify its checksum.
        fetcher: HTTP fetcher for binary validation. Defaults to UrllibFetcher.
        workers: Parallel downloads during binary validation.
        on_binary_check: Called with (plugin name, platform) before each download.

    Returns:
        AllValid or ValidationFailed.

    Raises:
        ParseError: If the catalog cannot be parsed.
    """
    catalog = parse_catalog(raw)
    failures: list[CatalogError] = []
    skipped: list[str] = []

    if sort_catalog(raw) != raw:
        failures.append(SortError(f"Catalog is not sorted; {SORT_HINT}"))

    structural, warnings = _structural_failures(catalog)
    failures.extend(structural)

    if binary_validation:
        verifier = ChecksumVerifier(fetcher or UrllibFetcher(), workers=workers, on_check=on_binary_check)
        failures.extend(check.error for check in verifier.verify_all(catalog) if check.error is not None)
    else:
        skipped.append(BINARY_CHECK_SKIPPED)

    if failures:
        return ValidationFailed(failures=failures, skipped=skipped, warnings=warnings)
    return AllValid(skipped=skipped, warnings=warnings)


def format_failure(failure: CatalogError) -> str:
    """Render one failure as a single report line prefixed by its rule."""
    return f"[{failure.rule}] {failure}"


def format_report(outcome: ValidationOutcome) -> list[str]:
    """Return one line per failing rule, in the order they were found."""
    match outcome:
        case ValidationFailed(failures=failures):
            return [format_failure(failure) for failure in failures]
        case AllValid():
            return []
