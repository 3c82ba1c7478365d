"""pluginrepo CLI entry point."""

import sys
from pathlib import Path
from typing import Annotated

import typer

from pluginrepo import __version__, cli_logger, exit_codes
from pluginrepo.catalog_schema import read_catalog
from pluginrepo.checksum import UrllibFetcher
from pluginrepo.errors import ParseError, SortError, handle_cli_error
from pluginrepo.settings import (
    get_catalog_path,
    get_http_timeout,
    get_workers,
    is_binary_validation_enabled,
)
from pluginrepo.sorter import sort_catalog
from pluginrepo.validator import AllValid, ValidationFailed, format_report, validate_catalog

app = typer.Typer(
    name="pluginrepo",
    help="Validate a plugin binary catalog before publication.",
    no_args_is_help=True,
)

CatalogArgument = Annotated[
    Path | None,
    typer.Argument(help="Catalog file. Defaults to $PLUGINREPO_INDEX or ./repo-index.yml"),
]


def _load_catalog_bytes(path: Path | None) -> tuple[Path, bytes]:
    """Resolve and read the catalog.

    Raises:
        typer.Exit: With CATALOG_NOT_FOUND if the file does not exist.
    """
    catalog_path = path if path is not None else get_catalog_path()
    try:
        return catalog_path, read_catalog(catalog_path)
    except FileNotFoundError:
        cli_logger.error(f"Catalog not found at {catalog_path}")
        raise typer.Exit(exit_codes.CATALOG_NOT_FOUND) from None


def _report_binary_check(plugin_name: str, platform: str) -> None:
    cli_logger.progress(f"checking {plugin_name} {platform}")


@app.command()
def validate(
    path: CatalogArgument = None,
    binaries: Annotated[
        bool,
        typer.Option(
            "--binaries",
            help="Download every binary and verify its SHA-1. Also enabled by BINARY_VALIDATION=true.",
        ),
    ] = False,
    workers: Annotated[
        int | None,
        typer.Option("--workers", "-j", min=1, help="Parallel downloads for --binaries."),
    ] = None,
) -> None:
    """Run every catalog check and report all violations."""
    catalog_path, raw = _load_catalog_bytes(path)

    binary_validation = binaries or is_binary_validation_enabled()
    if binary_validation:
        cli_logger.info("Running binary validations, this could take 10+ minutes")

    try:
        outcome = validate_catalog(
            raw,
            binary_validation=binary_validation,
            fetcher=UrllibFetcher(timeout=get_http_timeout()) if binary_validation else None,
            workers=workers if workers is not None else get_workers(),
            on_binary_check=_report_binary_check,
        )
    except ParseError as e:
        cli_logger.error(f"Invalid catalog {catalog_path}: {e}")
        raise typer.Exit(exit_codes.CATALOG_INVALID) from e

    for warning in outcome.warnings:
        cli_logger.warning(str(warning))
    for skipped in outcome.skipped:
        cli_logger.skipped(skipped)

    match outcome:
        case AllValid():
            cli_logger.success(f"{catalog_path} is valid")
            raise typer.Exit(exit_codes.SUCCESS)

        case ValidationFailed(failures=failures):
            for line in format_report(outcome):
                cli_logger.error(line)
            cli_logger.info(f"{len(failures)} violation(s) found in {catalog_path}")
            raise typer.Exit(exit_codes.VALIDATION_FAILED)


@app.command("sort")
def sort_command(path: CatalogArgument = None) -> None:
    """Print the canonical (sorted) form of the catalog to stdout.

    The catalog file itself is left untouched.
    """
    catalog_path, raw = _load_catalog_bytes(path)
    try:
        canonical = sort_catalog(raw)
    except SortError as e:
        cli_logger.error(f"Invalid catalog {catalog_path}: {e}")
        raise typer.Exit(exit_codes.CATALOG_INVALID) from e
    cli_logger.raw(canonical.decode("utf-8"))


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        cli_logger.info(f"pluginrepo {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Validate a plugin binary catalog before publication."""


def main_cli() -> None:
    """CLI entry point with top-level exception handling.

    Wraps the Typer app to catch any unhandled exceptions and format them
    as clean error messages instead of raw tracebacks.
    """
    try:
        app()
    except Exception as e:
        sys.exit(handle_cli_error(e))


if __name__ == "__main__":
    main_cli()
