"""Console output helpers shared by the pluginrepo commands.

Report lines go to stdout; progress chatter goes to stderr so that
``pluginrepo sort`` output can be redirected into a file untouched.
"""

from datetime import datetime, timezone

from rich.console import Console
from rich.markup import escape

_console = Console(highlight=False, soft_wrap=True)
_err_console = Console(stderr=True, highlight=False, soft_wrap=True)


def success(message: str) -> None:
    """Print a success message with green checkmark."""
    _console.print(f"[green]✓[/green] {escape(message)}")


def error(message: str) -> None:
    """Print a violation or fatal error with red X."""
    _console.print(f"[red]✗[/red] {escape(message)}")


def warning(message: str) -> None:
    """Print a warning (quality issue, not a failure)."""
    _console.print(f"[yellow]![/yellow] {escape(message)}")


def skipped(message: str) -> None:
    """Print a check that was intentionally not run."""
    _console.print(f"[yellow]-[/yellow] [dim]skipped:[/dim] {escape(message)}")


def info(message: str) -> None:
    """Print an info message (no prefix)."""
    _console.print(message)


def raw(text: str) -> None:
    """Write text to stdout verbatim, without markup or wrapping."""
    _console.out(text, end="", highlight=False)


def progress(message: str) -> None:
    """Print a timestamped progress line to stderr."""
    stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    _err_console.print(f"[dim]{stamp} {escape(message)}[/dim]")
