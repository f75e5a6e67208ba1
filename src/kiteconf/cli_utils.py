"""Shared console, exit codes and output helpers for the CLI."""

import logging

from rich.console import Console
from rich.logging import RichHandler

# Exit codes
EXIT_SUCCESS: int = 0
EXIT_ERROR: int = 1
EXIT_USAGE_ERROR: int = 2  # same code click uses for usage errors
EXIT_SIGINT: int = 130
# Fatal kiteconf errors exit with KiteconfError.exit_code (core.exceptions)

console = Console()
err_console = Console(stderr=True)


def _setup_logging(verbose: bool, quiet: bool) -> None:
    """Configure the root logger with a Rich handler on stderr.

    Args:
        verbose: DEBUG level (takes precedence over quiet).
        quiet: WARNING level.

    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, rich_tracebacks=verbose, show_path=verbose)],
        force=True,
    )
    logging.getLogger().setLevel(level)


def _error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error:[/red] {message}")


def _warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning:[/yellow] {message}")


def _success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def _info(message: str) -> None:
    """Print an informational message."""
    console.print(f"[dim]{message}[/dim]")
