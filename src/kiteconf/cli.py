"""Typer CLI entry point for kiteconf.

This module only parses arguments, wires the components together and maps
fatal errors to exit codes. The edit loop lives in kiteconf.session.
"""

import logging
from pathlib import Path

import typer

from kiteconf import __version__
from kiteconf.cli_utils import (
    EXIT_ERROR,
    EXIT_SIGINT,
    EXIT_SUCCESS,
    EXIT_USAGE_ERROR,
    _error,
    _info,
    _setup_logging,
    _success,
    _warning,
    console,
)
from kiteconf.core.config import load_settings
from kiteconf.core.exceptions import BaselineParseError, KiteconfError
from kiteconf.preflight import ConfigTarget, preflight, resolve_target
from kiteconf.session import EditSession, SessionState, session_workspace
from kiteconf.store import VersionStore

# Module logger
logger = logging.getLogger(__name__)


app = typer.Typer(
    name="kiteconf",
    help="Safely edit PageKite configuration with validation and history",
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"kiteconf {__version__}")
        raise typer.Exit()


def _replay_args(target: ConfigTarget, verbose: bool, quiet: bool, history: bool) -> list[str]:
    """Arguments that reproduce this invocation under sudo."""
    args = [str(target.path)]
    if verbose:
        args.append("--verbose")
    if quiet:
        args.append("--quiet")
    if history:
        args.append("--history")
    return args


def _show_history(store: VersionStore, target: ConfigTarget) -> None:
    entries = store.history(target.path)
    if not entries:
        _info(f"No checkpoints of {target.path} yet.")
        return
    console.print(f"[bold]Checkpoints of {target.path}[/bold] [dim]({store.root})[/dim]")
    for entry in entries:
        console.print(f"  [cyan]{entry.revision}[/cyan]  {entry.date}  {entry.message}")


@app.command()
def edit(
    path: Path | None = typer.Argument(
        None,
        help="Configuration file to edit (defaults to ~/.pagekite.rc)",
        show_default=False,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug output (show detailed logging)",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Only log warnings and errors",
    ),
    history: bool = typer.Option(
        False,
        "--history",
        help="List recent checkpoints of the file and exit",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Edit a PageKite configuration file, validate it and keep its history.

    The file is opened in your editor, checked by pagekite after every
    edit and committed to a git history when you continue. Files under
    /etc/pagekite.d are edited as root and may be followed by a restart.
    """
    if verbose and quiet:
        _warning("Both --verbose and --quiet specified, --verbose takes precedence")
    _setup_logging(verbose, quiet)

    try:
        settings = load_settings()
        target = resolve_target(
            path if path is not None else settings.default_target,
            settings.shared_config_dir,
        )
        logger.debug(
            "Target %s (shared=%s, history in %s)",
            target.path,
            target.is_shared,
            target.store_root,
        )

        if target.path.is_dir():
            _error(f"{target.path} is a directory; name a file inside it")
            raise typer.Exit(code=EXIT_USAGE_ERROR)
        if not target.path.exists():
            _error(f"{target.path} does not exist")
            raise typer.Exit(code=EXIT_USAGE_ERROR)

        preflight(settings, target, _replay_args(target, verbose, quiet, history))

        store = VersionStore(target.store_root)
        if history:
            _show_history(store, target)
            raise typer.Exit(code=EXIT_SUCCESS)

        store.ensure_initialized()

        with session_workspace() as workdir:
            outcome = EditSession(target, settings, store, workdir).run()

        if outcome.exit_state is SessionState.CONTINUE and outcome.drift_warned:
            _warning("Sensitive settings changed during this session")
        if outcome.checkpointed:
            _success("Done.")

    except BaselineParseError as e:
        _error(str(e))
        console.print(e.diagnostics, markup=False, highlight=False)
        raise typer.Exit(code=e.exit_code) from None
    except KiteconfError as e:
        _error(str(e))
        raise typer.Exit(code=e.exit_code) from None
    except PermissionError as e:
        _error(f"Permission denied: {e}")
        raise typer.Exit(code=EXIT_ERROR) from None
    except KeyboardInterrupt:
        console.print()
        _warning("Interrupted")
        raise typer.Exit(code=EXIT_SIGINT) from None
    except typer.Exit:
        # Re-raise typer exits (already handled)
        raise
    except Exception as e:
        _error(f"Unexpected error: {e}")
        if verbose:
            console.print_exception()
        raise typer.Exit(code=EXIT_ERROR) from None


def main() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    main()
