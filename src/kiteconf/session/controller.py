"""The edit-validate-recover loop.

The loop is a small finite-state machine. Each state has a handler that
performs one step and returns the next state; the menu state looks its
successor up in TRANSITIONS, keyed by the latest validation status and the
operator's choice (None being the default action).

    EDIT -> VALIDATE -> MENU -> {EDIT, VALIDATE, DIFF, PRINT,
                                 CONTINUE, QUIT, UNDO}
    DIFF, PRINT -> VALIDATE

After DIFF or PRINT the default action checks the file again even when it
does not parse; the next default after that reopens the editor.

CONTINUE, QUIT and UNDO are terminal. The first pass always edits.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from kiteconf.cli_utils import console
from kiteconf.core.config import Settings
from kiteconf.core.exceptions import BaselineParseError
from kiteconf.fingerprint import SENSITIVE_PATTERNS, fingerprint
from kiteconf.preflight import ConfigTarget
from kiteconf.restart import ScheduledRestart, schedule_restart
from kiteconf.session.external import page, run_editor
from kiteconf.session.menu import MenuChoice, prompt_choice, prompt_yes_no
from kiteconf.store import VersionStore, diff_dumps
from kiteconf.validator import NormalizedDump, ParseFailure, ValidationResult, validate

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Position of the edit loop."""

    EDIT = "edit"
    VALIDATE = "validate"
    MENU = "menu"
    DIFF = "diff"
    PRINT = "print"
    CONTINUE = "continue"
    QUIT = "quit"
    UNDO = "undo"


class ValidationStatus(Enum):
    """Outcome of the most recent validation."""

    OK = "ok"
    PARSE_ERROR = "parse_error"
    SENSITIVE_DRIFT = "sensitive_drift"


TERMINAL_STATES: frozenset[SessionState] = frozenset(
    {SessionState.CONTINUE, SessionState.QUIT, SessionState.UNDO}
)

_CHOICE_STATES: dict[MenuChoice, SessionState] = {
    MenuChoice.EDIT: SessionState.EDIT,
    MenuChoice.DIFF: SessionState.DIFF,
    MenuChoice.PRINT: SessionState.PRINT,
    MenuChoice.CONTINUE: SessionState.CONTINUE,
    MenuChoice.QUIT: SessionState.QUIT,
    MenuChoice.UNDO: SessionState.UNDO,
}

# Default action: a broken file goes straight back to the editor,
# anything else is re-validated and the menu shown again.
_DEFAULT_STATES: dict[ValidationStatus, SessionState] = {
    ValidationStatus.OK: SessionState.VALIDATE,
    ValidationStatus.PARSE_ERROR: SessionState.EDIT,
    ValidationStatus.SENSITIVE_DRIFT: SessionState.VALIDATE,
}

TRANSITIONS: dict[tuple[ValidationStatus, MenuChoice | None], SessionState] = {
    **{
        (status, choice): state
        for status in ValidationStatus
        for choice, state in _CHOICE_STATES.items()
    },
    **{(status, None): state for status, state in _DEFAULT_STATES.items()},
}

_DEFAULT_HINTS: dict[ValidationStatus, str] = {
    ValidationStatus.OK: "check again",
    ValidationStatus.PARSE_ERROR: "edit",
    ValidationStatus.SENSITIVE_DRIFT: "check again",
}

RAW_DIFF_HEADER = (
    "# {path} does not parse. Showing its raw text against the settings dump\n"
    "# taken before editing; lines the parser would normalize also differ.\n"
)


def next_state(status: ValidationStatus, choice: MenuChoice | None) -> SessionState:
    """Look up the state following a menu answer."""
    return TRANSITIONS[(status, choice)]


@dataclass
class SessionOutcome:
    """How an edit session ended.

    Attributes:
        exit_state: CONTINUE, QUIT or UNDO.
        checkpointed: A new checkpoint was committed.
        reverted: The file was restored from its last checkpoint.
        drift_warned: A sensitive-drift warning was shown at least once.
        restart: The scheduled restart, if one was requested.

    """

    exit_state: SessionState
    checkpointed: bool = False
    reverted: bool = False
    drift_warned: bool = False
    restart: ScheduledRestart | None = None


class EditSession:
    """Drive one interactive edit of a configuration target.

    Args:
        target: Resolved file and history location.
        settings: Loaded settings (editor, pager, differ, service binary).
        store: History store for the target.
        workdir: Session scratch directory for snapshot files.
        rules: Sensitive-line patterns, fixed for the whole session.

    """

    def __init__(
        self,
        target: ConfigTarget,
        settings: Settings,
        store: VersionStore,
        workdir: Path,
        rules: Sequence[re.Pattern[str]] = SENSITIVE_PATTERNS,
    ) -> None:
        self.target = target
        self.settings = settings
        self.store = store
        self.workdir = workdir
        self.rules = tuple(rules)

        self.before: NormalizedDump | None = None
        self.before_fingerprint: str | None = None
        self.current: ValidationResult | None = None
        self.status = ValidationStatus.OK
        self.drift_warned = False
        # Set by diff/print so the next default redisplays instead of editing
        self.displayed = False

        self._handlers: dict[SessionState, Callable[[], SessionState]] = {
            SessionState.EDIT: self._edit,
            SessionState.VALIDATE: self._validate,
            SessionState.MENU: self._menu,
            SessionState.DIFF: self._diff,
            SessionState.PRINT: self._print,
        }

    def _run_validation(self) -> ValidationResult:
        return validate(self.target.validation_source, self.settings.service_argv)

    def capture_baseline(self) -> None:
        """Snapshot the configuration before any edit.

        Raises:
            BaselineParseError: If the unedited configuration does not parse.

        """
        result = self._run_validation()
        if isinstance(result, ParseFailure):
            raise BaselineParseError(str(self.target.validation_source), result.diagnostics)

        self.before = result
        self.before_fingerprint = fingerprint(result, self.rules)
        if self.before_fingerprint is None:
            logger.debug("No sensitive settings in %s, drift check disabled", self.target.path)
        else:
            logger.debug("Sensitive settings fingerprint: %s", self.before_fingerprint)

    def run(self) -> SessionOutcome:
        """Run the loop until a terminal state, then act on it."""
        if self.before is None:
            self.capture_baseline()

        state = SessionState.EDIT
        while state not in TERMINAL_STATES:
            logger.debug("Session state: %s", state.value)
            state = self._handlers[state]()

        return self._finish(state)

    # -- state handlers ---------------------------------------------------

    def _edit(self) -> SessionState:
        run_editor(self.settings.editor_argv, self.target.path)
        return SessionState.VALIDATE

    def _validate(self) -> SessionState:
        self.current = self._run_validation()

        if isinstance(self.current, ParseFailure):
            self.status = ValidationStatus.PARSE_ERROR
            console.print(f"\n[red]PageKite cannot parse {self.target.validation_source}:[/red]")
            console.print(self.current.diagnostics, markup=False, highlight=False)
            return SessionState.MENU

        self.status = ValidationStatus.OK
        if self.before_fingerprint is not None:
            after = fingerprint(self.current, self.rules)
            if after != self.before_fingerprint:
                self.status = ValidationStatus.SENSITIVE_DRIFT
                self.drift_warned = True
                console.print(
                    "\n[bold yellow]WARNING:[/bold yellow] [yellow]kite name, kite secret or "
                    "the port 22 passthrough changed. A mistake here can lock you out.[/yellow]"
                )

        if self.status is ValidationStatus.OK:
            console.print("\n[green]Configuration OK.[/green]")
        return SessionState.MENU

    def _menu_status(self) -> ValidationStatus:
        """Status that picks the default action.

        Right after diff or print a parse failure is treated as clean, so
        pressing Enter checks the file again rather than reopening the editor.
        """
        if self.displayed and self.status is ValidationStatus.PARSE_ERROR:
            return ValidationStatus.OK
        return self.status

    def _menu(self) -> SessionState:
        status = self._menu_status()
        self.displayed = False
        choice = prompt_choice(_DEFAULT_HINTS[status])
        return next_state(status, choice)

    def _current_text(self) -> str:
        if isinstance(self.current, NormalizedDump):
            return self.current.text
        return self.target.path.read_text(encoding="utf-8", errors="replace")

    def _diff(self) -> SessionState:
        if self.before is None:
            raise RuntimeError("capture_baseline() must run before diff")
        output = diff_dumps(
            self.before.text,
            self._current_text(),
            self.settings.differ_argv,
            self.workdir,
        )
        if isinstance(self.current, ParseFailure):
            output = RAW_DIFF_HEADER.format(path=self.target.path) + output
        page(output or "No changes.\n", self.settings.pager_argv)
        self.displayed = True
        return SessionState.VALIDATE

    def _print(self) -> SessionState:
        page(self._current_text(), self.settings.pager_argv)
        self.displayed = True
        return SessionState.VALIDATE

    # -- exits ------------------------------------------------------------

    def _finish(self, state: SessionState) -> SessionOutcome:
        outcome = SessionOutcome(exit_state=state, drift_warned=self.drift_warned)

        if state is SessionState.UNDO:
            outcome.reverted = self.store.revert(self.target.path)
            if outcome.reverted:
                console.print(
                    f"[green]Restored {self.target.path} from its last checkpoint.[/green]"
                )
            else:
                console.print(
                    f"[yellow]Nothing to revert: {self.target.path} has no checkpoint yet.[/yellow]"
                )
            return outcome

        if state is SessionState.QUIT:
            console.print(f"[dim]Leaving {self.target.path} as is, without a checkpoint.[/dim]")
            return outcome

        if self.status is ValidationStatus.PARSE_ERROR:
            logger.warning("Not checkpointing %s: it does not parse", self.target.path)
            console.print(
                f"[yellow]{self.target.path} does not parse; it was left on disk "
                "but not checkpointed.[/yellow]"
            )
            return outcome

        outcome.checkpointed = self.store.checkpoint(self.target.path)
        if outcome.checkpointed:
            console.print(f"[green]Checkpoint saved for {self.target.path}.[/green]")
        else:
            console.print(f"[dim]{self.target.path} is unchanged since its last checkpoint.[/dim]")

        if self.target.is_shared and prompt_yes_no("Restart PageKite now?"):
            outcome.restart = schedule_restart(
                self.settings.restart_commands,
                self.settings.restart_delay,
            )
            console.print(
                f"[dim]PageKite will restart in {outcome.restart.delay}s "
                f"(PID {outcome.restart.pid}). The result is not checked.[/dim]"
            )
        return outcome
