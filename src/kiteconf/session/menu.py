"""Interactive prompts for the edit loop.

Uses plain input() with the shared rich console, like every other prompt
in kiteconf. EOF and Ctrl+C are answered conservatively: quit at the
menu, "no" at a yes/no question.
"""

import logging
from enum import Enum

from kiteconf.cli_utils import console

logger = logging.getLogger(__name__)


class MenuChoice(Enum):
    """Actions offered after each validation."""

    EDIT = "edit"
    DIFF = "diff"
    PRINT = "print"
    CONTINUE = "continue"
    QUIT = "quit"
    UNDO = "undo"


MENU_LINE = (
    "[bold]e[/bold]dit, [bold]d[/bold]iff, [bold]p[/bold]rint, "
    "[bold]c[/bold]ontinue, [bold]q[/bold]uit, [bold]u[/bold]ndo"
)

_ALIASES: dict[str, MenuChoice] = {}
for _choice in MenuChoice:
    _ALIASES[_choice.value] = _choice
    _ALIASES[_choice.value[0]] = _choice


def parse_choice(text: str) -> MenuChoice | None:
    """Map a menu answer to a choice.

    Single letters and full words are accepted, case-insensitively.

    Returns:
        The choice, or None for empty or unrecognised input (the default).

    """
    return _ALIASES.get(text.strip().lower())


def prompt_choice(default_hint: str) -> MenuChoice | None:
    """Show the menu and read one line.

    Args:
        default_hint: What pressing Enter does, shown in the prompt.

    Returns:
        The chosen action, or None for the default action.

    """
    console.print(f"\n{MENU_LINE} [dim](Enter: {default_hint})[/dim]? ", end="")
    try:
        answer = input()
    except (EOFError, KeyboardInterrupt):
        console.print()  # Newline after ^C
        logger.info("User interrupted at the menu (EOF/Ctrl+C), quitting")
        return MenuChoice.QUIT

    choice = parse_choice(answer)
    if choice is None and answer.strip():
        console.print(f"[yellow]Unrecognised choice {answer.strip()!r}[/yellow]")
    logger.debug("Menu answer %r -> %s", answer, choice)
    return choice


def prompt_yes_no(message: str, default: bool = False) -> bool:
    """Ask a yes/no question; re-prompts on invalid input.

    Args:
        message: Question to display.
        default: Answer used for empty input.

    Returns:
        True for yes, False for no.

    """
    hint = "[Y/n]" if default else "[y/N]"
    console.print(f"\n{message} [bold]\\{hint}[/bold] ", end="")

    while True:
        try:
            answer = input().strip().lower()
        except (EOFError, KeyboardInterrupt):
            console.print()
            logger.info("User interrupted (EOF/Ctrl+C), answering no")
            return False

        if answer == "":
            return default
        if answer in ("y", "yes"):
            return True
        if answer in ("n", "no"):
            return False
        console.print(
            "Invalid choice. Enter [bold]y[/bold] or [bold]n[/bold]: ",
            end="",
        )
