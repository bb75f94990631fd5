"""
Interactive prompts.

Thin wrappers around rich prompts. A cancelled prompt (Ctrl+C or EOF) raises
typer.Abort, which the CLI turns into a non-zero exit.
"""

import logging
from datetime import date, datetime, time, timezone
from typing import Sequence, TypeVar

import typer
from rich.console import Console
from rich.prompt import Confirm, Prompt
from rich.table import Table

from syspass_cli.passwords import password_score, password_strength

logger = logging.getLogger(__name__)

T = TypeVar("T")

console = Console(stderr=True)

DATE_FORMAT = "%Y-%m-%d"
# Rows listed by select; the rest are reached by filtering
MAX_ROWS = 50


def _ask(text: str, **kwargs) -> str:
    try:
        return Prompt.ask(text, console=console, **kwargs)
    except (KeyboardInterrupt, EOFError) as e:
        console.print("[red]Cancelled[/red]")
        raise typer.Abort() from e


def ask_prompt(text: str, required: bool = False, default: str = "") -> str:
    """
    Ask for a line of text.

    Args:
        text: Prompt text
        required: Keep asking until a non-empty answer is given
        default: Value used when the answer is empty

    Returns:
        The answer
    """
    while True:
        answer = _ask(text, default=default or None, show_default=bool(default)) or ""
        if answer or not required:
            return answer
        console.print("[red]A value is required[/red]")


def ask_confirm(text: str, default: bool = False) -> bool:
    """Ask a yes/no question."""
    try:
        return Confirm.ask(text, console=console, default=default)
    except (KeyboardInterrupt, EOFError) as e:
        raise typer.Abort() from e


def ask_for_password(text: str, confirm: bool = False) -> str:
    """
    Ask for a password without echoing it.

    Args:
        text: Prompt text
        confirm: Ask twice and report the strength of the new password

    Returns:
        The password
    """
    while True:
        password = _ask(text, password=True) or ""
        if not password:
            console.print("[red]A value is required[/red]")
            continue

        if not confirm:
            return password

        if _ask("Confirmation", password=True) != password:
            console.print("[red]The passwords don't match.[/red]")
            continue

        console.print(f"[yellow]{password_strength(password_score(password))}[/yellow]")
        return password


def ask_for_date(text: str, default: date) -> int:
    """
    Ask for a date.

    Args:
        text: Prompt text
        default: Suggested date

    Returns:
        Midnight UTC of the date as epoch seconds, 0 when skipped with "-"
    """
    while True:
        answer = _ask(f"{text} ({DATE_FORMAT}, - to skip)", default=default.strftime(DATE_FORMAT))
        if answer.strip() == "-":
            return 0
        try:
            day = datetime.strptime(answer.strip(), DATE_FORMAT).date()
        except ValueError:
            console.print(f"[red]Invalid date: {answer}[/red]")
            continue
        return int(datetime.combine(day, time.min, tzinfo=timezone.utc).timestamp())


def matches_filter(query: str, text: str) -> bool:
    """Case-insensitive substring match used to narrow selection lists."""
    return query.lower() in text.lower()


def select(text: str, items: Sequence[T], allow_new: bool = False) -> T | None:
    """
    Let the user pick one item.

    The user enters the row number, or text to narrow the list. With
    allow_new, an empty answer returns None so the caller can create a new
    entity instead.

    Args:
        text: Prompt text
        items: Items to choose from, displayed with str()
        allow_new: Whether an empty answer means "new"

    Returns:
        The chosen item, or None
    """
    shown = list(items)
    while True:
        displayed = shown[:MAX_ROWS]
        table = Table(show_header=False, box=None)
        table.add_column(justify="right", style="cyan")
        table.add_column()
        for number, item in enumerate(displayed, start=1):
            table.add_row(str(number), str(item))
        console.print(table)
        console.print(f"[dim]Number of items found: {len(shown)}[/dim]")
        if len(shown) > len(displayed):
            console.print(f"[dim]... {len(shown) - len(displayed)} more, type text to narrow the list[/dim]")

        hint = " (empty for new)" if allow_new else ""
        answer = _ask(f"{text}{hint}", default="", show_default=False).strip()

        if not answer:
            if allow_new:
                return None
            continue
        if answer.isdigit() and 1 <= int(answer) <= len(displayed):
            return displayed[int(answer) - 1]

        narrowed = [item for item in shown if matches_filter(answer, str(item))]
        if len(narrowed) == 1:
            return narrowed[0]
        if narrowed:
            shown = narrowed
        else:
            console.print(f"[yellow]Nothing matches {answer!r}[/yellow]")


def get_match_string(
    value: str | None,
    quiet: bool,
    prompt_text: str,
    default: str = "",
    required: bool = False,
) -> str:
    """
    Resolve a text field from a command-line option or a prompt.

    Args:
        value: Option value, None when not given
        quiet: Never prompt; fall back to the default
        prompt_text: Prompt shown when asking
        default: Current value of the field
        required: Whether the prompt insists on an answer

    Returns:
        The resolved value
    """
    if value:
        return value
    if quiet:
        return default
    return ask_prompt(prompt_text, required, default)
