"""
Interactive command-line study loop.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.panel import Panel

from flashdeck.constants import ALL_TAGS_LABEL, VALIDATION_TITLE
from flashdeck.exceptions import CardValidationError
from flashdeck.models import format_tags
from flashdeck.session import StudySession, StudyView

logger = logging.getLogger(__name__)
console = Console()

HELP_TEXT = (
    "[dim]n[/dim] next  [dim]p[/dim] previous  [dim]r[/dim] reveal  "
    "[dim]f <tag>[/dim] filter  [dim]a[/dim] add  [dim]e[/dim] edit  "
    "[dim]d[/dim] delete  [dim]t[/dim] theme  [dim]q[/dim] quit"
)


def _border(view: StudyView, light: str, dark: str) -> str:
    return dark if view.dark_mode else light


def render_view(view: StudyView) -> None:
    """Print the filter bar and the current card (question, plus answer if revealed)."""
    options = [ALL_TAGS_LABEL] + view.tags
    selected = view.filter_tag if view.filter_tag is not None else ALL_TAGS_LABEL
    bar = "  ".join(
        f"[reverse]{option}[/reverse]" if option == selected else option
        for option in options
    )
    console.print(bar)

    if view.card is None:
        console.print("[italic]No flashcards available.[/italic]")
        return

    console.rule(f"[bold]Card {view.position + 1} of {view.count}[/bold]")
    console.print(
        Panel(
            view.card.question,
            title="Question",
            border_style=_border(view, "green", "bright_green"),
        )
    )
    if view.revealed:
        console.print(
            Panel(
                view.card.answer,
                title="Answer",
                border_style=_border(view, "blue", "bright_blue"),
            )
        )
    if view.card.tags:
        console.print(f"[dim]Tags: {format_tags(view.card.tags)}[/dim]")


def _prompt(label: str, default: str = "") -> str:
    suffix = f" [dim]({default})[/dim]" if default else ""
    value = console.input(f"{label}{suffix}: ")
    return value if value else default


def _add(session: StudySession) -> None:
    question = _prompt("Question")
    answer = _prompt("Answer")
    tags_text = _prompt("Tags (comma separated)")
    session.add_card(question, answer, tags_text)
    console.print("[green]Card added.[/green]")


def _edit(session: StudySession, view: StudyView) -> None:
    card = view.card
    question = _prompt("Question", card.question)
    answer = _prompt("Answer", card.answer)
    tags_text = _prompt("Tags (comma separated)", format_tags(card.tags))
    session.edit_card(card.id, question, answer, tags_text)
    console.print("[green]Card updated.[/green]")


def _delete(session: StudySession, view: StudyView) -> None:
    confirm = console.input(
        "Are you sure you want to delete this flashcard? [y/N]: "
    )
    if confirm.strip().lower() in ("y", "yes"):
        session.delete_card(view.card.id)
        console.print("[yellow]Card deleted.[/yellow]")
    else:
        console.print("Delete cancelled.")


def _handle(session: StudySession, command: str, argument: Optional[str]) -> bool:
    """Apply one command. Returns False when the loop should stop."""
    view = session.view()
    if command == "q":
        return False
    if command == "n":
        session.go_next()
    elif command == "p":
        session.go_previous()
    elif command == "r":
        session.reveal_answer()
    elif command == "f":
        tag = None if argument in (None, ALL_TAGS_LABEL) else argument
        session.set_filter(tag)
    elif command == "t":
        session.toggle_theme()
    elif command == "a":
        _add(session)
    elif command in ("e", "d") and view.card is None:
        console.print("[yellow]No card selected.[/yellow]")
    elif command == "e":
        _edit(session, view)
    elif command == "d":
        _delete(session, view)
    else:
        console.print(HELP_TEXT)
    return True


def start_study_flow(session: StudySession, tag: Optional[str] = None) -> None:
    """
    Run the interactive study loop until the user quits.

    Args:
        session: A StudySession over a hydrated deck.
        tag: Optional tag to filter by at the start.
    """
    console.print("[bold cyan]Starting study session...[/bold cyan]")
    if tag is not None:
        session.set_filter(tag)
    console.print(HELP_TEXT)

    while True:
        render_view(session.view())
        raw = console.input("[bold]> [/bold]").strip()
        command, _, argument = raw.partition(" ")
        try:
            keep_going = _handle(
                session, command.lower(), argument.strip() or None
            )
        except CardValidationError as e:
            console.print(f"[bold red]{VALIDATION_TITLE}: {e}[/bold red]")
            continue
        if not keep_going:
            break

    console.print("[bold cyan]Study session finished.[/bold cyan]")
