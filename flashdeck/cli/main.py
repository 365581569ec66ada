"""
CLI entry point for flashdeck.
"""

# Standard library imports
import logging
from pathlib import Path
from typing import Optional

# Third-party imports
import typer
from rich.console import Console
from rich.table import Table

# Local application imports
from flashdeck.config import get_settings
from flashdeck.constants import VALIDATION_TITLE
from flashdeck.deck_store import DeckStore
from flashdeck.exceptions import CardValidationError
from flashdeck.models import Card, format_tags
from flashdeck.session import StudySession
from flashdeck.storage import DuckDBKeyValueStore
from flashdeck.view_selector import filtered_view
from flashdeck.cli.study_ui import start_study_flow


console = Console()

app = typer.Typer(
    name="flashdeck",
    help="Flashdeck: a personal flashcard deck you can study and edit.",
    add_completion=False,
    rich_markup_mode="markdown",
)


_db_option = typer.Option(  # noqa: B008
    None,
    "--db",
    help="Path to the DuckDB database file. "
    "Falls back to FLASHDECK_DB, then FLASHDECK_DB_PATH settings.",
    envvar="FLASHDECK_DB",
)

_tag_option = typer.Option(  # noqa: B008
    None,
    "--tag",
    "-t",
    help="Only show cards carrying this tag.",
)


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging."
    ),
):
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _resolve_db_path(db: Optional[Path]) -> Path:
    """Resolve the db path from the --db flag or the settings."""
    if db is not None:
        return db
    return get_settings().db_path


def _open_deck(db: Optional[Path]) -> DeckStore:
    """Open and hydrate the deck stored in the resolved database."""
    store = DuckDBKeyValueStore(_resolve_db_path(db))
    deck = DeckStore(store, key=get_settings().storage_key)
    deck.hydrate()
    return deck


def _close_deck(deck: DeckStore) -> None:
    deck.close()
    deck.store.close()


def _require_card(deck: DeckStore, card_id: str) -> Card:
    card = deck.get(card_id)
    if card is None:
        console.print(f"[bold red]Error: no card with id '{card_id}'.[/bold red]")
        raise typer.Exit(code=1)
    return card


def _validation_exit(error: CardValidationError) -> None:
    console.print(f"[bold red]{VALIDATION_TITLE}: {error}[/bold red]")
    raise typer.Exit(code=1)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command("list")
def list_cards(
    db: Optional[Path] = _db_option,
    tag: Optional[str] = _tag_option,
):
    """List the cards in deck order, optionally filtered by tag."""
    deck = _open_deck(db)
    try:
        cards = filtered_view(deck.cards, tag)
        if not cards:
            console.print("[yellow]No flashcards available.[/yellow]")
            return
        table = Table(title="Flashcards")
        table.add_column("ID", style="dim")
        table.add_column("Question")
        table.add_column("Answer")
        table.add_column("Tags", style="cyan")
        for card in cards:
            table.add_row(
                card.id, card.question, card.answer, format_tags(card.tags)
            )
        console.print(table)
    finally:
        _close_deck(deck)


@app.command()
def tags(db: Optional[Path] = _db_option):
    """Show every tag used in the deck."""
    deck = _open_deck(db)
    try:
        universe = deck.tag_universe()
        if not universe:
            console.print("[yellow]No tags yet.[/yellow]")
            return
        for tag in universe:
            console.print(f"- {tag}")
    finally:
        _close_deck(deck)


@app.command()
def add(
    question: str = typer.Option(..., "--question", "-q", help="Question text."),
    answer: str = typer.Option(..., "--answer", "-a", help="Answer text."),
    tags_text: str = typer.Option(
        "", "--tags", help="Comma separated tags, e.g. 'Math, Algebra'."
    ),
    db: Optional[Path] = _db_option,
):
    """Add a flashcard to the end of the deck."""
    deck = _open_deck(db)
    try:
        try:
            card = deck.add(question, answer, tags_text)
        except CardValidationError as e:
            _validation_exit(e)
        console.print(f"[green]Added card[/green] [bold]{card.id}[/bold].")
    finally:
        _close_deck(deck)


@app.command()
def edit(
    card_id: str = typer.Argument(..., help="ID of the card to edit."),
    question: Optional[str] = typer.Option(None, "--question", "-q"),
    answer: Optional[str] = typer.Option(None, "--answer", "-a"),
    tags_text: Optional[str] = typer.Option(None, "--tags"),
    db: Optional[Path] = _db_option,
):
    """
    Replace a card's question, answer and tags.

    Options left out keep the card's current value.
    """
    deck = _open_deck(db)
    try:
        card = _require_card(deck, card_id)
        try:
            deck.update(
                card_id,
                question if question is not None else card.question,
                answer if answer is not None else card.answer,
                tags_text if tags_text is not None else format_tags(card.tags),
            )
        except CardValidationError as e:
            _validation_exit(e)
        console.print(f"[green]Updated card[/green] [bold]{card_id}[/bold].")
    finally:
        _close_deck(deck)


@app.command()
def delete(
    card_id: str = typer.Argument(..., help="ID of the card to delete."),
    yes: bool = typer.Option(
        False, "--yes", "-y", help="Skip the confirmation prompt."
    ),
    db: Optional[Path] = _db_option,
):
    """Delete a flashcard."""
    deck = _open_deck(db)
    try:
        card = _require_card(deck, card_id)
        if not yes and not typer.confirm(
            f"Are you sure you want to delete this flashcard? ({card.question})"
        ):
            console.print("Delete cancelled.")
            return
        deck.remove(card_id)
        console.print(f"[yellow]Deleted card[/yellow] [bold]{card_id}[/bold].")
    finally:
        _close_deck(deck)


@app.command()
def study(
    db: Optional[Path] = _db_option,
    tag: Optional[str] = _tag_option,
    dark: bool = typer.Option(False, "--dark", help="Start in dark mode."),
):
    """Page through the deck interactively."""
    deck = _open_deck(db)
    try:
        session = StudySession(deck, dark_mode=dark)
        start_study_flow(session, tag=tag)
    finally:
        _close_deck(deck)


if __name__ == "__main__":
    app()
