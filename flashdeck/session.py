"""
This module defines the StudySession, which applies presentation-layer
events to the deck, the view selector and the presentation state, and hands
back a StudyView snapshot after each one.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .deck_store import DeckStore
from .models import Card
from .presentation import CardPresentationState, ThemeState
from .view_selector import ViewSelector

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StudyView:
    """Everything a front end needs to render the current screen."""

    card: Optional[Card]
    position: Optional[int]
    count: int
    revealed: bool
    tags: List[str] = field(default_factory=list)
    filter_tag: Optional[str] = None
    dark_mode: bool = False

    @property
    def has_previous(self) -> bool:
        return self.position is not None and self.position > 0

    @property
    def has_next(self) -> bool:
        return self.position is not None and self.position < self.count - 1


class StudySession:
    """
    Coordinates one study session over a DeckStore.

    Any change of the displayed card hides the answer again. A newly added
    card becomes the displayed card only if it is visible under the active
    filter; otherwise the position stays where it was.
    """

    def __init__(self, deck: DeckStore, dark_mode: bool = False):
        """
        Build a session, hydrating the deck if that has not happened yet.

        Parameters:
            deck (DeckStore): Store owning the cards for this session.
            dark_mode (bool): Initial theme.
        """
        self.deck = deck
        self.selector = ViewSelector(deck)
        self.presentation = CardPresentationState()
        self.theme = ThemeState(dark_mode=dark_mode)
        self.selector.subscribe(self._on_position_change)
        if not deck.hydrated:
            deck.hydrate()

    def view(self) -> StudyView:
        return StudyView(
            card=self.selector.current_card(),
            position=self.selector.position,
            count=self.selector.count(),
            revealed=self.presentation.revealed,
            tags=self.deck.tag_universe(),
            filter_tag=self.selector.filter_tag,
            dark_mode=self.theme.dark_mode,
        )

    # --- Events ---

    def add_card(self, question: str, answer: str, tags_text: str = "") -> StudyView:
        """
        Add a card and show it when the active filter lets it through.

        Raises:
            CardValidationError: If question or answer is blank.
        """
        card = self.deck.add(question, answer, tags_text)
        if not self.selector.jump_to(card.id):
            logger.debug(
                f"New card {card.id} is hidden by filter {self.selector.filter_tag!r}."
            )
        return self.view()

    def edit_card(
        self, card_id: str, question: str, answer: str, tags_text: str = ""
    ) -> StudyView:
        """
        Replace a card's content. Unknown ids are ignored.

        Raises:
            CardValidationError: If question or answer is blank.
        """
        self.deck.update(card_id, question, answer, tags_text)
        return self.view()

    def delete_card(self, card_id: str) -> StudyView:
        """Delete a card. Confirmation is the caller's job; unknown ids are ignored."""
        self.deck.remove(card_id)
        return self.view()

    def set_filter(self, tag: Optional[str]) -> StudyView:
        self.selector.set_filter(tag)
        return self.view()

    def go_next(self) -> StudyView:
        self.selector.next()
        return self.view()

    def go_previous(self) -> StudyView:
        self.selector.previous()
        return self.view()

    def reveal_answer(self) -> StudyView:
        if self.selector.current_card() is not None:
            self.presentation.reveal()
        return self.view()

    def toggle_theme(self) -> StudyView:
        self.theme.toggle()
        return self.view()

    def close(self) -> None:
        self.deck.close()

    def _on_position_change(self, selector: ViewSelector) -> None:
        self.presentation.hide()
