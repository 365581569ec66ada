"""
Filtered view of the deck and the navigation position within it.
"""

import logging
from typing import Callable, List, Optional, Sequence

from .deck_store import DeckStore
from .models import Card

logger = logging.getLogger(__name__)

PositionListener = Callable[["ViewSelector"], None]


def filtered_view(cards: Sequence[Card], tag: Optional[str]) -> List[Card]:
    """
    Return the cards carrying `tag`, in deck order, or every card if tag is None.
    """
    if tag is None:
        return list(cards)
    return [card for card in cards if card.has_tag(tag)]


class ViewSelector:
    """
    Tracks the active tag filter and the navigation position inside the
    filtered view of a DeckStore.

    The position is None exactly when the filtered view is empty, otherwise
    it always lies in [0, count - 1]. Listeners registered with
    subscribe() run whenever the displayed slot changes: a new position, a
    different card at the same position, or any filter change.
    """

    def __init__(self, deck: DeckStore):
        self._deck = deck
        self._filter: Optional[str] = None
        self._position: Optional[int] = None
        self._shown_id: Optional[str] = None
        self._listeners: List[PositionListener] = []
        deck.subscribe(self._on_deck_change)
        self.reclamp()

    @property
    def filter_tag(self) -> Optional[str]:
        return self._filter

    @property
    def position(self) -> Optional[int]:
        return self._position

    def view(self) -> List[Card]:
        return filtered_view(self._deck.cards, self._filter)

    def count(self) -> int:
        return len(self.view())

    def current_card(self) -> Optional[Card]:
        if self._position is None:
            return None
        view = self.view()
        return view[self._position]

    def set_filter(self, tag: Optional[str]) -> None:
        """Activate a tag filter (None shows every card) and rewind to the first card."""
        self._filter = tag
        logger.debug(f"Filter set to {tag!r}.")
        self._settle(0 if self.count() else None, force=True)

    def next(self) -> bool:
        """Advance one card. Returns False, changing nothing, at the last card."""
        if self._position is None or self._position >= self.count() - 1:
            return False
        return self._settle(self._position + 1)

    def previous(self) -> bool:
        """Step back one card. Returns False, changing nothing, at the first card."""
        if self._position is None or self._position == 0:
            return False
        return self._settle(self._position - 1)

    def jump_to(self, card_id: str) -> bool:
        """Move to the card with `card_id` if it is part of the filtered view."""
        for index, card in enumerate(self.view()):
            if card.id == card_id:
                self._settle(index)
                return True
        return False

    def reclamp(self) -> None:
        """Pull the position back into range after the deck or filter changed."""
        count = self.count()
        if count == 0:
            new_position = None
        elif self._position is None or self._position >= count:
            new_position = 0
        else:
            new_position = self._position
        self._settle(new_position)

    def subscribe(self, listener: PositionListener) -> None:
        self._listeners.append(listener)

    def _on_deck_change(self, deck: DeckStore) -> None:
        self.reclamp()

    def _settle(self, new_position: Optional[int], force: bool = False) -> bool:
        view = self.view()
        new_id = view[new_position].id if new_position is not None else None
        changed = (
            force
            or new_position != self._position
            or new_id != self._shown_id
        )
        self._position = new_position
        self._shown_id = new_id
        if changed:
            for listener in list(self._listeners):
                listener(self)
        return changed
