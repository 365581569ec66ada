"""
This module defines the DeckStore, the single owner of the flashcard deck.

Every committed mutation notifies subscribers and queues one full snapshot
with the SnapshotWriter. The in-memory deck is authoritative for the session;
persistence only ever trails it.
"""

import logging
from typing import Callable, List, Optional, Tuple

from .constants import STORAGE_KEY, seed_deck_records
from .exceptions import MarshallingError
from .models import Card, CardIdGenerator, build_card
from .persistence import SnapshotWriter
from .storage.kv_store import KeyValueStore
from .storage.marshalling import deck_from_json

logger = logging.getLogger(__name__)

DeckListener = Callable[["DeckStore"], None]


def seed_cards() -> List[Card]:
    """Build the built-in starter deck."""
    return [Card(**record) for record in seed_deck_records()]


class DeckStore:
    """
    Owns the canonical, ordered list of cards.

    This class is responsible for:
    - Hydrating the deck from a KeyValueStore, falling back to the seed deck.
    - Validated add/update/remove operations.
    - Deriving the tag universe.
    - Queuing a persisted snapshot after every mutation.
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str = STORAGE_KEY,
        id_generator: Optional[CardIdGenerator] = None,
    ):
        """
        Create a DeckStore backed by the given persistence service.

        Parameters:
            store (KeyValueStore): Persistence service the deck is loaded from and saved to.
            key (str): Key the serialized deck lives under.
            id_generator (Optional[CardIdGenerator]): Source of fresh card ids; a timestamp based generator by default.
        """
        self.store = store
        self.key = key
        self._ids = id_generator or CardIdGenerator()
        self._cards: List[Card] = []
        self._listeners: List[DeckListener] = []
        self._writer = SnapshotWriter(store, key)
        self._hydrated = False

    # --- Lifecycle ---

    def hydrate(self) -> List[Card]:
        """
        Load the persisted deck, or the seed deck if none can be read.

        Never raises: missing data silently yields the seed deck, while read
        or parse failures are logged and also yield the seed deck.

        Returns:
            List[Card]: The deck now held by the store.
        """
        text = self.store.load(self.key)
        if text is None:
            logger.info(f"No stored deck under '{self.key}'; using seed deck.")
            cards = seed_cards()
        else:
            try:
                cards = deck_from_json(text)
                logger.info(f"Hydrated {len(cards)} cards from '{self.key}'.")
            except MarshallingError as e:
                logger.error(f"Failed to load flashcards, using seed deck: {e}")
                cards = seed_cards()

        self._cards = cards
        self._ids.observe(card.id for card in cards)
        self._hydrated = True
        self._notify()
        return list(self._cards)

    @property
    def hydrated(self) -> bool:
        return self._hydrated

    def flush(self) -> None:
        """Wait until every queued snapshot has been written (or has failed)."""
        self._writer.flush()

    def close(self) -> None:
        """Flush pending writes and stop the background writer."""
        self._writer.close()

    @property
    def writer(self) -> SnapshotWriter:
        return self._writer

    def __enter__(self) -> "DeckStore":
        if not self._hydrated:
            self.hydrate()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # --- Reads ---

    @property
    def cards(self) -> Tuple[Card, ...]:
        return tuple(self._cards)

    def __len__(self) -> int:
        return len(self._cards)

    def get(self, card_id: str) -> Optional[Card]:
        for card in self._cards:
            if card.id == card_id:
                return card
        return None

    def tag_universe(self) -> List[str]:
        """All distinct tags in the deck, in first-seen order."""
        seen = set()
        tags = []
        for card in self._cards:
            for tag in card.tags:
                if tag not in seen:
                    seen.add(tag)
                    tags.append(tag)
        return tags

    # --- Mutations ---

    def add(self, question: str, answer: str, tags_text: str = "") -> Card:
        """
        Append a new card to the end of the deck.

        Raises:
            CardValidationError: If question or answer is blank; the deck is unchanged.
        """
        card = build_card(self._ids.next_id(), question, answer, tags_text)
        self._cards.append(card)
        logger.info(f"Added card {card.id}.")
        self._commit()
        return card

    def update(
        self, card_id: str, question: str, answer: str, tags_text: str = ""
    ) -> Optional[Card]:
        """
        Replace the card with the given id in place, keeping its position.

        Returns:
            Optional[Card]: The new card, or None if no card has that id.

        Raises:
            CardValidationError: If question or answer is blank; the deck is unchanged.
        """
        index = self._index_of(card_id)
        if index is None:
            logger.debug(f"Update ignored: no card with id {card_id}.")
            return None
        card = build_card(card_id, question, answer, tags_text)
        self._cards[index] = card
        logger.info(f"Updated card {card_id}.")
        self._commit()
        return card

    def remove(self, card_id: str) -> Optional[Card]:
        """
        Delete the card with the given id.

        Returns:
            Optional[Card]: The removed card, or None if no card has that id.
        """
        index = self._index_of(card_id)
        if index is None:
            logger.debug(f"Remove ignored: no card with id {card_id}.")
            return None
        card = self._cards.pop(index)
        logger.info(f"Removed card {card_id}.")
        self._commit()
        return card

    # --- Subscriptions ---

    def subscribe(self, listener: DeckListener) -> None:
        """Register a callback run after hydration and every committed mutation."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: DeckListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # --- Internals ---

    def _index_of(self, card_id: str) -> Optional[int]:
        for index, card in enumerate(self._cards):
            if card.id == card_id:
                return index
        return None

    def _commit(self) -> None:
        self._writer.submit(self._cards)
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)
