"""Flashdeck - a personal flashcard deck with tag filtering and persistence."""

from .models import Card, parse_tags
from .constants import SEED_DECK, STORAGE_KEY
from .deck_store import DeckStore
from .view_selector import ViewSelector, filtered_view
from .presentation import CardPresentationState
from .session import StudySession, StudyView
from .storage import DuckDBKeyValueStore, InMemoryKeyValueStore

__all__ = [
    "Card",
    "parse_tags",
    "SEED_DECK",
    "STORAGE_KEY",
    "DeckStore",
    "ViewSelector",
    "filtered_view",
    "CardPresentationState",
    "StudySession",
    "StudyView",
    "DuckDBKeyValueStore",
    "InMemoryKeyValueStore",
]
