"""Storage package for flashdeck.

Key-value persistence backends and the deck payload codec.
"""

from .kv_store import DuckDBKeyValueStore, InMemoryKeyValueStore, KeyValueStore
from .marshalling import deck_from_json, deck_to_json

__all__ = [
    "DuckDBKeyValueStore",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "deck_from_json",
    "deck_to_json",
]
