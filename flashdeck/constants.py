"""
Static constants for flashdeck.

No runtime configuration here - see config.py for settings.
"""
from typing import Any, Dict, List, Tuple

# Key under which the serialized deck is stored.
STORAGE_KEY: str = "@flashcards_storage"

VALIDATION_TITLE: str = "Validation"
EMPTY_FIELDS_MESSAGE: str = "Question and Answer cannot be empty."

# Deck used when nothing has been persisted yet or the stored deck is unreadable.
SEED_DECK: Tuple[Dict[str, Any], ...] = (
    {
        "id": "1",
        "question": "What is the capital of France?",
        "answer": "Paris",
        "tags": ["Geography"],
    },
    {
        "id": "2",
        "question": "What is 2 + 2?",
        "answer": "4",
        "tags": ["Math"],
    },
)

# Label for the synthetic "no filter" option.
ALL_TAGS_LABEL: str = "All"

TAG_SEPARATOR: str = ","


def seed_deck_records() -> List[Dict[str, Any]]:
    """Return a fresh, mutable copy of the seed deck records."""
    return [
        {**record, "tags": list(record["tags"])} for record in SEED_DECK
    ]
