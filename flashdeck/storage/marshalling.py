"""
Conversion between Card models and the persisted deck payload.

The payload is a JSON array of records with exactly the fields
id, question, answer and tags. There is no version field.
"""

from typing import List, Sequence

from pydantic import TypeAdapter, ValidationError

from ..exceptions import MarshallingError
from ..models import Card

_DECK_ADAPTER = TypeAdapter(List[Card])


def deck_to_json(cards: Sequence[Card]) -> str:
    """Serialize a full deck snapshot."""
    return _DECK_ADAPTER.dump_json(list(cards)).decode("utf-8")


def deck_from_json(text: str) -> List[Card]:
    """
    Parse a stored payload back into an ordered list of Cards.

    Raises:
        MarshallingError: If the payload is not valid JSON, is not a list of
            valid card records, or contains the same id twice.
    """
    try:
        cards = _DECK_ADAPTER.validate_json(text)
    except ValidationError as e:
        raise MarshallingError(
            f"Failed to parse stored deck: {e}", original_exception=e
        ) from e

    seen = set()
    for card in cards:
        if card.id in seen:
            raise MarshallingError(f"Duplicate card id '{card.id}' in stored deck.")
        seen.add(card.id)
    return cards
