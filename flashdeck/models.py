"""
Card model and the helpers that build cards from user input.
"""

from __future__ import annotations

import re
import time
from typing import Callable, Iterable, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import EMPTY_FIELDS_MESSAGE, TAG_SEPARATOR
from .exceptions import CardValidationError


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


# Ids that can have come from the millisecond clock.
_NUMERIC_ID = re.compile(r"[0-9]{1,18}")


def normalize_tags(tags: Iterable[str]) -> List[str]:
    """Strip each tag, drop empties and duplicates, keep first-seen order."""
    seen = set()
    result = []
    for tag in tags:
        cleaned = tag.strip()
        if cleaned and cleaned not in seen:
            seen.add(cleaned)
            result.append(cleaned)
    return result


def parse_tags(tags_text: str) -> List[str]:
    """
    Parse comma separated tag input into a list of tags.

    Parameters:
        tags_text (str): Raw user input, e.g. "Geography, Europe,,".

    Returns:
        List[str]: Trimmed, non-empty, de-duplicated tags in input order.
    """
    if not tags_text:
        return []
    return normalize_tags(tags_text.split(TAG_SEPARATOR))


def format_tags(tags: Iterable[str]) -> str:
    """Inverse of parse_tags, used to pre-fill edit forms."""
    return f"{TAG_SEPARATOR} ".join(tags)


class Card(BaseModel):
    """
    A single question/answer flashcard.

    Cards are immutable; an edit produces a new Card carrying the same id.
    The field set is exactly the persisted record format.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(
        ...,
        min_length=1,
        description="Unique, never reused identifier.",
    )
    question: str = Field(..., description="Question side of the card.")
    answer: str = Field(..., description="Answer side of the card.")
    tags: List[str] = Field(
        default_factory=list,
        description="Category labels, insertion order kept for display.",
    )

    @field_validator("question", "answer")
    @classmethod
    def check_not_blank(cls, v: str) -> str:
        """Reject text that is empty once surrounding whitespace is removed."""
        if not v.strip():
            raise ValueError("must not be empty")
        return v

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, tags: List[str]) -> List[str]:
        return normalize_tags(tags)

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags


def build_card(
    card_id: str, question: str, answer: str, tags_text: str
) -> Card:
    """
    Build a Card from raw form input.

    Raises:
        CardValidationError: If question or answer is blank. No Card is created.
    """
    if not question or not question.strip() or not answer or not answer.strip():
        raise CardValidationError(EMPTY_FIELDS_MESSAGE)
    return Card(
        id=card_id,
        question=question,
        answer=answer,
        tags=parse_tags(tags_text),
    )


class CardIdGenerator:
    """
    Issues millisecond-timestamp ids that strictly increase.

    Ids already present in a deck must be passed to observe() so a fresh id
    can never collide with them, even if the clock goes backwards.
    """

    def __init__(self, clock: Callable[[], int] = _now_ms):
        self._clock = clock
        self._last = 0

    def observe(self, card_ids: Iterable[str]) -> None:
        for card_id in card_ids:
            if _NUMERIC_ID.fullmatch(card_id):
                self._last = max(self._last, int(card_id))

    def next_id(self) -> str:
        candidate = max(self._clock(), self._last + 1)
        self._last = candidate
        return str(candidate)
