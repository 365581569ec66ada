import json
import logging

import pytest

from flashdeck.constants import STORAGE_KEY
from flashdeck.deck_store import DeckStore, seed_cards
from flashdeck.exceptions import CardValidationError
from flashdeck.models import Card
from flashdeck.storage import InMemoryKeyValueStore, deck_from_json, deck_to_json

from .conftest import RecordingStore, fixed_clock_ids


def _persisted(store, key=STORAGE_KEY):
    return deck_from_json(store.load(key))


# --- Hydration ---

class TestHydrate:
    def test_empty_store_hydrates_seed_deck(self, memory_store):
        deck = DeckStore(memory_store)
        try:
            cards = deck.hydrate()
        finally:
            deck.close()
        assert cards == seed_cards()
        assert [c.question for c in cards] == [
            "What is the capital of France?",
            "What is 2 + 2?",
        ]
        assert deck.hydrated

    def test_hydrate_does_not_write(self, memory_store):
        deck = DeckStore(memory_store)
        deck.hydrate()
        deck.close()
        assert memory_store.saves == []

    def test_hydrates_stored_deck(self):
        stored = [Card(id="42", question="Q", answer="A", tags=["t"])]
        store = InMemoryKeyValueStore({STORAGE_KEY: deck_to_json(stored)})
        with DeckStore(store) as deck:
            assert list(deck.cards) == stored

    def test_stored_empty_list_is_an_empty_deck(self):
        store = InMemoryKeyValueStore({STORAGE_KEY: "[]"})
        with DeckStore(store) as deck:
            assert len(deck) == 0
            assert deck.tag_universe() == []

    @pytest.mark.parametrize("payload", [
        "{corrupt",
        '{"not": "a list"}',
        '[{"id": "1", "question": "Q"}]',
        '[{"id": "1", "question": "Q", "answer": "A", "tags": []},'
        ' {"id": "1", "question": "Q", "answer": "A", "tags": []}]',
    ])
    def test_unreadable_deck_falls_back_to_seed_and_logs(self, payload, caplog):
        store = InMemoryKeyValueStore({STORAGE_KEY: payload})
        with caplog.at_level(logging.ERROR, logger="flashdeck.deck_store"):
            with DeckStore(store) as deck:
                assert list(deck.cards) == seed_cards()
        assert "Failed to load flashcards" in caplog.text

    def test_store_read_failure_falls_back_to_seed(self):
        class BrokenStore(InMemoryKeyValueStore):
            def load(self, key):
                return None  # contract: read failures surface as absent

        with DeckStore(BrokenStore()) as deck:
            assert list(deck.cards) == seed_cards()

    def test_custom_key(self):
        stored = [Card(id="9", question="Q", answer="A")]
        store = InMemoryKeyValueStore({"other-key": deck_to_json(stored)})
        with DeckStore(store, key="other-key") as deck:
            assert list(deck.cards) == stored
            deck.add("Q2", "A2")
            deck.flush()
        assert len(deck_from_json(store.load("other-key"))) == 2

    @pytest.mark.parametrize("card_id", ["\u00b2", "9" * 5000, "\u0663"])
    def test_unusual_stored_ids_hydrate_as_stored(self, card_id):
        stored = [Card(id=card_id, question="Q", answer="A")]
        store = InMemoryKeyValueStore({STORAGE_KEY: deck_to_json(stored)})
        with DeckStore(store, id_generator=fixed_clock_ids(10)) as deck:
            assert list(deck.cards) == stored
            new_card = deck.add("Q2", "A2")
        assert new_card.id == "10"
        assert new_card.id != card_id

    def test_new_ids_skip_past_stored_ids(self):
        stored = [Card(id="5000", question="Q", answer="A")]
        store = InMemoryKeyValueStore({STORAGE_KEY: deck_to_json(stored)})
        with DeckStore(store, id_generator=fixed_clock_ids(10)) as deck:
            assert deck.add("Q2", "A2").id == "5001"


# --- Add ---

class TestAdd:
    def test_add_appends_with_fresh_id(self, deck):
        card = deck.add("Q", "A", "x, y")
        assert deck.cards[-1] == card
        assert card.id == "1000"
        assert card.tags == ["x", "y"]
        assert len(deck) == 3

    def test_add_with_empty_tags_text(self, deck):
        card = deck.add("Q", "A", "")
        assert card.tags == []

    @pytest.mark.parametrize("question, answer", [("", "A"), ("Q", ""), ("  ", " ")])
    def test_add_rejects_blank_fields_without_mutation(self, deck, memory_store, question, answer):
        before = deck.cards
        with pytest.raises(CardValidationError, match="Question and Answer cannot be empty."):
            deck.add(question, answer, "x")
        deck.flush()
        assert deck.cards == before
        assert memory_store.saves == []
        assert "x" not in deck.tag_universe()

    def test_ids_are_unique_and_increasing(self, deck):
        ids = [int(deck.add(f"Q{i}", "A").id) for i in range(5)]
        assert ids == sorted(ids)
        assert len(set(ids)) == 5

    def test_add_persists_snapshot(self, deck, memory_store):
        card = deck.add("Q", "A", "x")
        deck.flush()
        assert _persisted(memory_store)[-1] == card
        assert list(_persisted(memory_store)) == list(deck.cards)


# --- Update ---

class TestUpdate:
    def test_update_replaces_in_place(self, deck):
        updated = deck.update("1", "Capital of France?", "Paris", "Geography, Europe")
        assert deck.cards[0] == updated
        assert updated.id == "1"
        assert updated.tags == ["Geography", "Europe"]
        assert [c.id for c in deck.cards] == ["1", "2"]

    def test_update_unknown_id_is_noop(self, deck, memory_store):
        before = deck.cards
        assert deck.update("missing", "Q", "A", "") is None
        deck.flush()
        assert deck.cards == before
        assert memory_store.saves == []

    def test_update_rejects_blank_fields(self, deck):
        before = deck.cards
        with pytest.raises(CardValidationError):
            deck.update("1", "Q", "   ", "")
        assert deck.cards == before

    def test_update_persists_snapshot(self, deck, memory_store):
        deck.update("2", "What is 3 + 3?", "6", "Math")
        deck.flush()
        assert _persisted(memory_store)[1].answer == "6"


# --- Remove ---

class TestRemove:
    def test_remove_deletes_card(self, deck):
        removed = deck.remove("1")
        assert removed.id == "1"
        assert len(deck) == 1
        assert deck.get("1") is None

    def test_remove_unknown_id_is_noop(self, deck, memory_store):
        assert deck.remove("missing") is None
        deck.flush()
        assert len(deck) == 2
        assert memory_store.saves == []

    def test_add_then_remove_restores_deck_and_tags(self, deck):
        cards_before = deck.cards
        tags_before = deck.tag_universe()
        card = deck.add("Q", "A", "Fresh, Math")
        assert deck.tag_universe() == tags_before + ["Fresh"]
        deck.remove(card.id)
        assert deck.cards == cards_before
        assert deck.tag_universe() == tags_before

    def test_remove_last_card_persists_empty_deck(self, deck, memory_store):
        deck.remove("1")
        deck.remove("2")
        deck.flush()
        assert memory_store.load(STORAGE_KEY) == "[]"


# --- Tag universe ---

def test_tag_universe_is_first_seen_order_and_stable(deck):
    deck.add("Q1", "A1", "Math, Algebra")
    deck.add("Q2", "A2", "Algebra, Europe, Geography")
    assert deck.tag_universe() == ["Geography", "Math", "Algebra", "Europe"]
    assert deck.tag_universe() == deck.tag_universe()


def test_tag_universe_drops_tag_when_last_card_loses_it(deck):
    deck.update("2", "What is 2 + 2?", "4", "")
    assert deck.tag_universe() == ["Geography"]


# --- Persistence accounting ---

def test_each_mutation_persists_exactly_one_snapshot(memory_store):
    deck = DeckStore(memory_store, id_generator=fixed_clock_ids())
    deck.hydrate()
    card = deck.add("Q", "A", "t")
    deck.update(card.id, "Q2", "A2", "t")
    deck.remove("1")
    deck.remove("missing")
    deck.close()

    assert len(memory_store.saves) == 3
    last = json.loads(memory_store.saves[-1][1])
    assert [record["id"] for record in last] == ["2", card.id]
    assert last[-1]["question"] == "Q2"


def test_failed_write_is_retried_by_next_mutation():
    store = RecordingStore(fail_on=[1])
    deck = DeckStore(store, id_generator=fixed_clock_ids())
    deck.hydrate()
    first = deck.add("Q1", "A1")
    deck.flush()
    assert store.load(STORAGE_KEY) is None
    assert deck.writer.failed_writes == 1

    deck.add("Q2", "A2")
    deck.close()
    assert first in _persisted(store)
    assert len(_persisted(store)) == 4


def test_mutations_survive_reload(memory_store):
    with DeckStore(memory_store, id_generator=fixed_clock_ids()) as deck:
        deck.add("Q", "A", "x")
        deck.remove("1")
        expected = deck.cards

    with DeckStore(memory_store) as reloaded:
        assert reloaded.cards == expected


# --- Subscriptions ---

def test_listeners_run_after_each_committed_mutation(deck):
    calls = []

    def listener(store):
        calls.append(len(store))

    deck.subscribe(listener)
    deck.add("Q", "A")
    deck.remove("missing")
    deck.remove("1")
    assert calls == [3, 2]

    deck.unsubscribe(listener)
    deck.add("Q", "A")
    assert calls == [3, 2]
