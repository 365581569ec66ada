import threading
from pathlib import Path
from typing import Generator, List, Optional, Tuple

import pytest

from flashdeck.constants import STORAGE_KEY
from flashdeck.deck_store import DeckStore
from flashdeck.models import CardIdGenerator
from flashdeck.session import StudySession
from flashdeck.storage import DuckDBKeyValueStore, InMemoryKeyValueStore


# each test runs on cwd to its temp dir
@pytest.fixture(autouse=True)
def go_to_tmpdir(request):
    """
    Run each test with the working directory set to its tmpdir, so no stray
    .env file or database from the developer's checkout leaks into it.
    """
    tmpdir = request.getfixturevalue("tmpdir")
    with tmpdir.as_cwd():
        yield


class RecordingStore(InMemoryKeyValueStore):
    """In-memory store that remembers every save attempt, in order."""

    def __init__(self, initial=None, fail_on: Optional[List[int]] = None):
        super().__init__(initial)
        self.saves: List[Tuple[str, str]] = []
        self.fail_on = set(fail_on or [])
        self._attempts = 0
        self._record_lock = threading.Lock()

    def save(self, key: str, text: str) -> bool:
        with self._record_lock:
            self._attempts += 1
            attempt = self._attempts
        if attempt in self.fail_on:
            return False
        self.saves.append((key, text))
        return super().save(key, text)


def fixed_clock_ids(start: int = 1000) -> CardIdGenerator:
    """An id generator whose clock never moves, so ids are start, start+1, ..."""
    return CardIdGenerator(clock=lambda: start)


@pytest.fixture
def memory_store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture
def deck(memory_store: RecordingStore) -> Generator[DeckStore, None, None]:
    """A DeckStore hydrated with the seed deck, ids issued from 1000 upwards."""
    store = DeckStore(memory_store, key=STORAGE_KEY, id_generator=fixed_clock_ids())
    store.hydrate()
    try:
        yield store
    finally:
        store.close()


@pytest.fixture
def session(deck: DeckStore) -> StudySession:
    return StudySession(deck)


@pytest.fixture
def db_path_file(tmp_path: Path) -> Path:
    return tmp_path / "test_flashdeck.db"


@pytest.fixture(params=["memory", "file"])
def duckdb_store(
    request, db_path_file: Path
) -> Generator[DuckDBKeyValueStore, None, None]:
    """A DuckDBKeyValueStore, either in-memory or file-backed."""
    if request.param == "memory":
        store = DuckDBKeyValueStore(":memory:")
    else:
        store = DuckDBKeyValueStore(db_path_file)
    try:
        yield store
    finally:
        store.close()
