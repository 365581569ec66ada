"""
Serialized, fire-and-forget persistence of deck snapshots.

Callers hand over a complete snapshot after every mutation and return
immediately. A single worker thread applies the snapshots strictly in
submission order, one write at a time, so an older snapshot can never land
after a newer one. A failed write is logged and left for the next mutation's
snapshot to supersede.
"""

import logging
import queue
import threading
from typing import Sequence

from .models import Card
from .storage.kv_store import KeyValueStore
from .storage.marshalling import deck_to_json

logger = logging.getLogger(__name__)

_STOP = object()


class SnapshotWriter:
    """Queues deck snapshots and writes them to a KeyValueStore in order."""

    def __init__(self, store: KeyValueStore, key: str):
        self.store = store
        self.key = key
        self._queue: "queue.Queue[object]" = queue.Queue()
        self._seq = 0
        self._seq_lock = threading.Lock()
        self.last_written_seq = 0
        self.failed_writes = 0
        self._closed = False
        self._worker = threading.Thread(
            target=self._run, name="flashdeck-snapshot-writer", daemon=True
        )
        self._worker.start()

    @property
    def closed(self) -> bool:
        return self._closed

    def submit(self, cards: Sequence[Card]) -> int:
        """
        Serialize the snapshot now and queue it for writing.

        Returns:
            int: Sequence number of the queued snapshot.

        Raises:
            RuntimeError: If the writer has been closed.
        """
        if self._closed:
            raise RuntimeError("SnapshotWriter is closed.")
        text = deck_to_json(cards)
        with self._seq_lock:
            self._seq += 1
            seq = self._seq
            self._queue.put((seq, text))
        logger.debug(f"Queued deck snapshot #{seq} ({len(cards)} cards).")
        return seq

    def flush(self) -> None:
        """Block until every queued snapshot has been attempted."""
        self._queue.join()

    def close(self) -> None:
        """Flush pending snapshots and stop the worker. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        self._queue.put(_STOP)
        self._worker.join()

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                seq, text = item
                self._write(seq, text)
            finally:
                self._queue.task_done()

    def _write(self, seq: int, text: str) -> None:
        try:
            ok = self.store.save(self.key, text)
        except Exception as e:
            logger.exception(f"Unexpected error writing deck snapshot #{seq}: {e}")
            ok = False
        if ok:
            self.last_written_seq = seq
            logger.debug(f"Deck snapshot #{seq} written.")
        else:
            self.failed_writes += 1
            logger.warning(
                f"Failed to persist deck snapshot #{seq}; "
                "it will be superseded by the next change."
            )

    def __enter__(self) -> "SnapshotWriter":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

