# storage/gateway.py

from __future__ import annotations

"""
Persistence gateway.

Serializes whole ordered collections to JSON and hands them to a KeyValueStore.
It owns no data: stores call it on demand.

Durability policy (weak, by contract):
- load() never raises; missing/corrupt data yields an empty list,
- save_async() never raises and never blocks the caller; writes are queued to
  a single worker thread so they land in mutation order,
- a crash between a mutation and its queued write may lose that mutation.
"""

import json
import logging
import queue
import threading
from typing import Any

from ..core.errors import PersistenceError
from ..core.ports import KeyValueStore

logger = logging.getLogger(__name__)

TASKS_KEY = "@tasks_v1"
CHAT_KEY = "@chat_logs_v1"

_STOP = object()


class PersistenceGateway:
    def __init__(self, kv: KeyValueStore) -> None:
        self._kv = kv
        self._queue: queue.Queue[Any] = queue.Queue()
        self._closed = False

        self._worker = threading.Thread(target=self._write_worker, name="taskr-persist", daemon=True)
        self._worker.start()

    # ---- reads ----

    def load(self, key: str) -> bytes | None:
        try:
            return self._kv.load(key)
        except Exception as e:
            err = PersistenceError(key, f"load failed: {e!r}")
            logger.warning("Persistence load failed: %s", err)
            return None

    def load_collection(self, key: str) -> list[dict[str, Any]]:
        """Load a JSON array of objects. Anything else becomes []."""
        raw = self.load(key)
        if raw is None:
            return []

        try:
            data = json.loads(raw.decode("utf-8"))
        except (ValueError, RecursionError) as e:
            logger.warning("Persistence data for %s is corrupt (%s); starting empty.", key, e)
            return []

        if not isinstance(data, list):
            logger.warning("Persistence data for %s is not a list; starting empty.", key)
            return []

        return [item for item in data if isinstance(item, dict)]

    # ---- writes ----

    def save_async(self, key: str, data: bytes) -> None:
        if self._closed:
            logger.warning("Persistence gateway closed; dropping write for %s", key)
            return
        self._queue.put((key, data))

    def save_collection(self, key: str, items: list[dict[str, Any]]) -> None:
        try:
            payload = json.dumps(items, ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError):
            logger.exception("Failed to JSON-encode collection %s; write dropped.", key)
            return
        self.save_async(key, payload)

    def _write_worker(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return

                key, data = item
                try:
                    self._kv.save(key, data)
                except Exception as e:
                    err = PersistenceError(key, f"save failed: {e!r}")
                    logger.error("Persistence write dropped: %s", err)
            finally:
                self._queue.task_done()

    def flush(self) -> None:
        """Block until every queued write has been attempted."""
        self._queue.join()

    def close(self) -> None:
        """Drain pending writes and stop the worker (idempotent)."""
        if self._closed:
            return
        self._closed = True
        self._queue.put(_STOP)
        self._queue.join()
        self._worker.join(timeout=2.0)
        logger.info("Persistence gateway closed.")
