# src/taskr_voice/core/collection.py

from __future__ import annotations

"""
Owned, ordered, persisted collection.

Shared base of TaskStore and ChatStore:
- the deque is private; readers get tuple snapshots,
- every mutation is followed by a fire-and-forget write of the whole collection,
- load() is tolerant: unreadable data means an empty collection, malformed
  entries are skipped one by one.
"""

import logging
from collections import deque
from collections.abc import Iterator
from typing import Any, Generic, Protocol, TypeVar

from ..storage.gateway import PersistenceGateway

logger = logging.getLogger(__name__)


class _Identified(Protocol):
    @property
    def id(self) -> str: ...

    def to_dict(self) -> dict[str, Any]: ...


T = TypeVar("T", bound=_Identified)


class OrderedCollection(Generic[T]):
    key: str = ""
    insert_at_head: bool = False

    def __init__(self, gateway: PersistenceGateway) -> None:
        self._gateway = gateway
        self._items: deque[T] = deque()

    # ---- subclass hooks ----

    def _decode(self, raw: dict[str, Any]) -> T:
        raise NotImplementedError

    def _on_loaded(self) -> None:
        return

    # ---- loading / persistence ----

    def load(self) -> None:
        items: list[T] = []
        skipped = 0
        seen: set[str] = set()
        for raw in self._gateway.load_collection(self.key):
            try:
                item = self._decode(raw)
            except (KeyError, TypeError, ValueError, OverflowError, OSError):
                skipped += 1
                continue
            if item.id in seen:
                skipped += 1
                continue
            seen.add(item.id)
            items.append(item)

        self._items = deque(items)
        if skipped:
            logger.warning("Skipped %d malformed entries while loading %s", skipped, self.key)
        logger.info("Loaded %s: %d items", self.key, len(self._items))
        self._on_loaded()

    def _persist(self) -> None:
        self._gateway.save_collection(self.key, [item.to_dict() for item in self._items])

    # ---- read API ----

    def items(self) -> tuple[T, ...]:
        return tuple(self._items)

    def get(self, item_id: str) -> T | None:
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(tuple(self._items))

    # ---- mutations ----

    def append(self, item: T) -> None:
        if self.get(item.id) is not None:
            raise ValueError(f"duplicate id in {self.key}: {item.id}")
        if self.insert_at_head:
            self._items.appendleft(item)
        else:
            self._items.append(item)
        self._persist()

    def remove(self, item_id: str) -> bool:
        """Delete by id. Returns False (and writes nothing) when absent."""
        for idx, item in enumerate(self._items):
            if item.id == item_id:
                del self._items[idx]
                self._persist()
                return True
        return False
