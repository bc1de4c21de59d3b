# tasks/task_store.py

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from typing import Any

from ..core.collection import OrderedCollection
from ..storage.gateway import TASKS_KEY, PersistenceGateway
from .task_models import Task, new_task_id, now_ms

logger = logging.getLogger(__name__)


class TaskStore(OrderedCollection[Task]):
    """
    In-memory task list, newest first, persisted under TASKS_KEY.

    update()/remove() on an unknown id are no-ops: a delete racing with a
    toggle (or a double delete) must not fail.
    """

    key = TASKS_KEY
    insert_at_head = True

    def __init__(self, gateway: PersistenceGateway, *, load: bool = True) -> None:
        super().__init__(gateway)
        if load:
            self.load()

    def _decode(self, raw: dict[str, Any]) -> Task:
        return Task.from_dict(raw)

    def add(self, text: str) -> Task:
        clean = (text or "").strip()
        if not clean:
            raise ValueError("task text is required")

        task_id = new_task_id()
        while self.get(task_id) is not None:
            task_id = new_task_id()

        task = Task(id=task_id, text=clean, completed=False, created_at=now_ms())
        self.append(task)
        logger.debug("Task added id=%s text=%r", task.id, task.text)
        return task

    def update(self, task_id: str, mutator: Callable[[Task], Task]) -> Task | None:
        for idx, task in enumerate(self._items):
            if task.id != task_id:
                continue
            updated = mutator(task)
            if updated.id != task.id:
                raise ValueError("mutator must not change the task id")
            self._items[idx] = updated
            self._persist()
            return updated
        return None

    def toggle(self, task_id: str) -> Task | None:
        return self.update(task_id, lambda t: replace(t, completed=not t.completed))

    def pending(self) -> list[Task]:
        return [t for t in self._items if not t.completed]
