# tasks/task_models.py

from __future__ import annotations

import math
import time
import uuid
from dataclasses import dataclass
from typing import Any


def now_ms() -> int:
    return int(time.time() * 1000)


def new_task_id() -> str:
    return uuid.uuid4().hex


@dataclass(slots=True, frozen=True)
class Task:
    id: str
    text: str
    completed: bool
    created_at: int  # epoch milliseconds

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "completed": self.completed,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Task:
        """Raises ValueError/TypeError/KeyError on malformed input."""
        task_id = raw["id"]
        text = raw["text"]
        if not isinstance(task_id, str) or not task_id:
            raise ValueError("task id must be a non-empty string")
        if not isinstance(text, str) or not text.strip():
            raise ValueError("task text must be a non-empty string")

        created_at = raw.get("createdAt", 0)
        if isinstance(created_at, bool) or not isinstance(created_at, (int, float)):
            raise TypeError("createdAt must be a number")
        if not math.isfinite(created_at):
            raise ValueError("createdAt must be finite")

        completed = raw.get("completed", False)
        if not isinstance(completed, bool):
            raise TypeError("completed must be a boolean")

        return cls(
            id=task_id,
            text=text,
            completed=completed,
            created_at=int(created_at),
        )
