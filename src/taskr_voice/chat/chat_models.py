# chat/chat_models.py

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any


class Role(IntEnum):
    """Chat participant. Values are the wire ids of the persisted "user" object."""

    USER = 1
    ASSISTANT = 2


def _parse_created_at(value: Any) -> datetime:
    """ISO-8601 string or epoch milliseconds; always returns an aware datetime."""
    if isinstance(value, bool):
        raise TypeError("createdAt must be a string or number")
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            raise ValueError("createdAt must be finite")
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    if not isinstance(value, str):
        raise TypeError("createdAt must be a string or number")
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.astimezone()
    return parsed


@dataclass(slots=True, frozen=True)
class Author:
    role: Role
    name: str
    avatar: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"_id": int(self.role), "name": self.name}
        if self.avatar:
            out["avatar"] = self.avatar
        return out

    @classmethod
    def from_dict(cls, raw: Any) -> Author:
        if not isinstance(raw, dict):
            raise TypeError("author must be an object")
        role = Role(int(raw.get("_id", Role.USER)))
        name = raw.get("name")
        avatar = raw.get("avatar")
        return cls(
            role=role,
            name=str(name) if name else ("You" if role is Role.USER else "Assistant"),
            avatar=str(avatar) if avatar else None,
        )


def new_message_id() -> str:
    return uuid.uuid4().hex


@dataclass(slots=True, frozen=True)
class ChatMessage:
    id: str
    text: str
    created_at: datetime  # timezone-aware
    author: Author

    @property
    def is_assistant(self) -> bool:
        return self.author.role is Role.ASSISTANT

    def to_dict(self) -> dict[str, Any]:
        return {
            "_id": self.id,
            "text": self.text,
            "createdAt": self.created_at.isoformat(timespec="microseconds"),
            "user": self.author.to_dict(),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> ChatMessage:
        """Raises ValueError/TypeError/KeyError on malformed input."""
        msg_id = raw["_id"]
        if isinstance(msg_id, bool) or not isinstance(msg_id, (str, int)):
            raise TypeError("message id must be a string or integer")

        text = raw["text"]
        if not isinstance(text, str):
            raise TypeError("message text must be a string")

        created_at = _parse_created_at(raw["createdAt"])

        return cls(
            id=str(msg_id),
            text=text,
            created_at=created_at,
            author=Author.from_dict(raw.get("user")),
        )
