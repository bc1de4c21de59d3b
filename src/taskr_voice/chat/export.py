# chat/export.py

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from .chat_models import ChatMessage

logger = logging.getLogger(__name__)


def format_chat_log(messages: Iterable[ChatMessage]) -> str:
    """One line per message: "[HH:MM:SS] name: text" (local time)."""
    lines = []
    for m in messages:
        ts = m.created_at.astimezone().strftime("%H:%M:%S")
        text = " ".join(m.text.splitlines())
        lines.append(f"[{ts}] {m.author.name}: {text}")
    return "\n".join(lines)


def write_chat_log(messages: Iterable[ChatMessage], path: str | Path) -> Path:
    """Write the flattened log atomically. Returns the final path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(format_chat_log(messages), "utf-8")
    os.replace(tmp, path)

    logger.info("Exported chat log to %s", path)
    return path
