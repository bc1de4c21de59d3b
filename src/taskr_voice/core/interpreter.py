# src/taskr_voice/core/interpreter.py

from __future__ import annotations

"""
Keyword command interpreter.

Pure: no I/O, no state. The dispatcher/emitter act on the result.
"""

from dataclasses import dataclass
from enum import StrEnum

from .errors import MalformedTranscriptError

TASK_KEYWORDS = ("task", "remind")
LIST_KEYWORDS = ("list", "show")

LIST_PLACEHOLDER = "Here are your pending tasks: ... (Fetching from storage)"


class CommandKind(StrEnum):
    CREATE_TASK = "create_task"
    LIST_TASKS = "list_tasks"
    GENERIC_QUERY = "generic_query"


class InterpreterMode(StrEnum):
    """
    chat:  keyword classification, replies go to the chat transcript.
    tasks: every utterance is a task (dedicated capture screen), spoken confirmation only.
    """

    CHAT = "chat"
    TASKS = "tasks"

    @classmethod
    def parse(cls, raw: str | None, default: InterpreterMode | None = None) -> InterpreterMode:
        fallback = default or cls.CHAT
        if not raw:
            return fallback
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return fallback


@dataclass(slots=True, frozen=True)
class ClassifiedCommand:
    kind: CommandKind
    text: str
    response: str
    mode: InterpreterMode = InterpreterMode.CHAT


def _contains_any(haystack: str, needles: tuple[str, ...]) -> bool:
    return any(n in haystack for n in needles)


def classify(transcript: str, mode: InterpreterMode = InterpreterMode.CHAT) -> ClassifiedCommand:
    text = (transcript or "").strip()
    if not text:
        raise MalformedTranscriptError("empty transcript")

    if mode is InterpreterMode.TASKS:
        return ClassifiedCommand(
            kind=CommandKind.CREATE_TASK,
            text=text,
            response=f"Added task: {text}",
            mode=mode,
        )

    lower = text.lower()

    if _contains_any(lower, TASK_KEYWORDS):
        return ClassifiedCommand(
            kind=CommandKind.CREATE_TASK,
            text=text,
            response=f'I\'ve added "{text}" to your task list.',
            mode=mode,
        )

    # Informational only: the task collection is intentionally not read here.
    if _contains_any(lower, LIST_KEYWORDS):
        return ClassifiedCommand(
            kind=CommandKind.LIST_TASKS,
            text=text,
            response=LIST_PLACEHOLDER,
            mode=mode,
        )

    return ClassifiedCommand(
        kind=CommandKind.GENERIC_QUERY,
        text=text,
        response=f'I heard: "{text}". Is this a task?',
        mode=mode,
    )
