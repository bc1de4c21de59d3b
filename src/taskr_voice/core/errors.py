# src/taskr_voice/core/errors.py

from __future__ import annotations

"""
Error taxonomy for the voice core.

Only SessionBusyError is meant to reach a caller (the UI decides what to do
with a rejected start). Everything else is absorbed where it is raised and
turned into a log line or a notification, so the session machine always ends
up back in IDLE.
"""


class TaskrError(Exception):
    """Base class for all application errors."""


class SessionBusyError(TaskrError):
    """start() was requested while a recognition session is already active."""


class RecognitionFailedError(TaskrError):
    """The recognizer reported an error (or failed to start/stop)."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class PersistenceError(TaskrError):
    """Loading or saving a collection failed."""

    def __init__(self, key: str, message: str) -> None:
        super().__init__(f"{key}: {message}")
        self.key = key


class MalformedTranscriptError(TaskrError):
    """Transcript is empty or whitespace-only."""
