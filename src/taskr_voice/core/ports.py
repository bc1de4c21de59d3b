# src/taskr_voice/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps recognizers/storage/speech engines swappable and makes testing easier.
"""

from collections.abc import Callable
from typing import Protocol

SessionCallback = Callable[[], None]
TextCallback = Callable[[str], None]


class KeyValueStore(Protocol):
    """Durable key-value storage. Implementations may raise on failure."""

    def load(self, key: str) -> bytes | None: ...
    def save(self, key: str, data: bytes) -> None: ...


class Recognizer(Protocol):
    """
    Callback-based speech-to-text engine.

    Exactly one of on_final_result / on_error fires per started session
    (or neither, if destroyed first).
    """

    def set_callbacks(
            self,
            *,
            on_session_start: SessionCallback,
            on_session_end: SessionCallback,
            on_final_result: TextCallback,
            on_error: TextCallback,
    ) -> None: ...

    def clear_callbacks(self) -> None: ...
    def start(self, locale: str) -> None: ...
    def stop(self) -> None: ...
    def destroy(self) -> None: ...


class SpeechSynthesizer(Protocol):
    def speak(self, text: str) -> None: ...
    def wait_all(self) -> None: ...
    def shutdown(self) -> None: ...


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class DeferredScheduler(Protocol):
    """Runs a callable once after `delay` seconds; returns a cancel handle."""

    def call_later(self, delay: float, fn: Callable[[], None]) -> Cancellable: ...
