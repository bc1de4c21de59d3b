# voice/console_recognizer.py

from __future__ import annotations

import logging

from ..core.ports import SessionCallback, TextCallback

logger = logging.getLogger(__name__)


class ConsoleRecognizer:
    """
    Recognizer stand-in for terminals: a typed line is the "utterance".

    The console connector calls feed() with the typed text while a session is
    listening; fail() simulates a recognizer error.
    """

    def __init__(self) -> None:
        self._on_session_start: SessionCallback | None = None
        self._on_session_end: SessionCallback | None = None
        self._on_final_result: TextCallback | None = None
        self._on_error: TextCallback | None = None

        self._active = False
        self.locale: str | None = None

    @property
    def active(self) -> bool:
        return self._active

    def set_callbacks(
        self,
        *,
        on_session_start: SessionCallback,
        on_session_end: SessionCallback,
        on_final_result: TextCallback,
        on_error: TextCallback,
    ) -> None:
        self._on_session_start = on_session_start
        self._on_session_end = on_session_end
        self._on_final_result = on_final_result
        self._on_error = on_error

    def clear_callbacks(self) -> None:
        self._on_session_start = None
        self._on_session_end = None
        self._on_final_result = None
        self._on_error = None

    def start(self, locale: str) -> None:
        if self._active:
            raise RuntimeError("console recognizer already started")
        self.locale = locale
        self._active = True
        if self._on_session_start is not None:
            self._on_session_start()

    def stop(self) -> None:
        if not self._active:
            return
        self._active = False
        if self._on_session_end is not None:
            self._on_session_end()

    def destroy(self) -> None:
        self._active = False
        logger.debug("Console recognizer destroyed.")

    def feed(self, text: str) -> bool:
        """Deliver `text` as the final result. Returns False if nothing is listening."""
        if not self._active:
            return False
        self._active = False
        if self._on_session_end is not None:
            self._on_session_end()
        if self._on_final_result is not None:
            self._on_final_result(text)
        return True

    def fail(self, reason: str) -> bool:
        if not self._active:
            return False
        self._active = False
        if self._on_error is not None:
            self._on_error(reason)
        return True
