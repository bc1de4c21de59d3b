# voice/session.py

from __future__ import annotations

"""
Recognition session controller.

One owned state machine per recognizer (no module-level flags):

    IDLE --start()--> LISTENING --final result | error--> IDLE
                          |
                        stop() / recognizer session end
                          v
                      FINALIZING --> IDLE   (a late final result is still delivered once)

Every started session ends with at most one terminal event, delivered twice
in the same shape:
- synchronously to the listener (the dispatcher),
- as the result of the Future returned by start().
The future resolves to None when the session produced nothing (empty
transcript, superseded, torn down).

Recognizer callbacks must arrive on the controller's thread (the event loop).
Adapters that call back from audio threads marshal onto the loop first.
"""

import asyncio
import logging
from collections.abc import Callable
from concurrent.futures import Future
from dataclasses import dataclass
from enum import StrEnum

from ..core.errors import MalformedTranscriptError, RecognitionFailedError, SessionBusyError
from ..core.ports import Recognizer

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "en-US"


class SessionState(StrEnum):
    IDLE = "idle"
    LISTENING = "listening"
    FINALIZING = "finalizing"


@dataclass(slots=True, frozen=True)
class TranscriptReady:
    session_id: int
    text: str


@dataclass(slots=True, frozen=True)
class RecognitionFailed:
    session_id: int
    reason: str


SessionEvent = TranscriptReady | RecognitionFailed
SessionListener = Callable[[SessionEvent], None]


def normalize_transcript(text: str | None) -> str:
    clean = (text or "").strip()
    if not clean:
        raise MalformedTranscriptError("transcript is empty")
    return clean


class RecognitionSessionController:
    def __init__(
        self,
        recognizer: Recognizer,
        *,
        locale: str = DEFAULT_LOCALE,
        listener: SessionListener | None = None,
    ) -> None:
        self._recognizer = recognizer
        self._locale = locale or DEFAULT_LOCALE
        self._listener = listener

        self._state = SessionState.IDLE
        self._session_id = 0
        # Future of the session still owed a terminal event (may outlive LISTENING after stop()).
        self._pending: Future[SessionEvent | None] | None = None

        self._callbacks_registered = False
        self._destroyed = False

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def locale(self) -> str:
        return self._locale

    @property
    def session_id(self) -> int:
        return self._session_id

    @property
    def is_listening(self) -> bool:
        return self._state is SessionState.LISTENING

    def set_listener(self, listener: SessionListener | None) -> None:
        self._listener = listener

    # ---- transitions ----

    def start(self) -> Future[SessionEvent | None]:
        if self._state is not SessionState.IDLE:
            raise SessionBusyError(f"recognition session already {self._state.value}")

        self._resolve_pending()
        self._ensure_callbacks()

        self._session_id += 1
        fut: Future[SessionEvent | None] = Future()
        self._pending = fut
        self._state = SessionState.LISTENING
        logger.info("Session %d listening (locale=%s)", self._session_id, self._locale)

        try:
            self._recognizer.start(self._locale)
        except Exception as e:
            err = RecognitionFailedError(f"recognizer failed to start: {e!r}")
            if self._pending is fut:
                self._finish(RecognitionFailed(self._session_id, err.reason))

        return fut

    def stop(self) -> None:
        """Ask the recognizer to finalize. Always ends in IDLE; no-op when not listening."""
        if self._state is not SessionState.LISTENING:
            logger.debug("stop() ignored in state %s", self._state.value)
            return

        self._state = SessionState.FINALIZING
        try:
            self._recognizer.stop()
        except Exception:
            logger.warning("Recognizer stop failed (session %d)", self._session_id, exc_info=True)
        finally:
            # A result delivered synchronously by stop() has already moved us to IDLE.
            self._state = SessionState.IDLE
        logger.debug("Session %d stopped", self._session_id)

    async def listen(self) -> SessionEvent | None:
        """Start a session and wait for its single terminal event."""
        return await asyncio.wrap_future(self.start())

    def teardown(self) -> None:
        """Release the recognizer and deregister callbacks. Idempotent."""
        self._state = SessionState.IDLE
        self._resolve_pending()

        if self._callbacks_registered:
            try:
                self._recognizer.clear_callbacks()
            except Exception:
                logger.warning("Recognizer clear_callbacks failed", exc_info=True)
            self._callbacks_registered = False

        if not self._destroyed:
            self._destroyed = True
            try:
                self._recognizer.destroy()
            except Exception:
                logger.warning("Recognizer destroy failed", exc_info=True)
            logger.info("Recognition controller torn down.")

    # ---- recognizer callbacks ----

    def _ensure_callbacks(self) -> None:
        if self._callbacks_registered:
            return
        self._recognizer.set_callbacks(
            on_session_start=self._on_session_start,
            on_session_end=self._on_session_end,
            on_final_result=self._on_final_result,
            on_error=self._on_error,
        )
        self._callbacks_registered = True
        self._destroyed = False

    def _on_session_start(self) -> None:
        logger.debug("Recognizer reports speech start (session %d)", self._session_id)

    def _on_session_end(self) -> None:
        logger.debug("Recognizer reports speech end (session %d)", self._session_id)
        if self._state is SessionState.LISTENING:
            self._state = SessionState.IDLE

    def _on_final_result(self, text: str) -> None:
        if self._pending is None:
            logger.debug("Final result without an active session ignored")
            return

        try:
            clean = normalize_transcript(text)
        except MalformedTranscriptError:
            logger.debug("Session %d produced an empty transcript; discarded", self._session_id)
            self._finish(None)
            return

        self._finish(TranscriptReady(self._session_id, clean))

    def _on_error(self, reason: str) -> None:
        if self._pending is None:
            logger.debug("Recognizer error without an active session ignored: %s", reason)
            return
        self._finish(RecognitionFailed(self._session_id, str(reason or "unknown error")))

    # ---- helpers ----

    def _finish(self, event: SessionEvent | None) -> None:
        fut = self._pending
        self._pending = None
        self._state = SessionState.FINALIZING
        try:
            if isinstance(event, RecognitionFailed):
                logger.warning("Session %d failed: %s", event.session_id, event.reason)
            if event is not None and self._listener is not None:
                try:
                    self._listener(event)
                except Exception:
                    logger.exception("Session listener failed for %r", event)
        finally:
            self._state = SessionState.IDLE
            if fut is not None and not fut.done():
                fut.set_result(event)

    def _resolve_pending(self) -> None:
        fut = self._pending
        self._pending = None
        if fut is not None and not fut.done():
            fut.set_result(None)
