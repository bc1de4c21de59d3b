# src/taskr_voice/core/dispatcher.py

from __future__ import annotations

"""
Command dispatcher.

Glue between the session controller and the stores:

    TranscriptReady -> (chat mode: user message) -> classify -> emit
    RecognitionFailed -> logged, nothing is appended

The controller calls handle_event() synchronously as its listener, so every
terminal event is processed exactly once and before any deferred reply fires.
"""

import logging

from ..chat.chat_store import ChatStore
from ..voice.session import (
    RecognitionFailed,
    RecognitionSessionController,
    SessionEvent,
    TranscriptReady,
    normalize_transcript,
)
from .emitter import ResponseEmitter
from .errors import MalformedTranscriptError
from .interpreter import ClassifiedCommand, InterpreterMode, classify
from .ports import Cancellable

logger = logging.getLogger(__name__)


class Dispatcher:
    def __init__(
        self,
        *,
        controller: RecognitionSessionController,
        chat_store: ChatStore,
        emitter: ResponseEmitter,
        mode: InterpreterMode = InterpreterMode.CHAT,
    ) -> None:
        self.controller = controller
        self.chat_store = chat_store
        self.emitter = emitter
        self.mode = mode

        self.last_command: ClassifiedCommand | None = None
        self.last_handle: Cancellable | None = None

        controller.set_listener(self.handle_event)

    def handle_event(self, event: SessionEvent) -> None:
        if isinstance(event, RecognitionFailed):
            logger.info("Recognition failed (session %d): %s", event.session_id, event.reason)
            return
        if isinstance(event, TranscriptReady):
            self.handle_text(event.text)

    def handle_text(self, text: str) -> ClassifiedCommand | None:
        try:
            clean = normalize_transcript(text)
        except MalformedTranscriptError:
            logger.debug("Empty input ignored")
            return None

        if self.mode is InterpreterMode.CHAT:
            self.chat_store.add_user_message(clean)

        command = classify(clean, self.mode)
        logger.info("Classified %r as %s (%s mode)", clean, command.kind.value, self.mode.value)

        self.last_command = command
        self.last_handle = self.emitter.emit(command)
        return command

    def submit_text(self, text: str) -> ClassifiedCommand | None:
        """Typed input (no recognition session involved)."""
        return self.handle_text(text)

    async def listen_once(self) -> SessionEvent | None:
        """
        Run one recognition session to its terminal event.

        The event has already been handled (via the listener) when this returns.
        SessionBusyError propagates: the caller asked for a second concurrent session.
        """
        return await self.controller.listen()
