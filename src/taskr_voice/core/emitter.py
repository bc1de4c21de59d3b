# src/taskr_voice/core/emitter.py

from __future__ import annotations

"""
Response emitter.

Ordering guarantees for one classified command:
1. CreateTask: the Task is in the TaskStore before anything else happens,
2. the assistant chat message is appended only after `delay_seconds`
   (the "thinking" pause), as a deferred unit with a cancel handle,
3. speech is fire-and-forget; its failures are logged and swallowed.
"""

import logging

from ..chat.chat_store import ChatStore
from ..tasks.task_store import TaskStore
from .interpreter import ClassifiedCommand, CommandKind, InterpreterMode
from .ports import Cancellable, DeferredScheduler, SpeechSynthesizer

logger = logging.getLogger(__name__)

RESPONSE_DELAY_SECONDS = 1.0


class ResponseEmitter:
    def __init__(
        self,
        *,
        task_store: TaskStore,
        chat_store: ChatStore,
        speech: SpeechSynthesizer,
        scheduler: DeferredScheduler,
        delay_seconds: float = RESPONSE_DELAY_SECONDS,
    ) -> None:
        self.task_store = task_store
        self.chat_store = chat_store
        self.speech = speech
        self.scheduler = scheduler
        self.delay_seconds = max(0.0, float(delay_seconds))

    def speak(self, text: str) -> None:
        try:
            self.speech.speak(text)
        except Exception:
            logger.exception("Speech synthesis failed for %r", text)

    def emit(self, command: ClassifiedCommand) -> Cancellable | None:
        if command.kind is CommandKind.CREATE_TASK:
            task = self.task_store.add(command.text)
            logger.info("Task created id=%s text=%r", task.id, task.text)

        if command.mode is InterpreterMode.TASKS:
            self.speak(command.response)
            return None

        response = command.response

        def deliver() -> None:
            self.chat_store.add_assistant_message(response)
            self.speak(response)

        logger.debug("Assistant reply scheduled in %.2fs: %r", self.delay_seconds, response)
        return self.scheduler.call_later(self.delay_seconds, deliver)
