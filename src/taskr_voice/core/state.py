# src/taskr_voice/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..chat.chat_store import ChatStore
from ..storage.gateway import PersistenceGateway
from ..tasks.task_store import TaskStore
from ..voice.session import RecognitionSessionController
from .dispatcher import Dispatcher
from .emitter import ResponseEmitter
from .ports import Recognizer, SpeechSynthesizer


@dataclass
class AppState:
    # Settings object (real Settings or a test namespace).
    settings: Any

    gateway: PersistenceGateway
    task_store: TaskStore
    chat_store: ChatStore

    recognizer: Recognizer
    controller: RecognitionSessionController
    speech: SpeechSynthesizer
    emitter: ResponseEmitter
    dispatcher: Dispatcher

    tts_enabled: bool = False
