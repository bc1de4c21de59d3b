# src/taskr_voice/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (storage/stores/recognizer/TTS/dispatch).
"""

from __future__ import annotations

import asyncio
import logging

from ..chat.chat_models import Author, Role
from ..chat.chat_store import ChatStore
from ..config import get_settings
from ..core.dispatcher import Dispatcher
from ..core.emitter import ResponseEmitter
from ..core.interpreter import InterpreterMode
from ..core.ports import DeferredScheduler, KeyValueStore, Recognizer, SpeechSynthesizer
from ..core.scheduler import AsyncioScheduler
from ..core.state import AppState
from ..storage.gateway import PersistenceGateway
from ..storage.kv_store import SqliteKeyValueStore
from ..tasks.task_store import TaskStore
from ..tts.engine import TTSEngine
from ..voice.console_recognizer import ConsoleRecognizer
from ..voice.session import RecognitionSessionController

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.store_db_path.parent.mkdir(parents=True, exist_ok=True)


def build_recognizer(settings, loop: asyncio.AbstractEventLoop | None = None) -> Recognizer:
    kind = str(getattr(settings, "recognizer", "console")).lower()
    if kind == "vosk":
        from ..voice.vosk_recognizer import VoskRecognizer

        return VoskRecognizer(settings.vosk_model_path, sample_rate=settings.sample_rate, loop=loop)
    if kind != "console":
        logger.warning("Unknown recognizer %r; using console recognizer.", kind)
    return ConsoleRecognizer()


def create_initial_state(
    *,
    settings=None,
    loop: asyncio.AbstractEventLoop | None = None,
    kv: KeyValueStore | None = None,
    recognizer: Recognizer | None = None,
    speech: SpeechSynthesizer | None = None,
    scheduler: DeferredScheduler | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Every collaborator is injectable, which keeps tests deterministic.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    if kv is None:
        kv = SqliteKeyValueStore(settings.store_db_path)
    gateway = PersistenceGateway(kv)

    assistant = Author(
        role=Role.ASSISTANT,
        name=settings.assistant_name,
        avatar=getattr(settings, "assistant_avatar", None) or None,
    )
    task_store = TaskStore(gateway)
    chat_store = ChatStore(gateway, assistant=assistant)

    if speech is None:
        speech = TTSEngine(enabled=settings.tts_mode, settings=settings)
    if recognizer is None:
        recognizer = build_recognizer(settings, loop)
    if scheduler is None:
        scheduler = AsyncioScheduler(loop)

    controller = RecognitionSessionController(recognizer, locale=settings.locale)
    emitter = ResponseEmitter(
        task_store=task_store,
        chat_store=chat_store,
        speech=speech,
        scheduler=scheduler,
        delay_seconds=settings.response_delay_seconds,
    )
    dispatcher = Dispatcher(
        controller=controller,
        chat_store=chat_store,
        emitter=emitter,
        mode=InterpreterMode.parse(settings.interpreter_mode),
    )

    return AppState(
        settings=settings,
        gateway=gateway,
        task_store=task_store,
        chat_store=chat_store,
        recognizer=recognizer,
        controller=controller,
        speech=speech,
        emitter=emitter,
        dispatcher=dispatcher,
        tts_enabled=bool(getattr(speech, "enabled", False)),
    )


def shutdown_state(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        state.controller.teardown()
    except Exception:
        logger.exception("Recognition controller teardown failed.")

    try:
        state.gateway.close()
    except Exception:
        logger.exception("Persistence gateway close failed.")

    try:
        state.speech.shutdown()
    except Exception:
        logger.debug("TTS shutdown failed.", exc_info=True)
