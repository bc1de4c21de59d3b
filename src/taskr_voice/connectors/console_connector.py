# src/taskr_voice/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..chat.chat_models import ChatMessage
from ..cli.commands import registry as command_registry
from ..core.errors import SessionBusyError
from ..core.interpreter import InterpreterMode
from ..core.state import AppState
from ..voice.console_recognizer import ConsoleRecognizer
from ..voice.session import RecognitionFailed, SessionEvent

logger = logging.getLogger(__name__)

REPLY_POLL_SECONDS = 0.1
STOP_GRACE_SECONDS = 1.0


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


def _print_message(m: ChatMessage) -> None:
    ts = m.created_at.astimezone().strftime("%Y-%m-%d %H:%M:%S")
    arrow = "<<<" if m.is_assistant else ">>>"
    print(f"[{ts}] {arrow} {m.author.name}: {m.text}", flush=True)


async def _wait_for_reply(state: AppState, seen: int) -> int:
    """Print chat messages appended after `seen` once the deferred reply lands."""
    deadline = state.emitter.delay_seconds + 2.0
    waited = 0.0
    while waited <= deadline:
        messages = state.chat_store.items()
        if len(messages) > seen and messages[-1].is_assistant:
            break
        await asyncio.sleep(REPLY_POLL_SECONDS)
        waited += REPLY_POLL_SECONDS

    messages = state.chat_store.items()
    for m in messages[seen:]:
        if m.is_assistant:
            _print_message(m)
    return len(messages)


async def _await_session(state: AppState, session: asyncio.Future, timeout: float) -> SessionEvent | None:
    """Wait for the session result; stop the recognizer once `timeout` passes without one."""
    try:
        return await asyncio.wait_for(asyncio.shield(session), timeout)
    except TimeoutError:
        logger.info("No result after %.1fs; stopping the recognition session.", timeout)
        state.controller.stop()

    # a stopped recognizer may still deliver its final result
    try:
        return await asyncio.wait_for(asyncio.shield(session), STOP_GRACE_SECONDS)
    except TimeoutError:
        session.cancel()
        return None


async def _utterance(state: AppState, text: str) -> None:
    """Run one recognition session; typed text stands in for speech when the recognizer is the console."""
    recognizer = state.recognizer
    session = asyncio.ensure_future(state.dispatcher.listen_once())
    await asyncio.sleep(0)  # let the session start

    if isinstance(recognizer, ConsoleRecognizer):
        recognizer.feed(text)
    else:
        _print_ts("[VOICE] Listening... speak now.")

    try:
        event = await _await_session(state, session, state.settings.listen_timeout_seconds)
    except SessionBusyError:
        _print_ts("[VOICE] Already listening.")
        return

    if isinstance(event, RecognitionFailed):
        _print_ts(f"[VOICE] Recognition failed: {event.reason}")
    elif event is None:
        _print_ts("[VOICE] Nothing recognized.")


async def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started (tts=%s).", state.tts_enabled)
    _print_ts("[CONSOLE] Type what you would say. Use /help for commands. Use /exit to quit.\n")

    for m in state.chat_store.items()[-5:]:
        _print_message(m)

    use_mic = not isinstance(state.recognizer, ConsoleRecognizer)
    if use_mic:
        _print_ts("[CONSOLE] Press Enter on an empty line to talk; typed lines are sent as text.")

    def emit(text: str) -> None:
        _print_ts(text)

    while True:
        try:
            user_input = (await asyncio.to_thread(input, ">>> You: ")).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        if user_input.startswith("/"):
            try:
                reply = command_registry.handle(state, user_input, emit=emit)
            except Exception:
                logger.exception("Command handler crashed.")
                reply = "Internal error while handling a command."
            if reply is not None:
                _print_ts(reply)
            continue

        seen = len(state.chat_store)
        tasks_before = len(state.task_store)

        if use_mic and not user_input:
            await _utterance(state, "")
        elif not user_input:
            continue
        elif use_mic:
            state.dispatcher.submit_text(user_input)
        else:
            await _utterance(state, user_input)

        if state.dispatcher.mode is InterpreterMode.TASKS:
            if len(state.task_store) > tasks_before:
                _print_ts(f"<<< Added task: {state.task_store.items()[0].text}")
            continue

        if len(state.chat_store) > seen:
            await _wait_for_reply(state, seen)

    logger.info("Console connector finished.")
