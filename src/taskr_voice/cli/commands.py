# src/taskr_voice/cli/commands.py

from __future__ import annotations

import contextlib
import inspect
import logging
from collections.abc import Callable
from datetime import datetime
from typing import cast

from ..chat.export import format_chat_log, write_chat_log
from ..core.interpreter import InterpreterMode
from ..core.state import AppState
from ..tasks.task_models import Task
from ..tts.engine import TTSEngine  # concrete engine (not the Protocol)

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /tasks, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str, emit: CommandEmitter | None = None) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _task_line(i: int, task: Task) -> str:
    mark = "x" if task.completed else " "
    created = datetime.fromtimestamp(task.created_at / 1000).strftime("%Y-%m-%d %H:%M")
    return f"{i}. [{mark}] {task.text}  ({created})"


def _task_by_index(state: AppState, args: list[str]) -> Task | str:
    if not args:
        return "Usage: give the task number from /tasks."
    try:
        idx = int(args[0])
    except ValueError:
        return f"Not a task number: {args[0]}"
    tasks = state.task_store.items()
    if idx < 1 or idx > len(tasks):
        return f"No task #{idx}. There are {len(tasks)} tasks."
    return tasks[idx - 1]


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    mode = "VOICE (TTS)" if state.tts_enabled else "TEXT ONLY"
    return (
        "Status:\n"
        f"  Output: {mode}\n"
        f"  Dispatch mode: {state.dispatcher.mode.value}\n"
        f"  Session: {state.controller.state.value} (locale {state.controller.locale})\n"
        f"  Tasks: {len(state.task_store)} ({len(state.task_store.pending())} pending)\n"
        f"  Chat messages: {len(state.chat_store)}\n"
        f"  Reply delay: {state.emitter.delay_seconds:.1f}s"
    )


def cmd_tasks(state: AppState, args: list[str]) -> str:
    tasks = state.task_store.items()
    if not tasks:
        return "No tasks yet. Say a task!"
    return "\n".join(["Tasks (newest first):"] + [_task_line(i, t) for i, t in enumerate(tasks, start=1)])


def cmd_toggle(state: AppState, args: list[str]) -> str:
    found = _task_by_index(state, args)
    if isinstance(found, str):
        return found
    updated = state.task_store.toggle(found.id)
    if updated is None:
        return "Task no longer exists."
    return f"{'Completed' if updated.completed else 'Reopened'}: {updated.text}"


def cmd_delete(state: AppState, args: list[str]) -> str:
    found = _task_by_index(state, args)
    if isinstance(found, str):
        return found
    state.task_store.remove(found.id)
    return f"Deleted: {found.text}"


def cmd_chat(state: AppState, args: list[str]) -> str:
    limit = 20
    if args:
        with contextlib.suppress(ValueError):
            limit = max(1, int(args[0]))
    messages = state.chat_store.items()[-limit:]
    return format_chat_log(messages) or "Chat is empty."


def cmd_mode(state: AppState, args: list[str]) -> str:
    """
    /mode        -> show current mode
    /mode chat   -> keyword chat (tasks, list, questions)
    /mode tasks  -> every utterance becomes a task
    """
    if not args:
        return f"Dispatch mode is {state.dispatcher.mode.value}. Use /mode chat or /mode tasks."
    wanted = args[0].lower()
    if wanted not in (InterpreterMode.CHAT.value, InterpreterMode.TASKS.value):
        return "Usage: /mode chat or /mode tasks."
    state.dispatcher.mode = InterpreterMode(wanted)
    return f"Dispatch mode set to {wanted}."


def cmd_tts(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /tts          -> show status
    /tts on       -> enable TTS
    /tts off      -> disable TTS
    """
    if not args:
        return f"TTS is currently {'ON' if state.tts_enabled else 'OFF'}. Use /tts on or /tts off."

    arg = args[0].lower()

    if arg in ("on", "1", "true", "yes"):
        if state.tts_enabled:
            return "TTS is already ON."

        if emit:
            with contextlib.suppress(Exception):
                emit("[TTS] Enabling... importing deps and loading model (may take a while).")

        engine = TTSEngine(enabled=True, settings=state.settings)
        if not engine.enabled:
            return "TTS could not be enabled (missing dependencies?). See the log for details."

        state.speech = engine
        state.emitter.speech = engine
        state.tts_enabled = True
        return "TTS enabled. Replies will be spoken."

    if arg in ("off", "0", "false", "no"):
        if not state.tts_enabled:
            return "TTS is already OFF."

        if emit:
            with contextlib.suppress(Exception):
                emit("[TTS] Disabling...")

        with contextlib.suppress(Exception):
            state.speech.shutdown()

        engine = TTSEngine(enabled=False)
        state.speech = engine
        state.emitter.speech = engine
        state.tts_enabled = False
        return "TTS disabled. Replies will be text-only."

    return "Usage: /tts on or /tts off."


def cmd_export(state: AppState, args: list[str]) -> str:
    path = args[0] if args else state.settings.chat_export_path
    try:
        out = write_chat_log(state.chat_store.items(), path)
    except OSError as e:
        logger.warning("Chat export failed: %s", e)
        return f"Export failed: {e}"
    return f"Chat log written to {out}"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show session, mode and store counters.")
registry.register("tasks", cmd_tasks, help_text="List tasks (newest first).", aliases=["ls"])
registry.register("toggle", cmd_toggle, help_text="Toggle a task done/undone: /toggle N.")
registry.register("delete", cmd_delete, help_text="Delete a task: /delete N.", aliases=["rm"])
registry.register("chat", cmd_chat, help_text="Show the last N chat messages: /chat [N].")
registry.register("mode", cmd_mode, help_text="Switch dispatch mode: /mode chat | /mode tasks.")
registry.register("tts", cmd_tts, help_text="Enable/disable TTS: /tts on | /tts off.")
registry.register("export", cmd_export, help_text="Write the chat log to a file: /export [path].")
