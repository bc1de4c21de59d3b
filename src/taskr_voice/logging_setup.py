# src/taskr_voice/logging_setup.py

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FILE_NAME = "taskr.log"
LOG_FILE_MAX_BYTES = 2_000_000
LOG_FILE_BACKUPS = 3

# Background threads (persistence writer, audio callback) are chatty at INFO/DEBUG;
# the console only shows their warnings. Longest matching prefix wins.
CONSOLE_MIN_LEVELS: dict[str, int] = {
    "taskr_voice.": logging.NOTSET,
    "taskr_voice.storage.": logging.WARNING,
    "taskr_voice.voice.vosk_recognizer": logging.WARNING,
    "taskr_voice.tts.": logging.INFO,
}
THIRD_PARTY_MIN_LEVEL = logging.ERROR


class _ConsoleNoiseFilter(logging.Filter):
    """Keep the REPL readable: app logs pass, background workers and third-party libs only when loud."""

    def __init__(self, min_levels: dict[str, int] | None = None) -> None:
        super().__init__()
        levels = CONSOLE_MIN_LEVELS if min_levels is None else min_levels
        self._prefixes = sorted(levels.items(), key=lambda kv: len(kv[0]), reverse=True)

    def filter(self, record: logging.LogRecord) -> bool:
        for prefix, min_level in self._prefixes:
            if record.name.startswith(prefix):
                return record.levelno >= min_level
        return record.levelno >= THIRD_PARTY_MIN_LEVEL


def parse_level(level: int | str, default: int = logging.INFO) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    return value if isinstance(value, int) else default


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskr",
    console_level: int | str = logging.INFO,
    file_level: int | str = logging.DEBUG,
) -> Path:
    """
    Console handler on stderr (so it doesn't mix with the REPL prompt) plus a
    size-capped file handler with everything. Returns the log file path.

    Call this ONCE, very early (before first logger.info).
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(parse_level(console_level))
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding="utf-8",
    )
    file_handler.setLevel(parse_level(file_level, logging.DEBUG))
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    logging.captureWarnings(True)
    return log_file
