# src/taskr_voice/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- No secrets required at import time.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

ENV_PREFIX = "TASKR"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _load_dotenv_if_available() -> None:
    """Load .env locally if python-dotenv is installed. Safe no-op otherwise."""
    try:
        from dotenv import load_dotenv  # type: ignore
    except Exception:
        return
    load_dotenv(override=False)


_load_dotenv_if_available()


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Assistant persona ----
    assistant_name: str
    assistant_avatar: str

    # ---- Voice session ----
    locale: str
    recognizer: str  # "console" | "vosk"
    vosk_model_path: Path
    sample_rate: int
    listen_timeout_seconds: float

    # ---- Dispatch ----
    interpreter_mode: str  # "chat" | "tasks"
    response_delay_seconds: float

    # ---- TTS ----
    tts_mode: bool
    speaker_wav: str
    xtts_speaker_name: str
    xtts_language: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    store_db_path: Path
    chat_export_path: Path

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskr")
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        assistant_name = _env(_k("ASSISTANT_NAME"), "Keshava")
        assistant_avatar = _env(_k("ASSISTANT_AVATAR"), "https://placeimg.com/140/140/tech")

        locale = _env(_k("LOCALE"), "en-US")
        recognizer = _env(_k("RECOGNIZER"), "console").strip().lower()
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskr"))
        vosk_model_path = _env_path(_k("VOSK_MODEL_PATH"), data_dir / "vosk-model-small-en-us-0.15")
        sample_rate = _env_int(_k("SAMPLE_RATE"), 16000)
        listen_timeout_seconds = _env_float(_k("LISTEN_TIMEOUT_SECONDS"), 8.0)

        interpreter_mode = _env(_k("MODE"), "chat").strip().lower()
        response_delay_seconds = _env_float(_k("RESPONSE_DELAY_SECONDS"), 1.0)

        tts_mode = _env_bool(_k("TTS_MODE"), False)
        speaker_wav = _env(_k("SPEAKER_WAV"), "")
        xtts_speaker_name = _env(_k("XTTS_SPEAKER_NAME"), "Ana Florence")
        xtts_language = _env(_k("XTTS_LANGUAGE"), "en")

        store_db_path = _env_path(_k("STORE_DB_PATH"), data_dir / "store.sqlite3")
        chat_export_path = _env_path(_k("CHAT_EXPORT_PATH"), data_dir / "chat_logs.txt")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            assistant_name=assistant_name,
            assistant_avatar=assistant_avatar,
            locale=locale,
            recognizer=recognizer,
            vosk_model_path=vosk_model_path,
            sample_rate=sample_rate,
            listen_timeout_seconds=listen_timeout_seconds,
            interpreter_mode=interpreter_mode,
            response_delay_seconds=response_delay_seconds,
            tts_mode=tts_mode,
            speaker_wav=speaker_wav,
            xtts_speaker_name=xtts_speaker_name,
            xtts_language=xtts_language,
            data_dir=data_dir,
            store_db_path=store_db_path,
            chat_export_path=chat_export_path,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
