# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
This file lists every TASKR_* variable with its default.
"""

ENV_VARS = {
    # App / logging
    "TASKR_APP_NAME": "App display name (default: taskr).",
    "TASKR_LOG_LEVEL": "Console logging level (default: INFO). The log file always gets DEBUG.",
    # Assistant persona
    "TASKR_ASSISTANT_NAME": "Name used for assistant chat messages (default: Keshava).",
    "TASKR_ASSISTANT_AVATAR": "Avatar URL stored with assistant messages.",
    # Voice session
    "TASKR_LOCALE": "Fixed recognizer locale (default: en-US).",
    "TASKR_RECOGNIZER": "console (typed text) or vosk (offline microphone). Default: console.",
    "TASKR_VOSK_MODEL_PATH": "Vosk model directory (default: <data_dir>/vosk-model-small-en-us-0.15).",
    "TASKR_SAMPLE_RATE": "Microphone sample rate for Vosk (default: 16000).",
    "TASKR_LISTEN_TIMEOUT_SECONDS": "Stop a microphone session after this many seconds without a result (default: 8.0).",
    "TASKR_LISTEN_TIMEOUT_SECONDS": "Stop a microphone session after this many seconds without a result (default: 8.0).",
    # Dispatch
    "TASKR_MODE": "chat (keyword chat) or tasks (every utterance is a task). Default: chat.",
    "TASKR_RESPONSE_DELAY_SECONDS": "Assistant 'thinking' delay before replying (default: 1.0).",
    # TTS
    "TASKR_TTS_MODE": "Speak replies with XTTS (true/false). Needs the 'tts' extra.",
    "TASKR_SPEAKER_WAV": "Optional speaker WAV path for voice cloning.",
    "TASKR_XTTS_SPEAKER_NAME": "XTTS built-in speaker name fallback (default: Ana Florence).",
    "TASKR_XTTS_LANGUAGE": "XTTS language (default: en).",
    # Paths (gitignored)
    "TASKR_DATA_DIR": "Local data directory (default: .local/taskr).",
    "TASKR_STORE_DB_PATH": "SQLite key-value store for tasks and chat (default: <data_dir>/store.sqlite3).",
    "TASKR_CHAT_EXPORT_PATH": "Default /export target (default: <data_dir>/chat_logs.txt).",
}
