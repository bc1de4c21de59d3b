# voice/vosk_recognizer.py

from __future__ import annotations

"""
Offline microphone recognizer (Vosk + sounddevice).

Optional dependencies: imported on first start(), so the app runs without them.
Audio arrives on the sounddevice thread; callbacks are marshalled onto the
event loop given at construction time.
"""

import json
import logging
import threading
from pathlib import Path
from typing import Any

from ..core.ports import SessionCallback, TextCallback

logger = logging.getLogger(__name__)

BLOCK_SIZE = 8000


class VoskRecognizer:
    def __init__(self, model_path: str | Path, *, sample_rate: int = 16000, loop: Any = None) -> None:
        self._model_path = Path(model_path)
        self._sample_rate = int(sample_rate)
        self._loop = loop

        self._callbacks: dict[str, Any] = {}
        self._lock = threading.Lock()
        self._active = False

        self._model: Any = None
        self._rec: Any = None
        self._stream: Any = None

    # ---- callback plumbing ----

    def set_callbacks(
        self,
        *,
        on_session_start: SessionCallback,
        on_session_end: SessionCallback,
        on_final_result: TextCallback,
        on_error: TextCallback,
    ) -> None:
        self._callbacks = {
            "start": on_session_start,
            "end": on_session_end,
            "final": on_final_result,
            "error": on_error,
        }

    def clear_callbacks(self) -> None:
        self._callbacks = {}

    def _emit(self, name: str, *args: Any) -> None:
        cb = self._callbacks.get(name)
        if cb is None:
            return
        if self._loop is not None:
            self._loop.call_soon_threadsafe(cb, *args)
        else:
            cb(*args)

    # ---- lifecycle ----

    def _ensure_model(self) -> Any:
        if self._model is not None:
            return self._model

        # NOTE: imports and model load are slow, log first so the user isn't stuck in silence.
        logger.info("Loading Vosk model from %s ...", self._model_path)
        from vosk import Model  # type: ignore

        if not self._model_path.exists():
            raise FileNotFoundError(f"Vosk model not found: {self._model_path}")
        self._model = Model(str(self._model_path))
        logger.info("Vosk model loaded.")
        return self._model

    def start(self, locale: str) -> None:
        import sounddevice as sd  # type: ignore
        from vosk import KaldiRecognizer  # type: ignore

        model = self._ensure_model()
        logger.debug("Vosk session start (locale=%s is fixed by the model)", locale)

        with self._lock:
            if self._active:
                raise RuntimeError("vosk recognizer already started")
            self._rec = KaldiRecognizer(model, self._sample_rate)
            self._stream = sd.RawInputStream(
                samplerate=self._sample_rate,
                blocksize=BLOCK_SIZE,
                dtype="int16",
                channels=1,
                callback=self._audio_callback,
            )
            self._stream.start()
            self._active = True

        self._emit("start")

    def _audio_callback(self, indata, frames, time_info, status) -> None:
        if status:
            logger.debug("Audio status: %s", status)

        with self._lock:
            if not self._active or self._rec is None:
                return
            try:
                if not self._rec.AcceptWaveform(bytes(indata)):
                    return  # partial result, wait for more audio
                text = json.loads(self._rec.Result()).get("text", "")
            except Exception as e:
                self._active = False
                self._emit("error", f"vosk decode failed: {e!r}")
                self._schedule_close()
                return

            if not text.strip():
                return
            self._active = False

        self._emit("end")
        self._emit("final", text)
        self._schedule_close()

    def _schedule_close(self) -> None:
        # The stream must not be closed from inside its own callback.
        threading.Thread(target=self._close_stream, daemon=True).start()

    def _close_stream(self) -> None:
        stream = self._stream
        self._stream = None
        if stream is None:
            return
        try:
            stream.stop()
            stream.close()
        except Exception:
            logger.warning("Closing audio stream failed", exc_info=True)

    def stop(self) -> None:
        with self._lock:
            if not self._active:
                return
            self._active = False
            rec = self._rec

        self._close_stream()
        text = ""
        try:
            if rec is not None:
                text = json.loads(rec.FinalResult()).get("text", "")
        except Exception as e:
            self._emit("error", f"vosk finalize failed: {e!r}")
            return

        self._emit("end")
        self._emit("final", text)

    def destroy(self) -> None:
        with self._lock:
            self._active = False
        self._close_stream()
        self._rec = None
        logger.debug("Vosk recognizer destroyed.")
