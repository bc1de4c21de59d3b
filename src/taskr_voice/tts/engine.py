# src/taskr_voice/tts/engine.py

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

XTTS_MODEL_NAME = "tts_models/multilingual/multi-dataset/xtts_v2"
DEFAULT_SAMPLE_RATE = 24000

_STOP = object()


@dataclass(frozen=True, slots=True)
class TTSConfig:
    """Voice selection resolved once from settings: a cloning WAV if it exists, else a built-in speaker."""

    language: str
    speaker_wav: Path | None
    speaker_name: str

    @classmethod
    def from_settings(cls, settings: Any) -> TTSConfig:
        speaker_name = getattr(settings, "xtts_speaker_name", "Ana Florence")
        wav = (getattr(settings, "speaker_wav", "") or "").strip()
        speaker_wav: Path | None = None
        if wav:
            if Path(wav).is_file():
                speaker_wav = Path(wav)
            else:
                logger.warning("speaker_wav does not exist: %s. Using speaker %r.", wav, speaker_name)
        return cls(
            language=getattr(settings, "xtts_language", "en"),
            speaker_wav=speaker_wav,
            speaker_name=speaker_name,
        )

    def voice_kwargs(self) -> dict[str, Any]:
        if self.speaker_wav is not None:
            return {"language": self.language, "speaker_wav": str(self.speaker_wav)}
        return {"language": self.language, "speaker": self.speaker_name}


class TTSEngine:
    """
    SpeechSynthesizer backed by XTTS; playback on one worker thread, in order.

    The engine disables itself when torch/TTS/sounddevice are missing, so a
    disabled engine is a valid no-op synthesizer. shutdown() drops replies
    that have not started playing yet.
    """

    def __init__(self, enabled: bool, settings: Any = None) -> None:
        self.enabled = False
        self._queue: queue.Queue[Any] = queue.Queue()
        self._worker: threading.Thread | None = None
        self._model: Any = None
        self._sd: Any = None
        self._sample_rate = DEFAULT_SAMPLE_RATE
        self._closed = False

        if not enabled:
            logger.info("TTS disabled.")
            return
        if not self._load_backend():
            return

        cfg = TTSConfig.from_settings(settings)
        self.enabled = True
        self._worker = threading.Thread(target=self._playback_worker, args=(cfg,), daemon=True)
        self._worker.start()
        logger.info("TTS ready (sample_rate=%s, voice=%s).", self._sample_rate, cfg.speaker_wav or cfg.speaker_name)

    def _load_backend(self) -> bool:
        # NOTE: imports can be slow, log first so the user isn't stuck in silence.
        logger.info("TTS enabling: importing torch/TTS/sounddevice... this may take a while.")
        try:
            import sounddevice as sd  # type: ignore
            import torch  # type: ignore
            from TTS.api import TTS  # type: ignore
        except Exception as e:
            logger.warning("TTS dependencies missing (install the 'tts' extra): %r", e)
            return False

        device = "cuda" if torch.cuda.is_available() else "cpu"
        try:
            logger.info("Loading XTTS on %s. First run downloads the model.", device)
            self._model = TTS(XTTS_MODEL_NAME).to(device)
        except Exception as e:
            logger.error("Failed to initialize XTTS model: %r", e)
            return False

        rate = getattr(getattr(self._model, "synthesizer", None), "output_sample_rate", None)
        if isinstance(rate, int) and rate > 0:
            self._sample_rate = rate
        self._sd = sd
        return True

    def _playback_worker(self, cfg: TTSConfig) -> None:
        voice = cfg.voice_kwargs()
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                if self._closed:
                    continue
                try:
                    audio = self._model.tts(text=item, **voice)
                    self._sd.play(audio, self._sample_rate)
                    self._sd.wait()
                except Exception as e:
                    logger.error("TTS failed for reply (%d chars): %r", len(item), e)
            finally:
                self._queue.task_done()

    def speak(self, text: str) -> None:
        """Queue text for playback; no-op when disabled or shut down."""
        clean = " ".join(str(text or "").split())
        if not clean or not self.enabled or self._closed:
            return
        self._queue.put(clean)

    def wait_all(self) -> None:
        if self._worker is not None:
            self._queue.join()

    def shutdown(self) -> None:
        """Stop the worker; idempotent."""
        if self._closed:
            return
        self._closed = True
        if self._worker is None:
            return
        logger.info("Stopping TTS worker...")
        self._queue.put(_STOP)
        self._queue.join()
        self._worker.join(timeout=2.0)
        logger.info("TTS stopped.")
