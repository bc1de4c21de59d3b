# tests/test_tts.py

from __future__ import annotations

import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Any

import pytest

from taskr_voice.tts.engine import TTSConfig, TTSEngine


def _settings(**overrides: Any) -> SimpleNamespace:
    base = {"speaker_wav": "", "xtts_speaker_name": "Ana Florence", "xtts_language": "en"}
    base.update(overrides)
    return SimpleNamespace(**base)


def test_disabled_engine_is_a_silent_noop() -> None:
    engine = TTSEngine(enabled=False)

    assert engine.enabled is False
    engine.speak("Added task: buy milk")
    engine.wait_all()
    engine.shutdown()
    engine.shutdown()


def test_missing_dependencies_disable_the_engine(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(sys.modules, "sounddevice", None)

    engine = TTSEngine(enabled=True, settings=_settings())

    assert engine.enabled is False
    engine.speak("nothing happens")
    engine.shutdown()


def test_voice_uses_existing_speaker_wav(tmp_path: Path) -> None:
    wav = tmp_path / "me.wav"
    wav.write_bytes(b"RIFF")

    cfg = TTSConfig.from_settings(_settings(speaker_wav=str(wav), xtts_language="de"))

    assert cfg.voice_kwargs() == {"language": "de", "speaker_wav": str(wav)}


def test_missing_speaker_wav_falls_back_to_named_speaker(tmp_path: Path) -> None:
    cfg = TTSConfig.from_settings(_settings(speaker_wav=str(tmp_path / "nope.wav")))

    assert cfg.speaker_wav is None
    assert cfg.voice_kwargs() == {"language": "en", "speaker": "Ana Florence"}


class _Model:
    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def tts(self, text: str, **voice: Any) -> list[float]:
        if text == "boom":
            raise RuntimeError("synthesis failed")
        self.calls.append((text, voice))
        return [0.0]


class _Player:
    def __init__(self) -> None:
        self.played: list[int] = []

    def play(self, audio: Any, rate: int) -> None:
        self.played.append(rate)

    def wait(self) -> None:
        return


def test_replies_play_in_order_and_failures_do_not_stop_the_worker(monkeypatch: pytest.MonkeyPatch) -> None:
    model, player = _Model(), _Player()

    def load(self: TTSEngine) -> bool:
        self._model = model
        self._sd = player
        return True

    monkeypatch.setattr(TTSEngine, "_load_backend", load)
    engine = TTSEngine(enabled=True, settings=_settings())
    assert engine.enabled

    engine.speak("  Added task:\n buy milk ")
    engine.speak("boom")
    engine.speak("")
    engine.speak("second")
    engine.wait_all()
    engine.shutdown()
    engine.speak("after shutdown")

    assert [text for text, _ in model.calls] == ["Added task: buy milk", "second"]
    assert model.calls[0][1] == {"language": "en", "speaker": "Ana Florence"}
    assert player.played == [24000, 24000]
