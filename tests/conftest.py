# tests/conftest.py

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from types import SimpleNamespace

import pytest

from taskr_voice.cli.bootstrap import create_initial_state
from taskr_voice.core.state import AppState
from taskr_voice.storage.gateway import PersistenceGateway

from .fakes import FakeRecognizer, FakeSpeech, ManualScheduler, MemoryKeyValueStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and core modules.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskr-test",
        assistant_name="Keshava",
        assistant_avatar="",
        locale="en-US",
        recognizer="console",
        interpreter_mode="chat",
        response_delay_seconds=1.0,
        listen_timeout_seconds=8.0,
        tts_mode=False,
        data_dir=tmp_path,
        store_db_path=tmp_path / "store.sqlite3",
        chat_export_path=tmp_path / "chat_logs.txt",
    )


@pytest.fixture()
def kv() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture()
def gateway(kv: MemoryKeyValueStore) -> Iterator[PersistenceGateway]:
    gw = PersistenceGateway(kv)
    yield gw
    gw.close()


@pytest.fixture()
def recognizer() -> FakeRecognizer:
    return FakeRecognizer()


@pytest.fixture()
def speech() -> FakeSpeech:
    return FakeSpeech()


@pytest.fixture()
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture()
def state(
    settings: SimpleNamespace,
    kv: MemoryKeyValueStore,
    recognizer: FakeRecognizer,
    speech: FakeSpeech,
    scheduler: ManualScheduler,
) -> Iterator[AppState]:
    """
    AppState wired with deterministic fakes: in-memory storage, a scripted
    recognizer, recorded speech and a virtual-clock scheduler.
    """
    app = create_initial_state(
        settings=settings,
        kv=kv,
        recognizer=recognizer,
        speech=speech,
        scheduler=scheduler,
    )
    yield app
    app.gateway.close()
