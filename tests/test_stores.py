# tests/test_stores.py

from __future__ import annotations

import json
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path

import pytest

from taskr_voice.chat.chat_models import Author, ChatMessage, Role
from taskr_voice.chat.chat_store import ChatStore
from taskr_voice.storage.gateway import CHAT_KEY, TASKS_KEY, PersistenceGateway
from taskr_voice.storage.kv_store import SqliteKeyValueStore
from taskr_voice.tasks.task_models import Task
from taskr_voice.tasks.task_store import TaskStore

from .fakes import MemoryKeyValueStore

ASSISTANT = Author(role=Role.ASSISTANT, name="Keshava", avatar="https://placeimg.com/140/140/tech")


def test_tasks_are_inserted_newest_first(gateway: PersistenceGateway) -> None:
    store = TaskStore(gateway)
    a = store.add("buy milk")
    b = store.add("  call mom ")

    assert [t.text for t in store.items()] == ["call mom", "buy milk"]
    assert store.items()[0] == b
    assert a.completed is False
    assert a.id != b.id


def test_add_rejects_empty_text(gateway: PersistenceGateway) -> None:
    store = TaskStore(gateway)
    with pytest.raises(ValueError):
        store.add("   ")
    assert len(store) == 0


def test_task_round_trip_through_fresh_store(gateway: PersistenceGateway) -> None:
    store = TaskStore(gateway)
    store.add("buy milk")
    done = store.add("water plants")
    store.toggle(done.id)
    gateway.flush()

    fresh = TaskStore(gateway)

    assert fresh.items() == store.items()
    assert fresh.get(done.id) is not None
    assert fresh.get(done.id).completed is True


def test_update_applies_to_one_task_and_ignores_unknown_ids(gateway: PersistenceGateway, kv: MemoryKeyValueStore) -> None:
    store = TaskStore(gateway)
    t1 = store.add("one")
    t2 = store.add("two")
    gateway.flush()
    saves_before = len(kv.saves)

    assert store.update("missing", lambda t: replace(t, completed=True)) is None
    gateway.flush()
    assert len(kv.saves) == saves_before

    updated = store.update(t1.id, lambda t: replace(t, text="one!"))
    assert updated is not None and updated.text == "one!"
    assert store.get(t2.id) == t2


def test_update_cannot_change_identity(gateway: PersistenceGateway) -> None:
    store = TaskStore(gateway)
    t = store.add("one")
    with pytest.raises(ValueError):
        store.update(t.id, lambda x: replace(x, id="other"))


def test_toggle_flips_completed(gateway: PersistenceGateway) -> None:
    store = TaskStore(gateway)
    t = store.add("one")
    assert store.toggle(t.id).completed is True
    assert store.toggle(t.id).completed is False
    assert store.toggle("missing") is None


def test_remove_twice_is_a_noop(gateway: PersistenceGateway) -> None:
    store = TaskStore(gateway)
    keep = store.add("keep")
    gone = store.add("gone")

    assert store.remove(gone.id) is True
    after_first = store.items()
    assert store.remove(gone.id) is False

    assert store.items() == after_first == (keep,)


def test_corrupted_task_data_loads_empty(kv: MemoryKeyValueStore, gateway: PersistenceGateway) -> None:
    kv.data[TASKS_KEY] = b"{not json at all"
    store = TaskStore(gateway)
    assert len(store) == 0


def test_non_list_task_data_loads_empty(kv: MemoryKeyValueStore, gateway: PersistenceGateway) -> None:
    kv.data[TASKS_KEY] = json.dumps({"id": "1", "text": "x"}).encode()
    assert len(TaskStore(gateway)) == 0


def test_malformed_entries_are_skipped(kv: MemoryKeyValueStore, gateway: PersistenceGateway) -> None:
    kv.data[TASKS_KEY] = json.dumps(
        [
            {"id": "1", "text": "good", "completed": False, "createdAt": 1700000000000},
            {"id": "2", "text": "", "completed": False, "createdAt": 1},
            {"text": "no id"},
            "garbage",
            {"id": "1", "text": "duplicate id", "completed": True, "createdAt": 2},
        ]
    ).encode()

    store = TaskStore(gateway)

    assert store.items() == (Task(id="1", text="good", completed=False, created_at=1700000000000),)


def test_infinite_created_at_is_skipped(kv: MemoryKeyValueStore, gateway: PersistenceGateway) -> None:
    kv.data[TASKS_KEY] = (
        b'[{"id": "a", "text": "x", "completed": false, "createdAt": 1e999},'
        b' {"id": "b", "text": "huge", "completed": false, "createdAt": ' + b"9" * 400 + b"},"
        b' {"id": "c", "text": "ok", "completed": false, "createdAt": 5}]'
    )

    store = TaskStore(gateway)

    assert [t.id for t in store.items()] == ["c"]


def test_deeply_nested_json_loads_empty(kv: MemoryKeyValueStore, gateway: PersistenceGateway) -> None:
    kv.data[TASKS_KEY] = b"[" * 100_000 + b"]" * 100_000
    assert len(TaskStore(gateway)) == 0


def test_non_boolean_completed_is_skipped(kv: MemoryKeyValueStore, gateway: PersistenceGateway) -> None:
    kv.data[TASKS_KEY] = json.dumps(
        [
            {"id": "1", "text": "flipped?", "completed": "false", "createdAt": 1},
            {"id": "2", "text": "numeric", "completed": 1, "createdAt": 2},
            {"id": "3", "text": "fine", "completed": True, "createdAt": 3},
        ]
    ).encode()

    store = TaskStore(gateway)

    assert store.items() == (Task(id="3", text="fine", completed=True, created_at=3),)


def test_load_failure_falls_back_to_empty(kv: MemoryKeyValueStore, gateway: PersistenceGateway) -> None:
    kv.fail_load = True
    assert len(TaskStore(gateway)) == 0


def test_save_failure_is_absorbed(kv: MemoryKeyValueStore, gateway: PersistenceGateway) -> None:
    kv.fail_save = True
    store = TaskStore(gateway)
    store.add("survives in memory")
    gateway.flush()

    assert [t.text for t in store.items()] == ["survives in memory"]
    assert TASKS_KEY not in kv.data


def test_writes_after_close_are_dropped(kv: MemoryKeyValueStore) -> None:
    gw = PersistenceGateway(kv)
    store = TaskStore(gw)
    gw.close()
    gw.close()

    store.add("not persisted")
    assert TASKS_KEY not in kv.data


def test_items_snapshot_is_not_a_live_view(gateway: PersistenceGateway) -> None:
    store = TaskStore(gateway)
    snapshot = store.items()
    store.add("later")
    assert snapshot == ()
    assert isinstance(store.items(), tuple)


# ---- chat ----


def test_empty_chat_is_seeded_with_one_welcome_message(gateway: PersistenceGateway) -> None:
    before = datetime.now().astimezone()
    chat = ChatStore(gateway, assistant=ASSISTANT)

    assert len(chat) == 1
    welcome = chat.items()[0]
    assert welcome.is_assistant
    assert welcome.author.name == "Keshava"
    assert "Keshava" in welcome.text
    assert welcome.created_at >= before


def test_chat_appends_in_order_and_round_trips(gateway: PersistenceGateway) -> None:
    chat = ChatStore(gateway, assistant=ASSISTANT)
    u = chat.add_user_message("show my list")
    a = chat.add_assistant_message("Here you go")
    gateway.flush()

    fresh = ChatStore(gateway, assistant=ASSISTANT)

    assert [m.id for m in fresh.items()][-2:] == [u.id, a.id]
    restored = fresh.get(a.id)
    assert restored == a
    assert restored.created_at == a.created_at
    assert restored.created_at.microsecond == a.created_at.microsecond
    assert restored.author.role is Role.ASSISTANT


def test_persisted_chat_is_not_reseeded(kv: MemoryKeyValueStore, gateway: PersistenceGateway) -> None:
    kv.data[CHAT_KEY] = json.dumps(
        [
            {
                "_id": 42,
                "text": "earlier",
                "createdAt": "2024-05-01T10:00:00.123456+00:00",
                "user": {"_id": 1},
            }
        ]
    ).encode()

    chat = ChatStore(gateway, assistant=ASSISTANT)

    assert len(chat) == 1
    msg = chat.items()[0]
    assert msg.id == "42"
    assert msg.author.role is Role.USER
    assert msg.created_at.microsecond == 123456


def test_chat_accepts_epoch_millisecond_timestamps(kv: MemoryKeyValueStore, gateway: PersistenceGateway) -> None:
    kv.data[CHAT_KEY] = json.dumps(
        [{"_id": 5, "text": "hi", "createdAt": 1700000000000, "user": {"_id": 1}}]
    ).encode()

    chat = ChatStore(gateway, assistant=ASSISTANT)

    assert len(chat) == 1
    msg = chat.items()[0]
    assert msg.text == "hi"
    assert msg.created_at == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)

    again = ChatMessage.from_dict(msg.to_dict())
    assert again == msg


def test_chat_skips_unusable_timestamps(kv: MemoryKeyValueStore, gateway: PersistenceGateway) -> None:
    kv.data[CHAT_KEY] = (
        b'[{"_id": 1, "text": "inf", "createdAt": 1e999, "user": {"_id": 1}},'
        b' {"_id": 2, "text": "far", "createdAt": 1e20, "user": {"_id": 1}},'
        b' {"_id": 3, "text": "bool", "createdAt": true, "user": {"_id": 1}},'
        b' {"_id": 4, "text": "ok", "createdAt": 0, "user": {"_id": 2}}]'
    )

    chat = ChatStore(gateway, assistant=ASSISTANT)

    assert [m.id for m in chat.items()] == ["4"]


def test_corrupted_chat_loads_as_welcome_only(kv: MemoryKeyValueStore, gateway: PersistenceGateway) -> None:
    kv.data[CHAT_KEY] = b"\xff\xfe not utf8"
    chat = ChatStore(gateway, assistant=ASSISTANT)
    assert len(chat) == 1
    assert chat.items()[0].is_assistant


def test_chat_remove_is_idempotent(gateway: PersistenceGateway) -> None:
    chat = ChatStore(gateway, assistant=ASSISTANT)
    m = chat.add_user_message("oops")
    assert chat.remove(m.id) is True
    assert chat.remove(m.id) is False
    assert chat.get(m.id) is None


def test_chat_message_is_frozen() -> None:
    m = ChatMessage(id="1", text="hi", created_at=datetime.now().astimezone(), author=ASSISTANT)
    with pytest.raises(AttributeError):
        m.text = "changed"  # type: ignore[misc]


# ---- sqlite backend ----


def test_sqlite_kv_round_trip(tmp_path: Path) -> None:
    kv = SqliteKeyValueStore(tmp_path / "store.sqlite3")
    assert kv.load("missing") is None

    kv.save("k", b"one")
    kv.save("k", b"two")
    assert kv.load("k") == b"two"


def test_task_store_on_sqlite_survives_restart(tmp_path: Path) -> None:
    db = tmp_path / "store.sqlite3"

    gw = PersistenceGateway(SqliteKeyValueStore(db))
    store = TaskStore(gw)
    created = store.add("buy milk")
    gw.close()

    gw2 = PersistenceGateway(SqliteKeyValueStore(db))
    try:
        assert TaskStore(gw2).items() == (created,)
    finally:
        gw2.close()
