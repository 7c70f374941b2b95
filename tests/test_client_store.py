from datetime import datetime, timezone

import pytest

from app.client.device import DeviceIdentity, generate_local_id, to_base36
from app.client.errors import DuplicateLocalIdError, InvalidSyncTransition, StorageError
from app.client.models import LocalResponse
from app.client.storage import KeyValueStore, LocalResponseStore
from app.schemas.response import SyncStatus

START = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def kv(tmp_path):
    return KeyValueStore(tmp_path / "data")


@pytest.fixture
def store(kv):
    return LocalResponseStore(kv)


def local_response(local_id, device_id="device-1", satisfaction=3):
    return LocalResponse.model_validate({
        "id": local_id,
        "template_id": 1,
        "device_info": {"device_id": device_id},
        "answers": {"satisfaction": {"type": "rating", "value": satisfaction}},
        "analytics": {"start_time": START.isoformat(), "completion_time_seconds": 60},
        "created_at": START.isoformat(),
    })


def test_missing_and_corrupt_entries_read_as_default(kv):
    assert kv.get("responses", []) == []
    kv.set("responses", [{"a": 1}])
    kv._path("responses").write_text("{not json", encoding="utf-8")
    assert kv.get("responses", []) == []


def test_default_is_not_shared(kv):
    default = []
    kv.get("pending_sync_queue", default).append("x")
    assert default == []


def test_append_and_list_preserve_order(store):
    for local_id in ["c", "a", "b"]:
        store.append(local_response(local_id))
    assert [r.id for r in store.list_all()] == ["c", "a", "b"]


def test_append_identical_is_noop(store):
    store.append(local_response("a"))
    store.append(local_response("a"))
    assert len(store.list_all()) == 1


def test_append_never_overwrites_different_response(store):
    store.append(local_response("a", satisfaction=3))
    with pytest.raises(DuplicateLocalIdError):
        store.append(local_response("a", satisfaction=5))
    assert store.get("a").answers["satisfaction"].value == 3


def test_responses_survive_reopen(kv, tmp_path):
    LocalResponseStore(kv).append(local_response("a"))
    reopened = LocalResponseStore(KeyValueStore(tmp_path / "data"))
    assert [r.id for r in reopened.list_all()] == ["a"]


def test_corrupt_response_entries_are_skipped(kv, store):
    store.append(local_response("a"))
    raw = kv.get("responses")
    raw.append({"id": "broken"})
    kv.set("responses", raw)
    assert [r.id for r in store.list_all()] == ["a"]


def test_clear_requires_confirmation(store):
    store.append(local_response("a"))
    store.enqueue("a")
    with pytest.raises(StorageError):
        store.clear()
    assert store.pending_count() == 1

    store.clear(confirm=True)
    assert store.list_all() == []
    assert store.pending_count() == 0


def test_pending_queue(store):
    store.append(local_response("a"))
    store.append(local_response("b"))
    store.enqueue("b")
    store.enqueue("a")
    store.enqueue("b")
    store.enqueue("ghost")
    assert [r.id for r in store.pending()] == ["b", "a"]
    assert store.pending_count() == 2

    store.clear_queue(["b"])
    assert [r.id for r in store.pending()] == ["a"]
    store.clear_queue()
    assert store.pending_count() == 0


def test_record_outcome_moves_forward_only(store):
    store.append(local_response("a"))
    updated = store.record_outcome("a", SyncStatus.SYNCED, "Synced to server", server_id=7)
    assert updated.sync_status == SyncStatus.SYNCED
    assert updated.server_id == 7
    assert [entry.message for entry in store.get("a").sync_history] == ["Synced to server"]

    with pytest.raises(InvalidSyncTransition):
        store.record_outcome("a", SyncStatus.PENDING, "retry")
    with pytest.raises(InvalidSyncTransition):
        store.record_outcome("a", SyncStatus.FAILED, "late failure")
    assert store.get("a").sync_status == SyncStatus.SYNCED
    assert len(store.get("a").sync_history) == 1


def test_record_outcome_unknown_id(store):
    with pytest.raises(StorageError):
        store.record_outcome("missing", SyncStatus.SYNCED, "x")


def test_last_sync_timestamp(store, kv):
    assert store.last_sync_timestamp is None
    store.last_sync_timestamp = START
    assert store.last_sync_timestamp == START
    kv.set("last_sync_timestamp", "garbage")
    assert store.last_sync_timestamp is None


def test_device_identity_is_stable(kv, tmp_path):
    first = DeviceIdentity(kv).get()
    assert first.startswith("device-")
    assert DeviceIdentity(KeyValueStore(tmp_path / "data")).get() == first


def test_local_ids():
    assert to_base36(0) == "0"
    assert to_base36(35) == "z"
    assert to_base36(36) == "10"
    ids = {generate_local_id() for _ in range(50)}
    assert len(ids) == 50


def test_candidate_payload_uses_local_id_as_client_id():
    payload = local_response("abc").to_candidate()
    assert payload["client_id"] == "abc"
    assert "sync_status" not in payload
    assert "id" not in payload
    assert payload["answers"]["satisfaction"] == {"type": "rating", "value": 3}
