import json

import pytest

from punch_tracker.storage.history_store import (
    HistoryRecord,
    InMemoryHistoryStore,
    JsonHistoryStore,
)


def test_record_dict_layout():
    record = HistoryRecord(saved_at=12.5, left=[0.4], right=[0.6, 0.9])

    assert record.to_dict() == {"version": 1, "saved_at": 12.5, "left": [0.4], "right": [0.6, 0.9]}
    assert HistoryRecord.from_dict(record.to_dict()) == record


def test_from_dict_rejects_unknown_version():
    with pytest.raises(ValueError):
        HistoryRecord.from_dict({"version": 2, "saved_at": 0.0, "left": [], "right": []})


def test_from_dict_rejects_malformed_values():
    with pytest.raises(ValueError):
        HistoryRecord.from_dict({"version": 1, "saved_at": "yesterday"})
    with pytest.raises(ValueError):
        HistoryRecord.from_dict({"version": 1, "left": []})


def test_in_memory_store():
    store = InMemoryHistoryStore()
    assert store.load() is None

    record = HistoryRecord(saved_at=1.0, left=[0.5])
    store.save(record)

    assert store.load() == record
    assert store.save_count == 1


def test_json_store_round_trip(tmp_path):
    path = tmp_path / "state" / "history.json"
    store = JsonHistoryStore(path)
    assert store.load() is None

    store.save(HistoryRecord(saved_at=100.0, left=[0.4, 0.6, 0.9]))

    assert path.exists()
    assert not path.with_suffix(".json.tmp").exists()
    assert json.loads(path.read_text())["version"] == 1
    assert JsonHistoryStore(path).load() == HistoryRecord(saved_at=100.0, left=[0.4, 0.6, 0.9])


def test_json_store_treats_corrupt_file_as_empty(tmp_path, caplog):
    path = tmp_path / "history.json"
    path.write_text("{not json")

    assert JsonHistoryStore(path).load() is None
    assert "Could not load strike history" in caplog.text


def test_json_store_treats_unknown_version_as_empty(tmp_path):
    path = tmp_path / "history.json"
    path.write_text(json.dumps({"version": 99, "saved_at": 0.0}))

    assert JsonHistoryStore(path).load() is None
