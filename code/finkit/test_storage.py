import pytest

from finkit.storage import (
    JsonFileStorage,
    MemoryStorage,
    _EncodedStorage,
    create_storage,
    deobfuscate,
    obfuscate,
)


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def test_obfuscation_hides_plain_json():
    blob = obfuscate({"value": [1, 2]})
    assert not blob.startswith("{")
    assert deobfuscate(blob) == {"value": [1, 2]}
    assert deobfuscate("not base64!") is None


def test_memory_round_trip():
    store = MemoryStorage(prefix="t_")
    store.set("budget", {"income": 5000})
    assert store.get("budget") == {"income": 5000}
    assert store.has("budget")
    assert store.keys() == ["budget"]
    store.remove("budget")
    assert store.get("budget", "missing") == "missing"


def test_expired_entry_is_removed():
    clock = FakeClock()
    store = MemoryStorage(prefix="t_", clock=clock)
    store.set("token", "abc", expires=1100.0)
    assert store.get("token") == "abc"
    clock.now = 1200.0
    assert store.get("token") is None
    assert store.keys() == []


def test_corrupt_entry_returns_default():
    store = MemoryStorage(prefix="t_")
    store._write("t_broken", "%%%")
    assert store.get("broken", []) == []


def test_clear_all_only_touches_prefix():
    store = MemoryStorage(prefix="t_")
    store.set("a", 1)
    store.set("b", 2)
    store._write("other_c", obfuscate({"value": 3}))
    store.clear_all()
    assert store.keys() == []
    assert store._read("other_c") is not None


def test_file_store_survives_reopen(tmp_path):
    JsonFileStorage(str(tmp_path), prefix="t_").set("expenses", [{"id": 1}])
    reopened = JsonFileStorage(str(tmp_path), prefix="t_")
    assert reopened.get("expenses") == [{"id": 1}]
    assert sorted(p.name for p in tmp_path.iterdir()) == ["t_expenses.json"]


def test_file_store_overwrite_and_remove(tmp_path):
    store = JsonFileStorage(str(tmp_path), prefix="t_")
    store.set("budget", {"income": 1})
    store.set("budget", {"income": 2})
    assert store.get("budget") == {"income": 2}
    store.remove("budget")
    store.remove("budget")
    assert store.keys() == []


def test_create_storage(tmp_path):
    assert isinstance(create_storage(""), MemoryStorage)
    assert isinstance(create_storage(str(tmp_path)), JsonFileStorage)


def test_store_missing_a_hook_cannot_be_created():
    class HalfStore(_EncodedStorage):
        def _read(self, full_key):
            return None

    with pytest.raises(TypeError):
        HalfStore(prefix="t_")
