"""RecentsStore: move-to-front, capacity eviction, removal, persistence, stale entries."""
import base64
import json
import threading

import pytest

from welcomekit.core.capability import AccessCapability
from welcomekit.core.config import RECENTS_SETTINGS_KEY, RECENTS_UPDATED
from welcomekit.core.exceptions import PersistenceError
from welcomekit.core.recents import RecentEntry, RecentsStore, decode_entries, encode_entries
from welcomekit.core.storage import JsonFileStorage, MemoryStorage


class BrokenStorage(MemoryStorage):
    def __init__(self, initial=None):
        super().__init__(initial)
        self.fail_writes = False

    def set(self, key, value):
        if self.fail_writes:
            raise PersistenceError("read-only volume")
        super().set(key, value)


def test_record_moves_to_front_without_duplicates(store, make_file):
    a, b = make_file("a.txt"), make_file("b.txt")
    store.record_opened(a)
    store.record_opened(b)
    store.record_opened(a)
    assert store.list() == [a, b]
    assert len(store.entries()) == 2


def test_reopen_keeps_relative_order_of_others(store, make_file):
    a, b, c = make_file("a.txt"), make_file("b.txt"), make_file("c.txt")
    for p in (a, b, c):
        store.record_opened(p)
    store.record_opened(b)
    assert store.list() == [b, c, a]


def test_capacity_evicts_oldest(storage, capabilities, event_bus, make_file):
    store = RecentsStore(storage, capabilities, event_bus, capacity=3)
    paths = [make_file("f%d.txt" % i) for i in range(5)]
    for p in paths:
        store.record_opened(p)
    assert store.list() == [paths[4], paths[3], paths[2]]


def test_default_capacity_101st_record_evicts_lru(store, make_file):
    paths = [make_file("doc%03d.txt" % i) for i in range(101)]
    for p in paths:
        store.record_opened(p)
    listed = store.list()
    assert len(listed) == 100
    assert paths[0] not in listed
    assert listed[0] == paths[100]
    assert listed[-1] == paths[1]


def test_invalid_capacity_rejected(storage, capabilities):
    with pytest.raises(ValueError):
        RecentsStore(storage, capabilities, capacity=0)


def test_record_notifies(store, notifications, make_file):
    assert store.record_opened(make_file("a.txt")) is True
    assert notifications.count == 1


def test_record_missing_location_is_noop(store, notifications, make_file, tmp_path):
    a = make_file("a.txt")
    store.record_opened(a)
    assert store.record_opened(tmp_path / "missing.txt") is False
    assert store.list() == [a]
    assert notifications.count == 1


def test_remove_drops_entries(store, notifications, make_file):
    a, b = make_file("a.txt"), make_file("b.txt")
    store.record_opened(a)
    store.record_opened(b)
    remaining = store.remove({a})
    assert remaining == [b]
    assert a not in store.list()
    assert notifications.count == 3


def test_remove_absent_is_silent_noop(store, notifications, make_file, tmp_path):
    a = make_file("a.txt")
    store.record_opened(a)
    store.remove({tmp_path / "other.txt"})
    store.remove(set())
    assert store.list() == [a]
    assert notifications.count == 1


def test_clear(store, notifications, make_file):
    store.record_opened(make_file("a.txt"))
    assert store.clear() is True
    assert store.list() == []
    assert notifications.count == 2
    assert store.clear() is False
    assert notifications.count == 2


def test_reload_in_fresh_store_keeps_order(storage, capabilities, make_file):
    first = RecentsStore(storage, capabilities)
    paths = [make_file("%s.txt" % n) for n in "abc"]
    for p in paths:
        first.record_opened(p)
    second = RecentsStore(storage, capabilities)
    assert second.list() == list(reversed(paths))


def test_persisted_layout(store, storage, make_file):
    a = make_file("a.txt")
    store.record_opened(a)
    records = json.loads(storage.get(RECENTS_SETTINGS_KEY))
    assert records == [
        {"key": str(a), "token": base64.b64encode(store.entries()[0].capability.token).decode("ascii")}
    ]


def test_stale_entry_hidden_but_persisted(store, make_file):
    a, b = make_file("a.txt"), make_file("b.txt")
    store.record_opened(a)
    store.record_opened(b)
    a.unlink()
    assert store.list() == [b]
    assert [e.key for e in store.entries()] == [str(b), str(a)]


def test_remove_stale_entry_by_raw_key(store, make_file):
    a = make_file("a.txt")
    store.record_opened(a)
    a.unlink()
    store.remove([a])
    assert store.entries() == []


def test_list_dedups_by_resolved_location(storage, capabilities, make_file):
    a = make_file("a.txt")
    token = capabilities.create(a).token
    entries = [
        RecentEntry("/old/location/a.txt", AccessCapability("/old/location/a.txt", token)),
        RecentEntry(str(a), AccessCapability(str(a), token)),
    ]
    storage.set(RECENTS_SETTINGS_KEY, encode_entries(entries))
    store = RecentsStore(storage, capabilities)
    assert store.list() == [a]
    assert len(store.entries()) == 2


def test_corrupt_slot_reads_empty_and_is_overwritten(storage, capabilities, make_file):
    storage.set(RECENTS_SETTINGS_KEY, "{not json")
    store = RecentsStore(storage, capabilities)
    assert store.list() == []
    a = make_file("a.txt")
    assert store.record_opened(a) is True
    assert RecentsStore(storage, capabilities).list() == [a]


def test_clear_rewrites_corrupt_slot(storage, capabilities, event_bus):
    storage.set(RECENTS_SETTINGS_KEY, "{not json")
    store = RecentsStore(storage, capabilities, event_bus)
    assert store.clear() is True
    assert storage.get(RECENTS_SETTINGS_KEY) == "[]"
    assert store.clear() is False


def test_truncated_slot_file_is_repaired_by_next_record(tmp_path, capabilities, make_file):
    path = tmp_path / "recents.json"
    path.write_text('{"%s": "[]"' % RECENTS_SETTINGS_KEY, encoding="utf-8")
    store = RecentsStore(JsonFileStorage(path), capabilities)
    assert store.list() == []
    a = make_file("a.txt")
    assert store.record_opened(a) is True
    assert store.list() == [a]
    assert RecentsStore(JsonFileStorage(path), capabilities).list() == [a]
    assert store.clear() is True
    assert RecentsStore(JsonFileStorage(path), capabilities).list() == []


def test_clear_repairs_truncated_slot_file(tmp_path, capabilities):
    path = tmp_path / "recents.json"
    path.write_text('{"%s": "[]"' % RECENTS_SETTINGS_KEY, encoding="utf-8")
    store = RecentsStore(JsonFileStorage(path), capabilities)
    assert store.clear() is True
    assert json.loads(path.read_text(encoding="utf-8")) == {RECENTS_SETTINGS_KEY: "[]"}


def test_malformed_records_are_skipped():
    good = {"key": "/a", "token": base64.b64encode(b"t").decode("ascii")}
    blob = json.dumps([good, {"key": 3}, "junk", {"key": "/b", "token": "%%%"}])
    assert [e.key for e in decode_entries(blob)] == ["/a"]


def test_decode_rejects_non_list():
    with pytest.raises(PersistenceError):
        decode_entries(json.dumps({"key": "/a"}))


def test_failed_save_leaves_state_and_skips_notification(capabilities, event_bus, make_file):
    storage = BrokenStorage()
    store = RecentsStore(storage, capabilities, event_bus)
    seen = []
    event_bus.subscribe(RECENTS_UPDATED, lambda ev, data: seen.append(ev))
    a = make_file("a.txt")
    store.record_opened(a)
    storage.fail_writes = True
    assert store.record_opened(make_file("b.txt")) is False
    assert store.clear() is False
    assert store.list() == [a]
    assert seen == [RECENTS_UPDATED]


def test_subscriber_can_read_inside_notification(store, event_bus, make_file):
    snapshots = []
    event_bus.subscribe(RECENTS_UPDATED, lambda ev, data: snapshots.append(store.list()))
    a = make_file("a.txt")
    store.record_opened(a)
    assert snapshots == [[a]]


def test_concurrent_records_are_all_kept(store, make_file):
    paths = [make_file("t%02d.txt" % i) for i in range(16)]
    barrier = threading.Barrier(len(paths))

    def worker(p):
        barrier.wait()
        store.record_opened(p)

    threads = [threading.Thread(target=worker, args=(p,)) for p in paths]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert sorted(store.list()) == sorted(paths)


def test_mutations_see_other_writers_on_shared_storage(storage, capabilities, make_file):
    one = RecentsStore(storage, capabilities)
    two = RecentsStore(storage, capabilities)
    a, b = make_file("a.txt"), make_file("b.txt")
    one.record_opened(a)
    two.record_opened(b)
    assert two.list() == [b, a]
    one.reload()
    assert one.list() == [b, a]
