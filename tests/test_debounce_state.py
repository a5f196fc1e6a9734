from collections import deque
from pathlib import Path

import pytest

from notifykit.cache import FileIdCache
from notifykit.debounce_state import DebounceData, Queue, queues_from
from notifykit.debounced_event import DebouncedEvent
from notifykit.errors import NotifyError
from notifykit.event import (
    CreateKind,
    DataChange,
    Event,
    EventKind,
    Flag,
    ModifyKind,
    RemoveKind,
    RenameMode,
)
from notifykit.file_id import FileId

TIMEOUT = 0.05

CREATE = EventKind.create(CreateKind.ANY)
MODIFY = EventKind.modify(ModifyKind.data(DataChange.ANY))
REMOVE = EventKind.remove(RemoveKind.ANY)
RENAME_FROM = EventKind.modify(ModifyKind.name(RenameMode.FROM))
RENAME_TO = EventKind.modify(ModifyKind.name(RenameMode.TO))
RENAME_ANY = EventKind.modify(ModifyKind.name(RenameMode.ANY))
RENAME_BOTH = EventKind.modify(ModifyKind.name(RenameMode.BOTH))


class Clock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class FakeCache(FileIdCache):
    """Cache backed by an in-memory file system map."""

    def __init__(self, paths=None, file_system=None) -> None:
        self.paths = {Path(p): i for p, i in (paths or {}).items()}
        self.file_system = {Path(p): i for p, i in (file_system or {}).items()}
        self.rescans = 0

    def cached_file_id(self, path):
        return self.paths.get(Path(path))

    def add_path(self, path):
        for p, file_id in self.file_system.items():
            if p.is_relative_to(Path(path)):
                self.paths[p] = file_id

    def remove_path(self, path):
        self.paths.pop(Path(path), None)

    def rescan(self):
        self.rescans += 1
        self.add_path(Path("/"))


def make(cache=None):
    clock = Clock()
    return DebounceData(cache or FakeCache(), TIMEOUT, clock), clock


def ev(kind, *paths, tracker=None):
    event = Event(kind, list(paths))
    return event if tracker is None else event.set_tracker(tracker)


def queue_kinds(data, path):
    return [e.kind for e in data.queues[Path(path)].events]


def test_create_event_is_queued_then_emitted_after_timeout():
    data, clock = make()
    event = ev(CREATE, "/a")
    data.add_event(event)
    assert queue_kinds(data, "/a") == [CREATE]
    assert data.debounced_events() == []
    clock.now = 1.0
    emitted = data.debounced_events()
    assert [e.event for e in emitted] == [event]
    assert emitted[0].time == 0.0
    assert data.queues == {}


def test_duplicate_create_and_modify_after_create_are_skipped():
    data, _ = make()
    data.add_event(ev(CREATE, "/a"))
    data.add_event(ev(CREATE, "/a"))
    data.add_event(ev(MODIFY, "/a"))
    assert queue_kinds(data, "/a") == [CREATE]


def test_create_after_remove_is_kept():
    data, _ = make()
    data.add_event(ev(REMOVE, "/a"))
    data.add_event(ev(CREATE, "/a"))
    assert queue_kinds(data, "/a") == [REMOVE, CREATE]


def test_remove_after_create_drops_queue():
    data, _ = make()
    data.add_event(ev(CREATE, "/a"))
    data.add_event(ev(REMOVE, "/a"))
    assert data.queues == {}


def test_remove_after_modify_replaces_queue():
    data, _ = make()
    data.add_event(ev(MODIFY, "/a"))
    remove = ev(REMOVE, "/a")
    data.add_event(remove)
    assert [e.event for e in data.queues[Path("/a")].events] == [remove]


def test_remove_parent_drops_child_queues():
    data, _ = make()
    data.add_event(ev(REMOVE, "/dir/child"))
    data.add_event(ev(REMOVE, "/dir"))
    assert list(data.queues) == [Path("/dir")]


def test_rename_with_matching_trackers_is_stitched():
    data, clock = make()
    data.add_event(ev(RENAME_FROM, "/a", tracker=5))
    assert data.rename_event is not None
    clock.now = 0.01
    data.add_event(ev(RENAME_TO, "/b", tracker=5))
    assert data.rename_event is None
    assert list(data.queues) == [Path("/b")]
    (rename,) = data.queues[Path("/b")].events
    assert rename.kind == RENAME_BOTH
    assert rename.paths == [Path("/a"), Path("/b")]
    assert rename.tracker == 5
    assert rename.time == 0.0


def test_rename_with_different_trackers_is_not_stitched():
    data, _ = make()
    data.add_event(ev(RENAME_FROM, "/a", tracker=1))
    data.add_event(ev(RENAME_TO, "/b", tracker=2))
    assert queue_kinds(data, "/a") == [RENAME_FROM]
    assert queue_kinds(data, "/b") == [RENAME_TO]
    assert data.rename_event is None


def test_rename_is_stitched_by_file_ids():
    file_id = FileId.new_inode(1, 1)
    cache = FakeCache(paths={"/a": file_id}, file_system={"/b": file_id})
    data, _ = make(cache)
    data.add_event(ev(RENAME_FROM, "/a"))
    assert data.rename_event[1] == file_id
    data.add_event(ev(RENAME_TO, "/b"))
    (rename,) = data.queues[Path("/b")].events
    assert rename.paths == [Path("/a"), Path("/b")]
    assert cache.paths == {Path("/b"): file_id}


def test_rename_with_different_file_ids_is_not_stitched():
    cache = FakeCache(
        paths={"/a": FileId.new_inode(1, 1)}, file_system={"/b": FileId.new_inode(2, 2)}
    )
    data, _ = make(cache)
    data.add_event(ev(RENAME_FROM, "/a"))
    data.add_event(ev(RENAME_TO, "/b"))
    assert set(data.queues) == {Path("/a"), Path("/b")}


def test_rename_after_create_moves_create_event():
    data, _ = make()
    data.add_event(ev(CREATE, "/a"))
    data.add_event(ev(RENAME_FROM, "/a", tracker=1))
    data.add_event(ev(RENAME_TO, "/b", tracker=1))
    assert list(data.queues) == [Path("/b")]
    (created,) = data.queues[Path("/b")].events
    assert created.kind == CREATE
    assert created.paths == [Path("/b")]


def test_rename_after_rename_keeps_original_source():
    data, _ = make()
    data.add_event(ev(RENAME_FROM, "/a", tracker=1))
    data.add_event(ev(RENAME_TO, "/b", tracker=1))
    data.add_event(ev(RENAME_FROM, "/b", tracker=2))
    data.add_event(ev(RENAME_TO, "/c", tracker=2))
    assert list(data.queues) == [Path("/c")]
    (rename,) = data.queues[Path("/c")].events
    assert rename.paths == [Path("/a"), Path("/c")]


def test_rename_over_modified_target_prepends_override_remove():
    data, _ = make()
    data.add_event(ev(MODIFY, "/b"))
    data.add_event(ev(RENAME_FROM, "/a", tracker=1))
    data.add_event(ev(RENAME_TO, "/b", tracker=1))
    events = list(data.queues[Path("/b")].events)
    assert [e.kind for e in events] == [REMOVE, RENAME_BOTH]
    assert events[0].info == "override"
    assert events[0].paths == [Path("/b")]


def test_rename_over_removed_target_prepends_plain_remove():
    data, _ = make()
    data.add_event(ev(REMOVE, "/b"))
    data.add_event(ev(RENAME_FROM, "/a", tracker=1))
    data.add_event(ev(RENAME_TO, "/b", tracker=1))
    events = list(data.queues[Path("/b")].events)
    assert [e.kind for e in events] == [REMOVE, RENAME_BOTH]
    assert events[0].info is None


def test_rename_over_created_target_has_no_remove():
    data, _ = make()
    data.add_event(ev(CREATE, "/b"))
    data.add_event(ev(RENAME_FROM, "/a", tracker=1))
    data.add_event(ev(RENAME_TO, "/b", tracker=1))
    assert queue_kinds(data, "/b") == [RENAME_BOTH]


def test_rename_any_on_existing_path_is_move_in(tmp_path):
    target = tmp_path / "file"
    target.write_text("x")
    data, _ = make()
    data.add_event(ev(RENAME_ANY, target))
    assert queue_kinds(data, target) == [RENAME_ANY]
    assert data.rename_event is None


def test_rename_any_on_missing_path_is_move_out(tmp_path):
    missing = tmp_path / "gone"
    data, _ = make()
    data.add_event(ev(RENAME_ANY, missing))
    assert data.rename_event[0].paths == [missing]


def test_rename_both_and_other_kinds_are_ignored():
    data, _ = make()
    data.add_event(ev(RENAME_BOTH, "/a", "/b"))
    data.add_event(ev(EventKind.OTHER, "/a"))
    assert data.queues == {}


def test_continuous_events_of_same_kind_emit_latest_only():
    data, clock = make()
    for now in (0.0, 0.01, 0.02):
        clock.now = now
        data.add_event(ev(MODIFY, "/a"))
    assert len(data.queues[Path("/a")].events) == 3
    clock.now = 1.0
    emitted = data.debounced_events()
    assert len(emitted) == 1
    assert emitted[0].time == 0.02


def test_events_are_emitted_in_chronological_order():
    data, clock = make()
    late = DebouncedEvent(ev(CREATE, "/late"), 0.02)
    early = DebouncedEvent(ev(CREATE, "/early"), 0.0)
    data.queues = queues_from([("/late", [late]), ("/early", [early])])
    clock.now = 1.0
    assert data.debounced_events() == [early, late]


def test_events_for_same_path_keep_their_order():
    data, clock = make()
    data.add_event(ev(MODIFY, "/b"))
    data.add_event(ev(RENAME_FROM, "/a", tracker=1))
    data.add_event(ev(RENAME_TO, "/b", tracker=1))
    clock.now = 1.0
    assert [e.kind for e in data.debounced_events()] == [REMOVE, RENAME_BOTH]


def test_unexpired_events_stay_queued():
    data, clock = make()
    data.add_event(ev(MODIFY, "/a"))
    clock.now = 1.0
    data.add_event(ev(REMOVE, "/b"))
    emitted = data.debounced_events()
    assert [e.paths for e in emitted] == [[Path("/a")]]
    assert list(data.queues) == [Path("/b")]


def test_rescan_event():
    cache = FakeCache(file_system={"/x": FileId.new_inode(3, 3)})
    data, clock = make(cache)
    event = Event().set_flag(Flag.RESCAN)
    data.add_event(event)
    assert cache.rescans == 1
    assert Path("/x") in cache.paths
    assert data.rescan_event.event == event
    assert data.debounced_events() == []
    clock.now = 1.0
    assert [e.event for e in data.debounced_events()] == [event]
    assert data.rescan_event is None


def test_errors_are_stored_and_taken():
    data, _ = make()
    first = NotifyError.path_not_found()
    second = NotifyError.watch_not_found().add_path("/a")
    data.add_error(first)
    data.add_error(second)
    assert data.take_errors() == [first, second]
    assert data.take_errors() == []


def test_modify_reads_file_id_without_create_event():
    file_id = FileId.new_inode(7, 7)
    cache = FakeCache(file_system={"/a": file_id})
    data, _ = make(cache)
    data.add_event(ev(MODIFY, "/a"))
    assert cache.cached_file_id("/a") == file_id


def test_event_without_paths_is_rejected():
    data, _ = make()
    with pytest.raises(ValueError):
        data.add_event(Event(CREATE))


def test_queue_flags():
    created = Queue(deque([DebouncedEvent(ev(CREATE, "/a"), 0.0)]))
    moved_in = Queue([DebouncedEvent(ev(RENAME_TO, "/a"), 0.0)])
    removed = Queue([DebouncedEvent(ev(REMOVE, "/a"), 0.0)])
    moved_out = Queue([DebouncedEvent(ev(RENAME_FROM, "/a"), 0.0)])
    assert created.was_created() and moved_in.was_created()
    assert removed.was_removed() and moved_out.was_removed()
    assert not created.was_removed()
    assert not removed.was_created()
    assert not Queue().was_created() and not Queue().was_removed()