"""Debouncing state of the full debouncer: per-path event queues and rename stitching."""

from __future__ import annotations

import copy
import logging
import os
from collections import deque
from dataclasses import dataclass, field
from functools import cmp_to_key
from pathlib import Path
from time import monotonic
from typing import Callable, Iterable

from notifykit.cache import FileIdCache
from notifykit.debounced_event import DebouncedEvent
from notifykit.errors import NotifyError
from notifykit.event import Event, EventKind, ModifyKind, RemoveKind, RenameMode
from notifykit.file_id import FileId

log = logging.getLogger(__name__)

_RENAME_BOTH = EventKind.modify(ModifyKind.name(RenameMode.BOTH))
_REMOVE_ANY = EventKind.remove(RemoveKind.ANY)


def _rename_mode(kind: EventKind) -> RenameMode | None:
    """The rename mode of a `Modify(Name(..))` kind, else `None`."""
    if kind.category == "modify" and kind.detail is not None and kind.detail.kind == "name":
        return kind.detail.mode
    return None


def _is_data_or_metadata(kind: EventKind) -> bool:
    return (
        kind.category == "modify"
        and kind.detail is not None
        and kind.detail.kind in ("data", "metadata")
    )


@dataclass
class Queue:
    """Pending events of one path.

    Events are kept in this order: a remove or move-out event, then a rename
    event, then any other events.
    """

    events: deque[DebouncedEvent] = field(default_factory=deque)

    def __post_init__(self) -> None:
        if not isinstance(self.events, deque):
            self.events = deque(self.events)

    def was_created(self) -> bool:
        """Whether the first event created the path or moved it in."""
        if not self.events:
            return False
        kind = self.events[0].kind
        return kind.is_create() or _rename_mode(kind) is RenameMode.TO

    def was_removed(self) -> bool:
        """Whether the first event removed the path or moved it out."""
        if not self.events:
            return False
        kind = self.events[0].kind
        return kind.is_remove() or _rename_mode(kind) is RenameMode.FROM


def _chronological(a: DebouncedEvent, b: DebouncedEvent) -> int:
    # rename events are emitted for the target path, hence the last path
    last_a = a.paths[-1] if a.paths else None
    last_b = b.paths[-1] if b.paths else None
    if last_a == last_b:
        return 0
    return (a.time > b.time) - (a.time < b.time)


class DebounceData:
    """Pending events, the half-seen rename, a rescan notice and errors.

    `timeout` is in seconds; `clock` returns the current time in seconds.
    """

    def __init__(
        self,
        cache: FileIdCache,
        timeout: float,
        clock: Callable[[], float] = monotonic,
    ) -> None:
        self.queues: dict[Path, Queue] = {}
        self.cache = cache
        self.rename_event: tuple[DebouncedEvent, FileId | None] | None = None
        self.rescan_event: DebouncedEvent | None = None
        self.errors: list[NotifyError] = []
        self.timeout = float(timeout)
        self._clock = clock

    def _expired(self, now: float, time: float) -> bool:
        return max(0.0, now - time) >= self.timeout

    def debounced_events(self) -> list[DebouncedEvent]:
        """Remove and return the events whose timeout has passed."""
        now = self._clock()
        expired: list[DebouncedEvent] = []
        remaining: dict[Path, Queue] = {}

        if self.rescan_event is not None and self._expired(now, self.rescan_event.time):
            log.debug("debounced event: %r", self.rescan_event)
            expired.append(self.rescan_event)
            self.rescan_event = None

        for path, queue in self.queues.items():
            kind_index: dict[EventKind, int] = {}
            while queue.events and self._expired(now, queue.events[0].time):
                event = queue.events.popleft()
                previous = kind_index.get(event.kind)
                if previous is not None:
                    # keep only the latest event of each kind
                    del expired[previous]
                    kind_index = {
                        kind: index - 1 if index > previous else index
                        for kind, index in kind_index.items()
                    }
                kind_index[event.kind] = len(expired)
                expired.append(event)
            if queue.events:
                remaining[path] = queue

        self.queues = remaining
        expired.sort(key=cmp_to_key(_chronological))
        return expired

    def take_errors(self) -> list[NotifyError]:
        """Remove and return all stored errors."""
        errors, self.errors = self.errors, []
        return errors

    def add_error(self, error: NotifyError) -> None:
        """Store an error to be sent on later."""
        self.errors.append(error)

    def add_event(self, event: Event) -> None:
        """Add a raw event to the pending state."""
        log.debug("raw event: %r", event)

        if event.need_rescan():
            self.cache.rescan()
            self.rescan_event = DebouncedEvent(event, self._clock())
            return

        if not event.paths:
            raise ValueError(f"event has no paths: {event!r}")
        path = event.paths[0]
        kind = event.kind
        mode = _rename_mode(kind)

        if kind.is_create():
            self.cache.add_path(path)
            self._push_event(event, self._clock())
        elif mode is not None:
            if mode is RenameMode.ANY:
                if path.exists():
                    self._handle_rename_to(event)
                else:
                    self._handle_rename_from(event)
            elif mode is RenameMode.TO:
                self._handle_rename_to(event)
            elif mode is RenameMode.FROM:
                self._handle_rename_from(event)
            # BOTH is handled through its TO and FROM halves; OTHER is unused
        elif kind.is_remove():
            self._push_remove_event(event, self._clock())
        elif kind.is_other():
            pass  # meta events
        else:
            if self.cache.cached_file_id(path) is None:
                self.cache.add_path(path)
            self._push_event(event, self._clock())

    def _handle_rename_from(self, event: Event) -> None:
        time = self._clock()
        path = event.paths[0]
        file_id = self.cache.cached_file_id(path)
        self.rename_event = (DebouncedEvent(copy.deepcopy(event), time), file_id)
        self.cache.remove_path(path)
        self._push_event(event, time)

    def _handle_rename_to(self, event: Event) -> None:
        target = event.paths[0]
        self.cache.add_path(target)

        trackers_match = False
        file_ids_match = False
        if self.rename_event is not None:
            from_event, from_id = self.rename_event
            from_tracker = from_event.tracker
            to_tracker = event.tracker
            trackers_match = (
                from_tracker is not None and to_tracker is not None and from_tracker == to_tracker
            )
            if from_id is not None:
                to_id = self.cache.cached_file_id(target)
                file_ids_match = to_id is not None and from_id == to_id

        if trackers_match or file_ids_match:
            rename_event, _ = self.rename_event
            source = rename_event.paths.pop(0)
            self._push_rename_event(source, event, rename_event.time)
        else:
            # moved in from outside
            self._push_event(event, self._clock())

        self.rename_event = None

    def _push_rename_event(self, path: Path, event: Event, time: float) -> None:
        self.cache.remove_path(path)
        target = event.paths[0]

        source_queue = self.queues.pop(path, None) or Queue()

        # drop the rename `from` event
        if source_queue.events:
            source_queue.events.pop()

        # drop an earlier rename, keeping its original source and time
        original_path, original_time = path, time
        for index, queued in enumerate(source_queue.events):
            if queued.kind == _RENAME_BOTH:
                original_path, original_time = queued.paths[0], queued.time
                del source_queue.events[index]
                break

        # a remove or move-out stays behind at its own path
        if source_queue.was_removed():
            removed = source_queue.events.popleft()
            self.queues[removed.paths[0]] = Queue(deque([removed]))

        for queued in source_queue.events:
            queued.paths = [target]

        if not source_queue.was_created():
            source_queue.events.appendleft(
                DebouncedEvent(
                    Event(_RENAME_BOTH, [original_path, target], event.attrs),
                    original_time,
                )
            )

        target_queue = self.queues.get(target)
        if target_queue is not None and not target_queue.was_created():
            remove_event = DebouncedEvent(Event(_REMOVE_ANY, [target]), original_time)
            if not target_queue.was_removed():
                remove_event.event = remove_event.event.set_info("override")
            source_queue.events.appendleft(remove_event)
        self.queues[target] = source_queue

    def _push_remove_event(self, event: Event, time: float) -> None:
        path = event.paths[0]

        # children are covered by the removal of their parent
        self.queues = {
            p: q for p, q in self.queues.items() if p == path or not p.is_relative_to(path)
        }
        self.cache.remove_path(path)

        queue = self.queues.get(path)
        if queue is None:
            self._push_event(event, time)
        elif queue.was_created():
            del self.queues[path]
        else:
            queue.events = deque([DebouncedEvent(event, time)])

    def _push_event(self, event: Event, time: float) -> None:
        path = event.paths[0]
        queue = self.queues.get(path)
        if queue is None:
            self.queues[path] = Queue(deque([DebouncedEvent(event, time)]))
            return
        # skip duplicate creates and modifications right after a creation
        if event.kind.is_create() or _is_data_or_metadata(event.kind):
            if queue.was_created():
                return
        queue.events.append(DebouncedEvent(event, time))


def queues_from(items: Iterable[tuple[str | os.PathLike[str], Iterable[DebouncedEvent]]]) -> dict[Path, Queue]:
    """Build a queue mapping from `(path, events)` pairs."""
    return {Path(path): Queue(deque(events)) for path, events in items}