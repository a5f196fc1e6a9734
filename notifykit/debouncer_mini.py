"""A small debouncer: at most one event per path per timeout."""

from __future__ import annotations

import logging
import os
import queue
import threading
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from time import monotonic
from typing import Any, Callable, Union

from notifykit.config import Config as NotifyConfig
from notifykit.errors import NotifyError
from notifykit.event import Event

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 0.5


def _check_timeout(timeout: float) -> float:
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
        raise TypeError(f"timeout must be a number of seconds, got {timeout!r}")
    if timeout < 0:
        raise ValueError(f"timeout must not be negative, got {timeout!r}")
    return float(timeout)


@dataclass(frozen=True)
class Config:
    """Debouncer settings; `timeout` is in seconds."""

    timeout: float = DEFAULT_TIMEOUT
    batch_mode: bool = True
    notify_config: NotifyConfig = field(default_factory=NotifyConfig)

    def __post_init__(self) -> None:
        object.__setattr__(self, "timeout", _check_timeout(self.timeout))

    def with_timeout(self, timeout: float) -> Config:
        """Time after which an event is emitted, or a continuous event is sent."""
        return replace(self, timeout=_check_timeout(timeout))

    def with_batch_mode(self, batch_mode: bool) -> Config:
        """Batch events together, delaying some by at most twice the timeout."""
        return replace(self, batch_mode=batch_mode)

    def with_notify_config(self, notify_config: NotifyConfig) -> Config:
        """Set the back-end configuration."""
        return replace(self, notify_config=notify_config)


class DebouncedEventKind(Enum):
    """Whether the path went quiet or is still changing after a timeout."""

    ANY = "any"
    ANY_CONTINUOUS = "any-continuous"


@dataclass(frozen=True)
class DebouncedEvent:
    """A debounced event for one path."""

    path: Path
    kind: DebouncedEventKind

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", Path(self.path))


DebounceEventResult = Union[list[DebouncedEvent], NotifyError]


@dataclass
class _EventData:
    insert: float
    update: float


class DebounceData:
    """Debouncing state: pending paths and the next deadline."""

    def __init__(
        self,
        timeout: float,
        batch_mode: bool = True,
        clock: Callable[[], float] = monotonic,
    ) -> None:
        self.timeout = _check_timeout(timeout)
        self.batch_mode = batch_mode
        self._clock = clock
        self._events: dict[Path, _EventData] = {}
        self.deadline: float | None = None

    def next_tick(self) -> float | None:
        """Seconds until the next deadline, or `None` if nothing is pending."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - self._clock())

    def _check_deadline(self, data: _EventData) -> None:
        candidate = data.update + self.timeout
        if self.deadline is None or (not self.batch_mode and self.deadline > candidate):
            self.deadline = candidate

    def debounced_events(self) -> list[DebouncedEvent]:
        """Return the expired events, keeping paths that are still changing."""
        now = self._clock()
        expired: list[DebouncedEvent] = []
        remaining: dict[Path, _EventData] = {}
        self.deadline = None
        for path, data in self._events.items():
            if now - data.update >= self.timeout:
                log.debug("debounced event: %s", DebouncedEventKind.ANY)
                expired.append(DebouncedEvent(path, DebouncedEventKind.ANY))
            elif now - data.insert >= self.timeout:
                log.debug("debounced event: %s", DebouncedEventKind.ANY_CONTINUOUS)
                self._check_deadline(data)
                remaining[path] = data
                expired.append(DebouncedEvent(path, DebouncedEventKind.ANY_CONTINUOUS))
            else:
                self._check_deadline(data)
                remaining[path] = data
        self._events = remaining
        return expired

    def add_event(self, event: Event) -> None:
        """Record a raw event for each of its paths."""
        log.debug("raw event: %r", event)
        now = self._clock()
        if self.deadline is None:
            self.deadline = now + self.timeout
        for path in event.paths:
            data = self._events.get(path)
            if data is None:
                self._events[path] = _EventData(now, now)
            else:
                data.update = now


def _as_handler(handler: Any) -> Callable[[DebounceEventResult], None]:
    if hasattr(handler, "handle_event"):
        return handler.handle_event
    if isinstance(handler, queue.Queue) or hasattr(handler, "put"):
        return handler.put
    if callable(handler):
        return handler
    raise TypeError(f"event handler must be callable, a queue or have handle_event: {handler!r}")


_SHUTDOWN = object()


def _run(inbox: queue.Queue, data: DebounceData, handler: Callable[[Any], None]) -> None:
    while True:
        try:
            item = inbox.get(timeout=data.next_tick())
        except queue.Empty:
            events = data.debounced_events()
            if events:
                handler(events)
            continue
        if item is _SHUTDOWN:
            return
        if isinstance(item, NotifyError):
            handler(item)
        else:
            data.add_event(item)


class Debouncer:
    """Debounces raw results on a background thread until stopped.

    Feed raw events or errors to `handle`; errors are passed on immediately.
    """

    def __init__(self, config: Config, event_handler: Any) -> None:
        handler = _as_handler(event_handler)
        self.config = config
        self._inbox: queue.Queue = queue.Queue()
        self._stopped = False
        self._thread = threading.Thread(
            target=_run,
            args=(self._inbox, DebounceData(config.timeout, config.batch_mode), handler),
            name="notifykit debouncer loop",
            daemon=True,
        )
        self._thread.start()

    def handle(self, result: Event | NotifyError) -> None:
        """Accept a raw event or error; ignored once stopped."""
        if not isinstance(result, (Event, NotifyError)):
            raise TypeError(f"expected an Event or NotifyError, got {result!r}")
        if not self._stopped:
            self._inbox.put(result)

    def stop(self) -> None:
        """Stop the debouncer and wait for its thread to finish."""
        if not self._stopped:
            self._stopped = True
            self._inbox.put(_SHUTDOWN)
        if self._thread is not threading.current_thread():
            self._thread.join()

    def __enter__(self) -> Debouncer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def __del__(self) -> None:
        if not getattr(self, "_stopped", True):
            self._stopped = True
            self._inbox.put(_SHUTDOWN)


def new_debouncer_opt(config: Config, event_handler: Any) -> Debouncer:
    """Create a debouncer with a custom configuration."""
    return Debouncer(config, event_handler)


def new_debouncer(timeout: float, event_handler: Any) -> Debouncer:
    """Create a debouncer with the given timeout in seconds."""
    return new_debouncer_opt(Config().with_timeout(timeout), event_handler)


__all__ = [
    "Config",
    "DebounceData",
    "DebounceEventResult",
    "DebouncedEvent",
    "DebouncedEventKind",
    "Debouncer",
    "new_debouncer",
    "new_debouncer_opt",
    "os",
]