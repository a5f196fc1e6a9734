"""The full debouncer: stitches renames together and emits events after a timeout."""

from __future__ import annotations

import logging
import queue
import threading
from typing import Any, Callable, Union

from notifykit.cache import FileIdCache, FileIdMap
from notifykit.debounce_state import DebounceData
from notifykit.debounced_event import DebouncedEvent
from notifykit.errors import NotifyError
from notifykit.event import Event

log = logging.getLogger(__name__)

TICK_DIVISOR = 4

DebounceEventResult = Union[list[DebouncedEvent], list[NotifyError]]
"""Either a batch of debounced events or a batch of errors."""


def _check_seconds(name: str, value: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{name} must be a number of seconds, got {value!r}")
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {value!r}")
    return float(value)


def _as_handler(handler: Any) -> Callable[[DebounceEventResult], None]:
    if hasattr(handler, "handle_event"):
        return handler.handle_event
    if isinstance(handler, queue.Queue) or hasattr(handler, "put"):
        return handler.put
    if callable(handler):
        return handler
    raise TypeError(f"event handler must be callable, a queue or have handle_event: {handler!r}")


class Debouncer:
    """Debounces raw results on a background thread until stopped.

    Feed raw events or errors to `handle`. Every tick the expired events are
    passed to the handler as one list, and stored errors as another list.
    `timeout` and `tick_rate` are in seconds; without a tick rate a quarter of
    the timeout is used.
    """

    def __init__(
        self,
        timeout: float,
        tick_rate: float | None,
        event_handler: Any,
        file_id_cache: FileIdCache,
    ) -> None:
        timeout = _check_seconds("timeout", timeout)
        if tick_rate is None:
            tick = timeout / TICK_DIVISOR
        else:
            tick = _check_seconds("tick_rate", tick_rate)
            if tick > timeout:
                raise NotifyError.generic(
                    f"Invalid tick_rate, tick rate {tick}s > {timeout}s timeout!"
                )
        if not isinstance(file_id_cache, FileIdCache):
            raise TypeError(f"file_id_cache must be a FileIdCache, got {file_id_cache!r}")

        self._handler = _as_handler(event_handler)
        self.timeout = timeout
        self.tick_rate = tick
        self.cache = file_id_cache
        self._data = DebounceData(file_id_cache, timeout)
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._thread = threading.Thread(
            target=self._run, name="notifykit debouncer loop", daemon=True
        )
        self._thread.start()

    def _run(self) -> None:
        while not self._stop.wait(self.tick_rate):
            with self._lock:
                events = self._data.debounced_events()
                errors = self._data.take_errors()
            if events:
                self._handler(events)
            if errors:
                self._handler(errors)

    def handle(self, result: Event | NotifyError) -> None:
        """Accept a raw event or error; ignored once stopped."""
        if not isinstance(result, (Event, NotifyError)):
            raise TypeError(f"expected an Event or NotifyError, got {result!r}")
        if self._stop.is_set():
            return
        with self._lock:
            if isinstance(result, Event):
                self._data.add_event(result)
            else:
                self._data.add_error(result)

    def stop(self) -> None:
        """Stop the debouncer and wait for its thread to finish."""
        self._stop.set()
        if self._thread is not threading.current_thread():
            self._thread.join()

    def stop_nonblocking(self) -> None:
        """Stop the debouncer without waiting for its thread."""
        self._stop.set()

    def __enter__(self) -> Debouncer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def __del__(self) -> None:
        stop = getattr(self, "_stop", None)
        if stop is not None:
            stop.set()


def new_debouncer_opt(
    timeout: float,
    tick_rate: float | None,
    event_handler: Any,
    file_id_cache: FileIdCache,
) -> Debouncer:
    """Create a debouncer with a custom file id cache."""
    return Debouncer(timeout, tick_rate, event_handler, file_id_cache)


def new_debouncer(timeout: float, tick_rate: float | None, event_handler: Any) -> Debouncer:
    """Create a debouncer with the built-in file id cache."""
    return new_debouncer_opt(timeout, tick_rate, event_handler, FileIdMap())