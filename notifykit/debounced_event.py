"""An event together with the time it occurred, as held by the full debouncer."""

from __future__ import annotations

from dataclasses import dataclass, field
from time import monotonic
from typing import Any

from notifykit.event import Event

_OWN_FIELDS = frozenset({"event", "time"})


@dataclass
class DebouncedEvent:
    """An event and the monotonic time, in seconds, at which it occurred.

    Attributes of the wrapped event (`kind`, `paths`, `attrs`, `tracker`, ...)
    can be read and assigned directly on the debounced event.
    """

    event: Event = field(default_factory=Event)
    time: float = field(default_factory=monotonic)

    @classmethod
    def from_event(cls, event: Event) -> DebouncedEvent:
        """Wrap an event, stamping it with the current time."""
        return cls(event, monotonic())

    def __getattr__(self, name: str) -> Any:
        if name in _OWN_FIELDS or name.startswith("__"):
            raise AttributeError(name)
        return getattr(self.event, name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name in _OWN_FIELDS:
            object.__setattr__(self, name, value)
        else:
            setattr(self.event, name, value)