"""Watch configuration: recursion mode and back-end settings."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

DEFAULT_POLL_INTERVAL = 30.0


class RecursiveMode(Enum):
    """Whether only the given directory or its sub-directories as well are watched."""

    RECURSIVE = "recursive"
    NON_RECURSIVE = "non-recursive"

    def is_recursive(self) -> bool:
        return self is RecursiveMode.RECURSIVE


def _check_interval(interval: float) -> float:
    if isinstance(interval, bool) or not isinstance(interval, (int, float)):
        raise TypeError(f"poll interval must be a number of seconds, got {interval!r}")
    if interval < 0:
        raise ValueError(f"poll interval must not be negative, got {interval!r}")
    return float(interval)


@dataclass(frozen=True)
class Config:
    """Back-end configuration.

    `poll_interval` is in seconds; `None` means automatic polling is disabled and
    polling must be triggered manually. Each `with_*` method returns a new config.
    """

    poll_interval: float | None = DEFAULT_POLL_INTERVAL
    compare_contents: bool = False

    def __post_init__(self) -> None:
        if self.poll_interval is not None:
            object.__setattr__(self, "poll_interval", _check_interval(self.poll_interval))
        if not isinstance(self.compare_contents, bool):
            raise TypeError(f"compare_contents must be a bool, got {self.compare_contents!r}")

    def with_poll_interval(self, interval: float) -> Config:
        """Set the interval between re-scans, enabling automatic polling."""
        return replace(self, poll_interval=_check_interval(interval))

    def with_manual_polling(self) -> Config:
        """Disable automatic polling."""
        return replace(self, poll_interval=None)

    def with_compare_contents(self, compare_contents: bool) -> Config:
        """Hash file contents to detect changes that leave metadata untouched."""
        return replace(self, compare_contents=compare_contents)