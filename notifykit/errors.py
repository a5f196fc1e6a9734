"""The error type raised and reported by watchers."""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Any, Iterable

from notifykit.config import Config


class ErrorKind(Enum):
    """What went wrong."""

    GENERIC = "generic"
    IO = "io"
    PATH_NOT_FOUND = "path-not-found"
    WATCH_NOT_FOUND = "watch-not-found"
    INVALID_CONFIG = "invalid-config"
    MAX_FILES_WATCH = "max-files-watch"


_FIXED_MESSAGES = {
    ErrorKind.PATH_NOT_FOUND: "No path was found.",
    ErrorKind.WATCH_NOT_FOUND: "No watch was found.",
    ErrorKind.MAX_FILES_WATCH: "OS file watch limit reached.",
}


class NotifyError(Exception):
    """An error of a given kind, optionally about some paths.

    `detail` holds the message for generic errors, the `OSError` for i/o errors
    and the `Config` for invalid-configuration errors.
    """

    def __init__(
        self,
        kind: ErrorKind,
        detail: Any = None,
        paths: Iterable[str | os.PathLike[str]] = (),
    ) -> None:
        if kind is ErrorKind.GENERIC and not isinstance(detail, str):
            raise TypeError("a generic error needs a message")
        if kind is ErrorKind.IO and not isinstance(detail, OSError):
            raise TypeError("an i/o error needs an OSError")
        if kind is ErrorKind.INVALID_CONFIG and not isinstance(detail, Config):
            raise TypeError("an invalid-config error needs a Config")
        if kind in _FIXED_MESSAGES and detail is not None:
            raise ValueError(f"error kind {kind.name} takes no detail")
        self.kind = kind
        self.detail = detail
        self.paths = [Path(p) for p in paths]
        super().__init__(self._message())
        if kind is ErrorKind.IO:
            self.__cause__ = detail

    def _message(self) -> str:
        match self.kind:
            case ErrorKind.GENERIC:
                return self.detail
            case ErrorKind.IO:
                return str(self.detail)
            case ErrorKind.INVALID_CONFIG:
                return f"Invalid configuration: {self.detail!r}"
            case _:
                return _FIXED_MESSAGES[self.kind]

    def _paths_text(self) -> str:
        return "[" + ", ".join(f'"{p}"' for p in self.paths) + "]"

    def __str__(self) -> str:
        message = self._message()
        if not self.paths:
            return message
        return f"{message} about {self._paths_text()}"

    def __repr__(self) -> str:
        return (
            f"NotifyError(kind={self.kind.name}, detail={self.detail!r}, "
            f"paths={self._paths_text()})"
        )

    def add_path(self, path: str | os.PathLike[str]) -> NotifyError:
        """Return a copy with the path appended."""
        return NotifyError(self.kind, self.detail, [*self.paths, Path(path)])

    def set_paths(self, paths: Iterable[str | os.PathLike[str]]) -> NotifyError:
        """Return a copy with the paths replaced."""
        return NotifyError(self.kind, self.detail, paths)

    @classmethod
    def generic(cls, message: str) -> NotifyError:
        return cls(ErrorKind.GENERIC, message)

    @classmethod
    def io(cls, error: OSError) -> NotifyError:
        return cls(ErrorKind.IO, error)

    @classmethod
    def path_not_found(cls) -> NotifyError:
        return cls(ErrorKind.PATH_NOT_FOUND)

    @classmethod
    def watch_not_found(cls) -> NotifyError:
        return cls(ErrorKind.WATCH_NOT_FOUND)

    @classmethod
    def max_files_watch(cls) -> NotifyError:
        return cls(ErrorKind.MAX_FILES_WATCH)

    @classmethod
    def invalid_config(cls, config: Config) -> NotifyError:
        return cls(ErrorKind.INVALID_CONFIG, config)