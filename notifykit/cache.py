"""Caches of file ids, used to pair up the two halves of a rename."""

from __future__ import annotations

import os
import stat
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterator

from notifykit.config import RecursiveMode
from notifykit.file_id import FileId, get_file_id


class FileIdCache(ABC):
    """The interface of a file id cache."""

    @abstractmethod
    def cached_file_id(self, path: str | os.PathLike[str]) -> FileId | None:
        """Return the cached id for `path`, without touching the disk."""

    @abstractmethod
    def add_path(self, path: str | os.PathLike[str]) -> None:
        """Add a path to the cache or refresh its id."""

    @abstractmethod
    def remove_path(self, path: str | os.PathLike[str]) -> None:
        """Remove a path from the cache."""

    @abstractmethod
    def rescan(self) -> None:
        """Re-read all paths; called when the back-end has dropped events."""


def _dir_key(path: Path) -> tuple[int, int] | None:
    try:
        info = os.stat(path)
    except OSError:
        return None
    if not stat.S_ISDIR(info.st_mode):
        return None
    return (info.st_dev, info.st_ino)


def _walk(
    path: Path, depth: int, max_depth: int | None, ancestors: frozenset[tuple[int, int]]
) -> Iterator[Path]:
    """Yield `path` and everything below it, following links, skipping loops."""
    yield path
    if max_depth is not None and depth >= max_depth:
        return
    key = _dir_key(path)
    if key is None:
        return
    ancestors = ancestors | {key}
    try:
        with os.scandir(path) as entries:
            children = sorted(Path(entry.path) for entry in entries)
    except OSError:
        return
    for child in children:
        if _dir_key(child) in ancestors:
            continue
        yield from _walk(child, depth + 1, max_depth, ancestors)


class FileIdMap(FileIdCache):
    """A cache of the file system ids of all watched files."""

    def __init__(self) -> None:
        self._paths: dict[Path, FileId] = {}
        self._roots: list[tuple[Path, RecursiveMode]] = []

    @property
    def paths(self) -> dict[Path, FileId]:
        """A copy of the cached ids."""
        return dict(self._paths)

    @property
    def roots(self) -> list[tuple[Path, RecursiveMode]]:
        """A copy of the registered roots."""
        return list(self._roots)

    def add_root(self, path: str | os.PathLike[str], recursive_mode: RecursiveMode) -> None:
        """Register a root and cache it; recursive roots include all children."""
        path = Path(path)
        self._roots.append((path, recursive_mode))
        self.add_path(path)

    def remove_root(self, path: str | os.PathLike[str]) -> None:
        """Forget a root, the roots below it and all cached paths below it."""
        path = Path(path)
        self._roots = [(root, mode) for root, mode in self._roots if not root.is_relative_to(path)]
        self.remove_path(path)

    def cached_file_id(self, path: str | os.PathLike[str]) -> FileId | None:
        return self._paths.get(Path(path))

    def add_path(self, path: str | os.PathLike[str]) -> None:
        path = Path(path)
        is_recursive = next(
            (mode.is_recursive() for root, mode in self._roots if path.is_relative_to(root)),
            False,
        )
        for found in _walk(path, 0, None if is_recursive else 1, frozenset()):
            try:
                self._paths[found] = get_file_id(found)
            except OSError:
                continue

    def remove_path(self, path: str | os.PathLike[str]) -> None:
        path = Path(path)
        self._paths = {p: i for p, i in self._paths.items() if not p.is_relative_to(path)}

    def rescan(self) -> None:
        for root, _ in list(self._roots):
            self.add_path(root)


class NoCache(FileIdCache):
    """A cache that holds nothing, disabling tracking by file id."""

    def cached_file_id(self, path: str | os.PathLike[str]) -> FileId | None:
        return None

    def add_path(self, path: str | os.PathLike[str]) -> None:
        pass

    def remove_path(self, path: str | os.PathLike[str]) -> None:
        pass

    def rescan(self) -> None:
        pass