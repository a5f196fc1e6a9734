"""Identifiers that uniquely name a file on one machine at a given time."""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass
from functools import total_ordering

_INODE = "inode"
_LOW_RES = "lowres"
_HIGH_RES = "highres"
_RANK = {_INODE: 0, _LOW_RES: 1, _HIGH_RES: 2}
_U32 = 2**32
_U64 = 2**64
_U128 = 2**128


def _check(name: str, value: int, limit: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {value!r}")
    if not 0 <= value < limit:
        raise ValueError(f"{name} out of range: {value}")
    return value


@total_ordering
@dataclass(frozen=True, eq=True)
class FileId:
    """A device or volume number paired with a per-volume file number.

    Build one with `new_inode`, `new_low_res` or `new_high_res`.
    """

    variant: str
    volume: int
    index: int

    def __post_init__(self) -> None:
        if self.variant not in _RANK:
            raise ValueError(f"unknown file id variant {self.variant!r}")

    @classmethod
    def new_inode(cls, device_id: int, inode_number: int) -> FileId:
        """Device id and inode number."""
        return cls(_INODE, _check("device_id", device_id, _U64),
                   _check("inode_number", inode_number, _U64))

    @classmethod
    def new_low_res(cls, volume_serial_number: int, file_index: int) -> FileId:
        """32-bit volume serial number and 64-bit file index."""
        return cls(_LOW_RES, _check("volume_serial_number", volume_serial_number, _U32),
                   _check("file_index", file_index, _U64))

    @classmethod
    def new_high_res(cls, volume_serial_number: int, file_id: int) -> FileId:
        """64-bit volume serial number and 128-bit file id."""
        return cls(_HIGH_RES, _check("volume_serial_number", volume_serial_number, _U64),
                   _check("file_id", file_id, _U128))

    def _key(self) -> tuple[int, int, int]:
        return (_RANK[self.variant], self.volume, self.index)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, FileId):
            return NotImplemented
        return self._key() < other._key()

    def _require(self, variant: str, attribute: str) -> None:
        if self.variant != variant:
            raise AttributeError(f"{self.variant} file id has no {attribute}")

    @property
    def device_id(self) -> int:
        self._require(_INODE, "device_id")
        return self.volume

    @property
    def inode_number(self) -> int:
        self._require(_INODE, "inode_number")
        return self.index

    @property
    def volume_serial_number(self) -> int:
        if self.variant == _INODE:
            raise AttributeError("inode file id has no volume_serial_number")
        return self.volume

    @property
    def file_index(self) -> int:
        self._require(_LOW_RES, "file_index")
        return self.index

    @property
    def file_id(self) -> int:
        self._require(_HIGH_RES, "file_id")
        return self.index

    def __repr__(self) -> str:
        if self.variant == _INODE:
            return f"Inode(device_id={self.volume}, inode_number={self.index})"
        if self.variant == _LOW_RES:
            return f"LowRes(volume_serial_number={self.volume}, file_index={self.index})"
        return f"HighRes(volume_serial_number={self.volume}, file_id={self.index})"


def get_file_id(path: str | os.PathLike[str]) -> FileId:
    """Return the id of the file or directory at `path`, following symlinks.

    Raises `OSError` if the path cannot be read.
    """
    stat = os.stat(path)
    if os.name == "nt":
        return FileId.new_high_res(stat.st_dev, stat.st_ino)
    return FileId.new_inode(stat.st_dev, stat.st_ino)


def main(argv: list[str] | None = None) -> int:
    """Print the file id of the path given on the command line."""
    parser = argparse.ArgumentParser(prog="file-id", description="Print a file's unique id.")
    parser.add_argument("path")
    args = parser.parse_args(argv)
    try:
        print(repr(get_file_id(args.path)))
    except OSError as error:
        print(f"Error: {error}")
    return 0