"""Event kinds, event attributes and the event type delivered by watchers."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, ClassVar, Union


def _camel(token: str) -> str:
    return "".join(part.capitalize() for part in token.split("-"))


class _NamedEnum(Enum):
    """Enum whose repr is the variant name in CamelCase."""

    def __repr__(self) -> str:
        return _camel(self.value)

    __str__ = __repr__


class AccessMode(_NamedEnum):
    """Open or close operations on files."""

    ANY = "any"
    EXECUTE = "execute"
    READ = "read"
    WRITE = "write"
    OTHER = "other"


class CreateKind(_NamedEnum):
    """Creation operations on files."""

    ANY = "any"
    FILE = "file"
    FOLDER = "folder"
    OTHER = "other"


class DataChange(_NamedEnum):
    """Changes to the data content of a file."""

    ANY = "any"
    SIZE = "size"
    CONTENT = "content"
    OTHER = "other"


class MetadataKind(_NamedEnum):
    """Changes to the metadata of a file or folder."""

    ANY = "any"
    ACCESS_TIME = "access-time"
    WRITE_TIME = "write-time"
    PERMISSIONS = "permissions"
    OWNERSHIP = "ownership"
    EXTENDED = "extended"
    OTHER = "other"


class RenameMode(_NamedEnum):
    """Changes to the name of a file or folder."""

    ANY = "any"
    TO = "to"
    FROM = "from"
    BOTH = "both"
    OTHER = "other"


class RemoveKind(_NamedEnum):
    """Removal operations on files."""

    ANY = "any"
    FILE = "file"
    FOLDER = "folder"
    OTHER = "other"


class Flag(_NamedEnum):
    """Special flag on an event."""

    RESCAN = "Rescan"


@dataclass(frozen=True)
class _Tagged:
    """A kind that is either plain or carries a mode enum."""

    kind: str
    mode: Enum | None = None

    _plain: ClassVar[tuple[str, ...]] = ()
    _moded: ClassVar[dict[str, type[Enum]]] = {}
    _renamed: ClassVar[dict[str, str]] = {}

    def __post_init__(self) -> None:
        name = type(self).__name__
        if self.kind in self._plain:
            if self.mode is not None:
                raise ValueError(f"{name} {self.kind!r} takes no mode")
        elif self.kind in self._moded:
            expected = self._moded[self.kind]
            if not isinstance(self.mode, expected):
                raise TypeError(
                    f"{name} {self.kind!r} needs a {expected.__name__}, got {self.mode!r}"
                )
        else:
            raise ValueError(f"unknown {name} {self.kind!r}")

    def __repr__(self) -> str:
        name = _camel(self.kind)
        return name if self.mode is None else f"{name}({self.mode!r})"

    def _to_json(self) -> dict[str, str]:
        out = {"kind": self._renamed.get(self.kind, self.kind)}
        if self.mode is not None:
            out["mode"] = self.mode.value
        return out

    @classmethod
    def _from_json(cls, data: Any) -> _Tagged:
        name = cls.__name__
        if not isinstance(data, dict) or "kind" not in data:
            raise ValueError(f"invalid {name}: {data!r}")
        raw = data["kind"]
        if raw in cls._renamed:
            raise ValueError(f"unknown {name} {raw!r}")
        reverse = {json_name: kind for kind, json_name in cls._renamed.items()}
        kind = reverse.get(raw, raw)
        if kind in cls._moded:
            if "mode" not in data:
                raise ValueError(f"{name} {raw!r} needs a mode")
            return cls(kind, cls._moded[kind](data["mode"]))
        if kind in cls._plain:
            if "mode" in data:
                raise ValueError(f"{name} {raw!r} takes no mode")
            return cls(kind)
        raise ValueError(f"unknown {name} {raw!r}")


class AccessKind(_Tagged):
    """Non-mutating access operations on files."""

    _plain = ("any", "read", "other")
    _moded = {"open": AccessMode, "close": AccessMode}

    ANY: ClassVar[AccessKind]
    READ: ClassVar[AccessKind]
    OTHER: ClassVar[AccessKind]

    @classmethod
    def open(cls, mode: AccessMode) -> AccessKind:
        """A file, or a handle to it, was opened."""
        return cls("open", mode)

    @classmethod
    def close(cls, mode: AccessMode) -> AccessKind:
        """A file, or a handle to it, was closed."""
        return cls("close", mode)


AccessKind.ANY = AccessKind("any")
AccessKind.READ = AccessKind("read")
AccessKind.OTHER = AccessKind("other")


class ModifyKind(_Tagged):
    """Mutation of content, name or metadata."""

    _plain = ("any", "other")
    _moded = {"data": DataChange, "metadata": MetadataKind, "name": RenameMode}
    _renamed = {"name": "rename"}

    ANY: ClassVar[ModifyKind]
    OTHER: ClassVar[ModifyKind]

    @classmethod
    def data(cls, change: DataChange) -> ModifyKind:
        """The data content of a file changed."""
        return cls("data", change)

    @classmethod
    def metadata(cls, kind: MetadataKind) -> ModifyKind:
        """The metadata of a file or folder changed."""
        return cls("metadata", kind)

    @classmethod
    def name(cls, mode: RenameMode) -> ModifyKind:
        """The name of a file or folder changed."""
        return cls("name", mode)


ModifyKind.ANY = ModifyKind("any")
ModifyKind.OTHER = ModifyKind("other")


Detail = Union[AccessKind, CreateKind, ModifyKind, RemoveKind]

_DETAIL_TYPES: dict[str, type] = {
    "access": AccessKind,
    "create": CreateKind,
    "modify": ModifyKind,
    "remove": RemoveKind,
}
_PLAIN_CATEGORIES = ("any", "other")


@dataclass(frozen=True)
class EventKind:
    """Top-level event kind, with an optional sub-kind."""

    category: str
    detail: Detail | None = None

    ANY: ClassVar[EventKind]
    OTHER: ClassVar[EventKind]

    def __post_init__(self) -> None:
        if self.category in _PLAIN_CATEGORIES:
            if self.detail is not None:
                raise ValueError(f"event kind {self.category!r} takes no detail")
        elif self.category in _DETAIL_TYPES:
            expected = _DETAIL_TYPES[self.category]
            if not isinstance(self.detail, expected):
                raise TypeError(
                    f"event kind {self.category!r} needs a {expected.__name__}, "
                    f"got {self.detail!r}"
                )
        else:
            raise ValueError(f"unknown event kind {self.category!r}")

    @classmethod
    def access(cls, kind: AccessKind) -> EventKind:
        return cls("access", kind)

    @classmethod
    def create(cls, kind: CreateKind) -> EventKind:
        return cls("create", kind)

    @classmethod
    def modify(cls, kind: ModifyKind) -> EventKind:
        return cls("modify", kind)

    @classmethod
    def remove(cls, kind: RemoveKind) -> EventKind:
        return cls("remove", kind)

    def __repr__(self) -> str:
        name = _camel(self.category)
        return name if self.detail is None else f"{name}({self.detail!r})"

    def is_access(self) -> bool:
        return self.category == "access"

    def is_create(self) -> bool:
        return self.category == "create"

    def is_modify(self) -> bool:
        return self.category == "modify"

    def is_remove(self) -> bool:
        return self.category == "remove"

    def is_other(self) -> bool:
        return self.category == "other"

    def to_json(self) -> str | dict[str, dict[str, str]]:
        """Return a JSON-compatible value describing this kind."""
        if self.detail is None:
            return self.category
        if isinstance(self.detail, Enum):
            inner = {"kind": self.detail.value}
        else:
            inner = self.detail._to_json()
        return {self.category: inner}

    @classmethod
    def from_json(cls, data: Any) -> EventKind:
        """Build a kind from the value produced by `to_json`."""
        if isinstance(data, str):
            if data in _PLAIN_CATEGORIES:
                return cls(data)
            raise ValueError(f"unknown event kind {data!r}")
        if isinstance(data, dict) and len(data) == 1:
            ((category, inner),) = data.items()
            detail_type = _DETAIL_TYPES.get(category)
            if detail_type is None:
                raise ValueError(f"unknown event kind {category!r}")
            if issubclass(detail_type, Enum):
                if not isinstance(inner, dict) or "kind" not in inner:
                    raise ValueError(f"invalid {category} kind: {inner!r}")
                return cls(category, detail_type(inner["kind"]))
            return cls(category, detail_type._from_json(inner))
        raise ValueError(f"invalid event kind: {data!r}")


EventKind.ANY = EventKind("any")
EventKind.OTHER = EventKind("other")


@dataclass
class EventAttributes:
    """Additional attributes of an event.

    The process id is experimental and takes no part in comparison or serialisation.
    """

    tracker: int | None = None
    flag: Flag | None = None
    info: str | None = None
    source: str | None = None
    process_id: int | None = field(default=None, compare=False, repr=False)

    def _to_json(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.tracker is not None:
            out["tracker"] = self.tracker
        if self.flag is not None:
            out["flag"] = self.flag.value
        if self.info is not None:
            out["info"] = self.info
        if self.source is not None:
            out["source"] = self.source
        return out

    @classmethod
    def _from_json(cls, data: Any) -> EventAttributes:
        if not isinstance(data, dict):
            raise ValueError(f"invalid event attributes: {data!r}")
        tracker = data.get("tracker")
        if tracker is not None and (isinstance(tracker, bool) or not isinstance(tracker, int)):
            raise ValueError(f"invalid tracker: {tracker!r}")
        flag = data.get("flag")
        for key in ("info", "source"):
            value = data.get(key)
            if value is not None and not isinstance(value, str):
                raise ValueError(f"invalid {key}: {value!r}")
        return cls(
            tracker=tracker,
            flag=None if flag is None else Flag(flag),
            info=data.get("info"),
            source=data.get("source"),
        )


@dataclass
class Event:
    """A filesystem event: its kind, the paths it concerns and extra attributes."""

    kind: EventKind = EventKind.ANY
    paths: list[Path] = field(default_factory=list)
    attrs: EventAttributes = field(default_factory=EventAttributes)

    def __post_init__(self) -> None:
        if not isinstance(self.kind, EventKind):
            raise TypeError(f"kind must be an EventKind, got {self.kind!r}")
        self.paths = [Path(p) for p in self.paths]

    def __repr__(self) -> str:
        paths = [str(p) for p in self.paths]
        return (
            f"Event(kind={self.kind!r}, paths={paths!r}, tracker={self.tracker!r}, "
            f"flag={self.flag!r}, info={self.info!r}, source={self.source!r})"
        )

    @property
    def tracker(self) -> int | None:
        return self.attrs.tracker

    @property
    def flag(self) -> Flag | None:
        return self.attrs.flag

    @property
    def info(self) -> str | None:
        return self.attrs.info

    @property
    def source(self) -> str | None:
        return self.attrs.source

    @property
    def process_id(self) -> int | None:
        return self.attrs.process_id

    def need_rescan(self) -> bool:
        """Whether some events may have been missed before this one."""
        return self.attrs.flag is Flag.RESCAN

    def _copy(self) -> Event:
        return Event(self.kind, list(self.paths), replace(self.attrs))

    def set_kind(self, kind: EventKind) -> Event:
        """Return a copy with the given kind."""
        new = self._copy()
        if not isinstance(kind, EventKind):
            raise TypeError(f"kind must be an EventKind, got {kind!r}")
        new.kind = kind
        return new

    def add_path(self, path: str | os.PathLike[str]) -> Event:
        """Return a copy with the path appended."""
        new = self._copy()
        new.paths.append(Path(path))
        return new

    def add_some_path(self, path: str | os.PathLike[str] | None) -> Event:
        """Return a copy with the path appended, if one is given."""
        return self._copy() if path is None else self.add_path(path)

    def set_tracker(self, tracker: int) -> Event:
        new = self._copy()
        new.attrs.tracker = tracker
        return new

    def set_info(self, info: str) -> Event:
        new = self._copy()
        new.attrs.info = info
        return new

    def set_flag(self, flag: Flag) -> Event:
        new = self._copy()
        new.attrs.flag = flag
        return new

    def set_process_id(self, process_id: int) -> Event:
        new = self._copy()
        new.attrs.process_id = process_id
        return new

    def to_json(self) -> dict[str, Any]:
        """Return a JSON-compatible dictionary describing this event."""
        return {
            "type": self.kind.to_json(),
            "paths": [str(p) for p in self.paths],
            "attrs": self.attrs._to_json(),
        }

    @classmethod
    def from_json(cls, data: Any) -> Event:
        """Build an event from the dictionary produced by `to_json`."""
        if not isinstance(data, dict) or "type" not in data or "paths" not in data:
            raise ValueError(f"invalid event: {data!r}")
        paths = data["paths"]
        if not isinstance(paths, list) or not all(isinstance(p, str) for p in paths):
            raise ValueError(f"invalid event paths: {paths!r}")
        attrs = EventAttributes._from_json(data.get("attrs", {}))
        return cls(EventKind.from_json(data["type"]), [Path(p) for p in paths], attrs)