# notifykit

Building blocks for reacting to file system changes: an event model,
file IDs, a file ID cache and two debouncers that collapse bursts of raw
events. It has no dependencies outside the standard library.

## What is in the package

- `notifykit.event`: `Event`, with a hierarchical `EventKind`
  (`EventKind.ANY`, `EventKind.OTHER`, or `EventKind.access(...)`,
  `.create(...)`, `.modify(...)`, `.remove(...)` with a sub-kind such as
  `AccessKind`, `CreateKind`, `ModifyKind`, `RemoveKind`, `RenameMode`,
  `DataChange`, `MetadataKind` or `AccessMode`), the paths it concerns and
  `EventAttributes` (tracker, `Flag`, info, source, process id). The
  `set_kind`, `add_path`, `add_some_path`, `set_tracker`, `set_info`,
  `set_flag` and `set_process_id` methods return a changed copy.
  `need_rescan()` tells whether the `Flag.RESCAN` flag is set. Events and
  kinds convert to and from JSON-compatible data with `to_json()` and
  `from_json()`; the process id takes no part in comparison or JSON.
- `notifykit.config`: `RecursiveMode` and a frozen `Config` holding a
  poll interval in seconds (30 by default, `None` after
  `with_manual_polling()`) and a `compare_contents` switch.
- `notifykit.errors`: `NotifyError`, an exception carrying an `ErrorKind`,
  a detail and the paths it concerns, with constructors `generic`, `io`,
  `path_not_found`, `watch_not_found`, `max_files_watch` and
  `invalid_config`.
- `notifykit.file_id`: `get_file_id(path)` returns a `FileId` for a file
  or directory, following symlinks; it is the device and inode number
  from `os.stat` (on Windows a high-resolution id built from the same
  fields). It raises `OSError` if the path cannot be read.
- `notifykit.cache`: the `FileIdCache` interface, `FileIdMap`, which
  remembers the ids of everything below roots registered with
  `add_root(path, recursive_mode)`, and `NoCache`, which remembers
  nothing.
- `notifykit.debouncer_mini`: emits at most one `DebouncedEvent` per path
  per timeout, of kind `DebouncedEventKind.ANY` once the path has gone
  quiet, or `ANY_CONTINUOUS` while it keeps changing. Its `Config` holds
  the timeout (0.5 s by default) and batch mode (on by default).
- `notifykit.debounced_event` and `notifykit.debounce_state`: the
  timestamped `DebouncedEvent` and the `DebounceData` state behind the
  full debouncer, usable on their own with a custom clock.
- `notifykit.debouncer_full`: keeps the full event detail, stitches
  rename-from and rename-to into one rename (by tracker or by file id),
  merges successive renames, drops duplicate creates and modifications
  right after a create, and emits one remove for a removed directory.

## Feeding a debouncer

Both debouncers take raw events through `Debouncer.handle()`, which
accepts an `Event` or a `NotifyError`, and pass results to a handler on
a background thread. The handler may be a callable, a `queue.Queue`
(anything with `put`) or an object with a `handle_event` method.
Debouncers are context managers; leaving the block calls `stop()`.

```python
from notifykit.debouncer_full import new_debouncer
from notifykit.event import CreateKind, Event, EventKind

def on_result(result):
    print(result)

with new_debouncer(2.0, None, on_result) as debouncer:
    debouncer.handle(Event(EventKind.create(CreateKind.FILE), ["/tmp/a.txt"]))
    ...
```

The full debouncer checks for expired events every tick (a quarter of the
timeout unless a tick rate is given; a tick rate above the timeout raises
`NotifyError`) and hands over expired events as one list and stored
errors as another. `stop_nonblocking()` stops it without waiting for the
thread. `new_debouncer_opt(timeout, tick_rate, handler, file_id_cache)`
takes the cache to use, for example a `FileIdMap` with roots added.

The mini debouncer passes errors on at once, one `NotifyError` at a time:

```python
from notifykit.debouncer_mini import Config, new_debouncer, new_debouncer_opt

debouncer = new_debouncer(1.0, on_result)
debouncer = new_debouncer_opt(Config().with_timeout(1.0).with_batch_mode(False), on_result)
```

## What the package does not do

It does not watch the file system itself: there is no watcher that reads
operating-system notifications and no polling watcher, and `Config` only
holds settings for one. Raw events must come from your own code and be
passed to `Debouncer.handle()`.

## File IDs from the command line

```
notifykit-file-id path/to/file
```

prints the `FileId` of the given path, for example
`Inode(device_id=66310, inode_number=1234567)`, or `Error: ...` if it
cannot be read.

## Tests

```
pip install "notifykit[test]"
pytest
```