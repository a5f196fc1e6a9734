from pathlib import Path

import pytest

from notifykit.config import Config
from notifykit.errors import ErrorKind, NotifyError


def test_display_generic():
    assert str(NotifyError.generic("Some error")) == "Some error"


def test_display_io():
    assert str(NotifyError.io(OSError("Some error"))) == "Some error"


def test_io_keeps_cause():
    cause = FileNotFoundError("gone")
    error = NotifyError.io(cause)
    assert error.kind is ErrorKind.IO
    assert error.__cause__ is cause


@pytest.mark.parametrize(
    "factory, message",
    [
        (NotifyError.path_not_found, "No path was found."),
        (NotifyError.watch_not_found, "No watch was found."),
        (NotifyError.max_files_watch, "OS file watch limit reached."),
    ],
)
def test_fixed_messages(factory, message):
    assert str(factory()) == message


def test_invalid_config_mentions_config():
    config = Config().with_manual_polling()
    error = NotifyError.invalid_config(config)
    assert error.kind is ErrorKind.INVALID_CONFIG
    assert error.detail == config
    assert str(error).startswith("Invalid configuration: ")
    assert repr(config) in str(error)


def test_paths_in_message():
    error = NotifyError.path_not_found().add_path("/a")
    assert str(error) == 'No path was found. about ["/a"]'


def test_add_path_returns_copy():
    original = NotifyError.generic("boom")
    extended = original.add_path("/x").add_path("/y")
    assert original.paths == []
    assert extended.paths == [Path("/x"), Path("/y")]
    assert extended.kind is ErrorKind.GENERIC


def test_set_paths_replaces():
    error = NotifyError.watch_not_found().add_path("/x").set_paths(["/z"])
    assert error.paths == [Path("/z")]


def test_can_be_raised():
    error = NotifyError.watch_not_found()
    assert error.kind is ErrorKind.WATCH_NOT_FOUND
    with pytest.raises(NotifyError, match="No watch was found.") as info:
        raise error
    assert info.value is error


def test_generic_requires_message():
    with pytest.raises(TypeError):
        NotifyError(ErrorKind.GENERIC)


def test_fixed_kind_rejects_detail():
    with pytest.raises(ValueError):
        NotifyError(ErrorKind.PATH_NOT_FOUND, "extra")