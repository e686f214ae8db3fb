import pytest

from fsmclip.errors import (
    ClipBoardFull,
    ClipError,
    ConfigError,
    DuplicateItem,
    FileSystemError,
    InvalidPath,
    ItemNotFound,
    LockFreeRetry,
    MemoryMapError,
    MetadataError,
    SerializationError,
    SimdUnsupported,
    UnsupportedOperation,
)


def _recoverable_errors():
    return [
        ItemNotFound(3),
        DuplicateItem("/tmp/a"),
        ClipBoardFull(10),
        LockFreeRetry(),
    ]


def _unrecoverable_errors():
    return [
        MetadataError("/tmp/a", FileNotFoundError()),
        InvalidPath("/"),
        UnsupportedOperation("link"),
        ConfigError("broken"),
        FileSystemError(PermissionError()),
        MemoryMapError(OSError()),
        SerializationError("bad data"),
        SimdUnsupported(),
    ]


def test_recoverable_errors():
    errors = [
        ItemNotFound(3),
        DuplicateItem("/tmp/a"),
        ClipBoardFull(10),
        LockFreeRetry(),
    ]
    assert [error.is_recoverable() for error in errors] == [True, True, True, True]


def test_unrecoverable_errors():
    errors = [
        MetadataError("/tmp/a", FileNotFoundError()),
        InvalidPath("/"),
        UnsupportedOperation("link"),
        ConfigError("broken"),
        FileSystemError(PermissionError()),
        MemoryMapError(OSError()),
        SerializationError("bad data"),
        SimdUnsupported(),
    ]
    assert [error.is_recoverable() for error in errors] == [False] * 8


def test_only_lock_free_retry_should_retry():
    assert LockFreeRetry().should_retry() is True
    others = [
        ItemNotFound(3),
        DuplicateItem("/tmp/a"),
        ClipBoardFull(10),
        MetadataError("/tmp/a", FileNotFoundError()),
        InvalidPath("/"),
        UnsupportedOperation("link"),
        ConfigError("broken"),
        FileSystemError(PermissionError()),
        MemoryMapError(OSError()),
        SerializationError("bad data"),
        SimdUnsupported(),
    ]
    assert [error.should_retry() for error in others] == [False] * 11


def test_all_errors_are_clip_errors():
    errors = _recoverable_errors() + _unrecoverable_errors()
    assert len(errors) == 12
    for error in errors:
        with pytest.raises(ClipError) as excinfo:
            raise error
        assert excinfo.value is error


def test_item_not_found_message():
    error = ItemNotFound(42)
    assert str(error).startswith("ClipBoard item not found")
    assert str(error).endswith("42")
    assert error.item_id == 42


def test_duplicate_item_keeps_path():
    error = DuplicateItem("/data/report.txt")
    assert error.path == "/data/report.txt"
    assert str(error).startswith("Duplicate item already in clipboard")
    assert "/data/report.txt" in str(error)


def test_clipboard_full_message():
    error = ClipBoardFull(100)
    assert error.max_items == 100
    assert "100" in str(error)


def test_metadata_error_kind_from_os_error():
    error = MetadataError("/missing", FileNotFoundError(2, "no such file"))
    assert error.kind == "NotFound"
    assert error.path == "/missing"
    assert str(error).startswith("Failed to read metadata for /missing")


def test_file_system_error_permission_kind():
    assert FileSystemError(PermissionError()).kind == "PermissionDenied"


def test_unknown_os_error_kind_is_other():
    assert MemoryMapError(OSError()).kind == "Other"


def test_kind_given_as_text_is_kept():
    assert FileSystemError("Interrupted").kind == "Interrupted"


def test_serialization_error_message():
    error = SerializationError("truncated")
    assert str(error).startswith("Serialization error")
    assert error.message == "truncated"


def test_config_error_message():
    error = ConfigError("no directory")
    assert str(error).startswith("ClipBoard configuration error")
    assert str(error).endswith("no directory")