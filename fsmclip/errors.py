"""Exception hierarchy for clipboard operations."""

from __future__ import annotations

import os

_KIND_NAMES: tuple[tuple[type[OSError], str], ...] = (
    (FileNotFoundError, "NotFound"),
    (PermissionError, "PermissionDenied"),
    (FileExistsError, "AlreadyExists"),
    (IsADirectoryError, "IsADirectory"),
    (NotADirectoryError, "NotADirectory"),
    (InterruptedError, "Interrupted"),
    (TimeoutError, "TimedOut"),
    (BrokenPipeError, "BrokenPipe"),
    (ConnectionRefusedError, "ConnectionRefused"),
    (ConnectionResetError, "ConnectionReset"),
    (ConnectionAbortedError, "ConnectionAborted"),
)


def _kind_name(error: OSError | str) -> str:
    """Return a short name for the kind of an OS error."""
    if isinstance(error, str):
        return error
    for exc_type, name in _KIND_NAMES:
        if isinstance(error, exc_type):
            return name
    return "Other"


def _path_text(path: str | bytes | os.PathLike) -> str:
    return os.fsdecode(path)


class ClipError(Exception):
    """Base class of every clipboard error."""

    recoverable = False
    retryable = False

    def is_recoverable(self) -> bool:
        """Whether the caller can carry on after this error."""
        return self.recoverable

    def should_retry(self) -> bool:
        """Whether the failed operation is worth retrying."""
        return self.retryable


class ItemNotFound(ClipError):
    recoverable = True

    def __init__(self, item_id: int) -> None:
        self.item_id = item_id
        super().__init__(f"ClipBoard item not found: {item_id}")


class DuplicateItem(ClipError):
    recoverable = True

    def __init__(self, path: str | bytes | os.PathLike) -> None:
        self.path = _path_text(path)
        super().__init__(f"Duplicate item already in clipboard: {self.path}")


class ClipBoardFull(ClipError):
    recoverable = True

    def __init__(self, max_items: int) -> None:
        self.max_items = max_items
        super().__init__(f"ClipBoard is full (max {max_items} items)")


class MetadataError(ClipError):
    def __init__(self, path: str | bytes | os.PathLike, error: OSError | str) -> None:
        self.path = _path_text(path)
        self.kind = _kind_name(error)
        super().__init__(f"Failed to read metadata for {self.path}: {self.kind}")


class InvalidPath(ClipError):
    def __init__(self, path: str | bytes | os.PathLike) -> None:
        self.path = _path_text(path)
        super().__init__(f"Invalid file path: {self.path}")


class UnsupportedOperation(ClipError):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Operation not supported: {message}")


class ConfigError(ClipError):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"ClipBoard configuration error: {message}")


class FileSystemError(ClipError):
    def __init__(self, error: OSError | str) -> None:
        self.kind = _kind_name(error)
        super().__init__(f"File system error: {self.kind}")


class MemoryMapError(ClipError):
    def __init__(self, error: OSError | str) -> None:
        self.kind = _kind_name(error)
        super().__init__(f"Memory mapping error: {self.kind}")


class SerializationError(ClipError):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Serialization error: {message}")


class LockFreeRetry(ClipError):
    recoverable = True
    retryable = True

    def __init__(self) -> None:
        super().__init__("Lock-free operation failed (retry recommended)")


class SimdUnsupported(ClipError):
    def __init__(self) -> None:
        super().__init__("SIMD operation not supported on this CPU")