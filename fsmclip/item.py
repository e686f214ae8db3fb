"""Clipboard items and the file metadata they carry."""

from __future__ import annotations

import itertools
import os
import stat
import threading
import time
from dataclasses import asdict, dataclass
from enum import IntEnum
from pathlib import PurePath
from typing import Any

from .errors import MetadataError, SerializationError

_id_counter = itertools.count(1)
_id_lock = threading.Lock()


def _next_item_id() -> int:
    with _id_lock:
        return next(_id_counter)


def _now_ns() -> int:
    return time.time_ns()


class ClipBoardOperation(IntEnum):
    COPY = 0
    MOVE = 1


class ItemStatus(IntEnum):
    READY = 0
    IN_PROGRESS = 1
    COMPLETED = 2
    FAILED = 3


class FileType(IntEnum):
    UNKNOWN = 0
    DIRECTORY = 1
    REGULAR_FILE = 2
    SYMLINK = 3
    BLOCK_DEVICE = 4
    CHAR_DEVICE = 5
    FIFO = 6
    SOCKET = 7

    @classmethod
    def _missing_(cls, value: object) -> FileType:
        return cls.UNKNOWN


_FLAG_DIR = 0b0001
_FLAG_SYMLINK = 0b0010
_FLAG_HIDDEN = 0b0100


@dataclass(frozen=True)
class FilePermissions:
    readable: bool
    writable: bool
    executable: bool

    @classmethod
    def from_mode(cls, mode: int) -> FilePermissions:
        """Read the owner permission bits of a Unix mode."""
        return cls(
            readable=bool(mode & 0o400),
            writable=bool(mode & 0o200),
            executable=bool(mode & 0o100),
        )


def _pack_permissions(st: os.stat_result) -> int:
    if os.name == "posix":
        return st.st_mode & 0o7777
    return 0o644 if st.st_mode & stat.S_IWRITE else 0o444


def _is_hidden_name(path: str) -> bool:
    name = PurePath(path).name
    return name not in ("", "..") and name.startswith(".")


@dataclass(frozen=True)
class CompactMetadata:
    size: int = 0
    modified: int = 0
    permissions: int = 0
    file_type: FileType = FileType.UNKNOWN
    flags: int = 0

    @classmethod
    def from_path(cls, path: str | bytes | os.PathLike) -> CompactMetadata:
        """Gather metadata for ``path``, following symlinks."""
        try:
            st = os.stat(path)
        except OSError as exc:
            raise MetadataError(path, exc) from exc

        is_link = os.path.islink(path)
        if stat.S_ISDIR(st.st_mode):
            file_type = FileType.DIRECTORY
        elif stat.S_ISREG(st.st_mode):
            file_type = FileType.REGULAR_FILE
        elif is_link:
            file_type = FileType.SYMLINK
        else:
            file_type = FileType.UNKNOWN

        flags = 0
        if stat.S_ISDIR(st.st_mode):
            flags |= _FLAG_DIR
        if is_link:
            flags |= _FLAG_SYMLINK
        if _is_hidden_name(os.fsdecode(path)):
            flags |= _FLAG_HIDDEN
        if getattr(st, "st_file_attributes", 0) & 0x2:
            flags |= _FLAG_HIDDEN

        return cls(
            size=st.st_size,
            modified=max(st.st_mtime_ns, 0),
            permissions=_pack_permissions(st),
            file_type=file_type,
            flags=flags,
        )

    def is_readable(self) -> bool:
        return bool(self.permissions & 0o400)

    def is_writable(self) -> bool:
        return bool(self.permissions & 0o200)

    def is_executable(self) -> bool:
        return bool(self.permissions & 0o100)

    def is_dir(self) -> bool:
        return bool(self.flags & _FLAG_DIR)

    def is_symlink(self) -> bool:
        return bool(self.flags & _FLAG_SYMLINK)

    def is_hidden(self) -> bool:
        return bool(self.flags & _FLAG_HIDDEN)


@dataclass(frozen=True)
class ClipBoardItem:
    id: int
    source_path: str
    operation: ClipBoardOperation
    metadata: CompactMetadata
    added_at: int
    status: ItemStatus = ItemStatus.READY

    @classmethod
    def _create(
        cls, path: str | bytes | os.PathLike, operation: ClipBoardOperation
    ) -> ClipBoardItem:
        metadata = CompactMetadata.from_path(path)
        return cls(
            id=_next_item_id(),
            source_path=os.fsdecode(path),
            operation=operation,
            metadata=metadata,
            added_at=_now_ns(),
            status=ItemStatus.READY,
        )

    @classmethod
    def new_copy(cls, path: str | bytes | os.PathLike) -> ClipBoardItem:
        """Create a copy item for an existing path."""
        return cls._create(path, ClipBoardOperation.COPY)

    @classmethod
    def new_move(cls, path: str | bytes | os.PathLike) -> ClipBoardItem:
        """Create a move item for an existing path."""
        return cls._create(path, ClipBoardOperation.MOVE)

    def display_name(self) -> str:
        """The part of the path after its last separator, or the whole path."""
        path = self.source_path
        sep = path.rfind("/")
        if sep < 0:
            sep = path.rfind("\\")
        if 0 <= sep < len(path) - 1:
            return path[sep + 1 :]
        return path

    def operation_tag(self) -> str:
        return "C" if self.operation is ClipBoardOperation.COPY else "M"

    def is_expired(self, max_age_ns: int) -> bool:
        return max(_now_ns() - self.added_at, 0) > max_age_ns

    def age_string(self) -> str:
        """Age in the largest whole unit: s, m, h or d."""
        age_secs = max(_now_ns() - self.added_at, 0) // 1_000_000_000
        if age_secs < 60:
            return f"{age_secs}s"
        if age_secs < 3600:
            return f"{age_secs // 60}m"
        if age_secs < 86400:
            return f"{age_secs // 3600}h"
        return f"{age_secs // 86400}d"

    def matches_pattern(self, pattern: str | bytes) -> bool:
        """Whether the source path contains ``pattern``."""
        if isinstance(pattern, str):
            pattern = pattern.encode("utf-8", "surrogateescape")
        return pattern in self.source_path.encode("utf-8", "surrogateescape")

    def to_dict(self) -> dict[str, Any]:
        metadata = asdict(self.metadata)
        metadata["file_type"] = int(self.metadata.file_type)
        return {
            "id": self.id,
            "source_path": self.source_path,
            "operation": int(self.operation),
            "metadata": metadata,
            "added_at": self.added_at,
            "status": int(self.status),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ClipBoardItem:
        try:
            meta = data["metadata"]
            metadata = CompactMetadata(
                size=int(meta["size"]),
                modified=int(meta["modified"]),
                permissions=int(meta["permissions"]),
                file_type=FileType(int(meta["file_type"])),
                flags=int(meta["flags"]),
            )
            return cls(
                id=int(data["id"]),
                source_path=str(data["source_path"]),
                operation=ClipBoardOperation(data["operation"]),
                metadata=metadata,
                added_at=int(data["added_at"]),
                status=ItemStatus(data["status"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise SerializationError(f"invalid clipboard item: {exc}") from exc