"""Paste operations built from clipboard items, and their batch scheduling."""

from __future__ import annotations

import itertools
import os
import threading
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable

from .errors import ClipError, InvalidPath
from .item import ClipBoardItem, ClipBoardOperation, CompactMetadata

_operation_counter = itertools.count(1)
_operation_lock = threading.Lock()

_MIB = 1024 * 1024
_BYTES_PER_MS = 100 * _MIB // 1000


def _next_operation_id() -> int:
    with _operation_lock:
        return next(_operation_counter)


class OperationPriority(IntEnum):
    LOW = 0
    MEDIUM = 1
    HIGH = 2
    CRITICAL = 3


@dataclass(frozen=True)
class OperationFlags:
    preserve_attributes: bool = False
    verify_integrity: bool = False
    atomic_operation: bool = False
    cleanup_source: bool = False

    def pack(self) -> int:
        """Pack the flags into a single byte."""
        flags = 0
        if self.preserve_attributes:
            flags |= 0b0001
        if self.verify_integrity:
            flags |= 0b0010
        if self.atomic_operation:
            flags |= 0b0100
        if self.cleanup_source:
            flags |= 0b1000
        return flags

    @classmethod
    def unpack(cls, flags: int) -> OperationFlags:
        """Rebuild flags from a packed byte."""
        return cls(
            preserve_attributes=bool(flags & 0b0001),
            verify_integrity=bool(flags & 0b0010),
            atomic_operation=bool(flags & 0b0100),
            cleanup_source=bool(flags & 0b1000),
        )


@dataclass(frozen=True)
class FileOperation:
    """A copy or move of one path to another.

    ``preserve_attrs`` and ``verify_integrity`` apply to copies;
    ``atomic_move`` and ``cleanup_source`` apply to moves.
    """

    kind: ClipBoardOperation
    source: str
    dest: str
    preserve_attrs: bool = True
    verify_integrity: bool = True
    atomic_move: bool = True
    cleanup_source: bool = True

    @property
    def is_copy(self) -> bool:
        return self.kind is ClipBoardOperation.COPY

    def source_path(self) -> str:
        return self.source

    def dest_path(self) -> str:
        return self.dest

    def operation_name(self) -> str:
        return "Copy" if self.is_copy else "Move"

    def operation_code(self) -> str:
        return "C" if self.is_copy else "M"

    def preserves_source(self) -> bool:
        return self.is_copy

    def requires_atomic(self) -> bool:
        return False if self.is_copy else self.atomic_move

    def config_flags(self) -> OperationFlags:
        if self.is_copy:
            return OperationFlags(
                preserve_attributes=self.preserve_attrs,
                verify_integrity=self.verify_integrity,
                atomic_operation=False,
                cleanup_source=False,
            )
        return OperationFlags(
            preserve_attributes=True,
            verify_integrity=False,
            atomic_operation=self.atomic_move,
            cleanup_source=self.cleanup_source,
        )

    def complexity_score(self) -> int:
        """Rough cost estimate used for ordering work."""
        score = 100 if self.is_copy else 80
        flags = self.config_flags()
        if flags.preserve_attributes:
            score += 20
        if flags.verify_integrity:
            score += 50
        if flags.atomic_operation:
            score += 30
        return score


def _priority_for(metadata: CompactMetadata) -> OperationPriority:
    if metadata.size < _MIB:
        return OperationPriority.HIGH
    if metadata.size < 100 * _MIB:
        return OperationPriority.MEDIUM
    return OperationPriority.LOW


@dataclass(frozen=True)
class PasteOperation:
    operation_id: int
    item_id: int
    source_path: str
    destination_path: str
    operation_type: ClipBoardOperation
    file_operation: FileOperation
    priority: OperationPriority
    estimated_size: int

    @classmethod
    def from_item(
        cls, item: ClipBoardItem, dest_dir: str | os.PathLike
    ) -> PasteOperation:
        """Plan pasting ``item`` into the directory ``dest_dir``."""
        file_name = cls.extract_filename(item.source_path)
        destination = os.path.join(os.fsdecode(dest_dir), file_name)
        file_operation = FileOperation(
            kind=item.operation, source=item.source_path, dest=destination
        )
        return cls(
            operation_id=_next_operation_id(),
            item_id=item.id,
            source_path=item.source_path,
            destination_path=destination,
            operation_type=item.operation,
            file_operation=file_operation,
            priority=_priority_for(item.metadata),
            estimated_size=item.metadata.size,
        )

    @classmethod
    def create_batch(
        cls, items: Iterable[ClipBoardItem], dest_dir: str | os.PathLike
    ) -> list[PasteOperation | ClipError]:
        """Plan a paste for every item; failures appear as error instances."""
        results: list[PasteOperation | ClipError] = []
        for item in items:
            try:
                results.append(cls.from_item(item, dest_dir))
            except ClipError as exc:
                results.append(exc)
        return results

    @staticmethod
    def extract_filename(path: str) -> str:
        """The text after the last '/' (or, failing that, the last '\\')."""
        sep = path.rfind("/")
        if sep < 0:
            sep = path.rfind("\\")
        name = path[sep + 1 :]
        if not name:
            raise InvalidPath(path)
        return name

    def difficulty_score(self) -> int:
        base = 100 if self.operation_type is ClipBoardOperation.COPY else 150
        return base + min(self.estimated_size // 1024, 1000)

    def can_parallelize_with(self, other: PasteOperation) -> bool:
        """Whether the two operations touch unrelated paths."""
        if (
            self.source_path == other.source_path
            or self.destination_path == other.destination_path
        ):
            return False
        return not (
            self._source_contains(other.source_path)
            or self._source_contains(other.destination_path)
            or other._source_contains(self.source_path)
            or other._source_contains(self.destination_path)
        )

    def estimated_completion_ms(self) -> int:
        base = 100 if self.operation_type is ClipBoardOperation.COPY else 50
        return base + self.estimated_size // _BYTES_PER_MS

    def _source_contains(self, other_path: str) -> bool:
        own = self.source_path
        return (
            len(other_path) > len(own)
            and other_path.startswith(own)
            and other_path[len(own)] in "/\\"
        )


class BatchScheduler:
    """Groups paste operations into batches that can run side by side."""

    def __init__(self, operations: Iterable[PasteOperation]) -> None:
        self.operations = list(operations)
        cpus = os.cpu_count() or 1
        self.max_parallel = max(min(cpus, len(self.operations)), 1)

    def schedule(self) -> list[list[PasteOperation]]:
        """Sort the operations and split them into conflict-free batches."""
        self.operations.sort(key=lambda op: (op.priority, op.difficulty_score()))
        remaining = list(self.operations)
        batches: list[list[PasteOperation]] = []

        while remaining:
            batch: list[PasteOperation] = []
            leftover: list[PasteOperation] = []
            for op in remaining:
                if len(batch) < self.max_parallel and all(
                    op.can_parallelize_with(taken) for taken in batch
                ):
                    batch.append(op)
                else:
                    leftover.append(op)
            if not batch:
                batch.append(leftover.pop(0))
            batches.append(batch)
            remaining = leftover

        return batches

    def total_estimated_time_ms(self) -> int:
        """Worst-case time: every operation run one after another."""
        return sum(op.estimated_completion_ms() for op in self.operations)