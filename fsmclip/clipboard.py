"""The clipboard: ordered items with a path index, a small cache and statistics."""

from __future__ import annotations

import math
import mmap
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from datetime import timedelta
from pathlib import Path
from typing import Iterable

import msgpack

from .config import ClipBoardConfig
from .errors import (
    ClipError,
    DuplicateItem,
    FileSystemError,
    ItemNotFound,
    MemoryMapError,
    SerializationError,
)
from .item import ClipBoardItem, ClipBoardOperation
from .operations import PasteOperation

_IEC_PREFIXES = "KMGTPE"


def _human_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    exponent = min(int(math.log(size, 1024)), len(_IEC_PREFIXES))
    while exponent > 1 and size < 1024**exponent:
        exponent -= 1
    value = size / 1024**exponent
    return f"{value:.1f} {_IEC_PREFIXES[exponent - 1]}iB"


@dataclass(frozen=True)
class ClipBoardStats:
    """A snapshot of clipboard counters."""

    total_items: int
    copy_items: int
    move_items: int
    total_size: int
    cache_hit_rate: float
    created_at: float

    def total_size_human(self) -> str:
        """Total size in binary units, e.g. ``2.0 KiB``."""
        return _human_size(self.total_size)

    def age(self) -> timedelta:
        """Time since the clipboard was created."""
        return timedelta(seconds=time.monotonic() - self.created_at)

    def performance_summary(self) -> str:
        return (
            f"Items: {self.total_items}, Size: {self.total_size_human()}, "
            f"Cache Hit Rate: {self.cache_hit_rate * 100:.1f}%, "
            f"Age: {self.age().total_seconds():.1f}s"
        )


class ClipBoard:
    """Copy and move items kept in insertion order, with duplicate detection."""

    def __init__(self, config: ClipBoardConfig | None = None) -> None:
        self._config = replace(config) if config is not None else ClipBoardConfig()
        self._lock = threading.RLock()
        self._items: dict[int, ClipBoardItem] = {}
        self._path_index: set[str] = set()
        self._order: list[int] = []
        self._cache: dict[int, ClipBoardItem] = {}
        self._created_at = time.monotonic()
        self._total_size = 0
        self._copy_items = 0
        self._move_items = 0
        self._cache_hits = 0
        self._cache_misses = 0

    @property
    def config(self) -> ClipBoardConfig:
        return self._config

    def add_copy(self, path: str | os.PathLike) -> int:
        """Add ``path`` as a copy item and return its id."""
        item = ClipBoardItem.new_copy(path)
        self._insert(item)
        return item.id

    def add_move(self, path: str | os.PathLike) -> int:
        """Add ``path`` as a move item and return its id."""
        item = ClipBoardItem.new_move(path)
        self._insert(item)
        return item.id

    def add_batch_parallel(
        self, paths: Iterable[str | os.PathLike], operation: ClipBoardOperation
    ) -> list[int | ClipError]:
        """Add many paths; each result is the new id or the error for that path."""
        paths = list(paths)
        create = (
            ClipBoardItem.new_copy
            if operation is ClipBoardOperation.COPY
            else ClipBoardItem.new_move
        )

        def build(path: str | os.PathLike) -> ClipBoardItem | ClipError:
            try:
                return create(path)
            except ClipError as exc:
                return exc

        if self._config.enable_parallel and len(paths) > 1:
            workers = min(self._config.parallel_threads(), len(paths))
            with ThreadPoolExecutor(max_workers=workers) as pool:
                built = list(pool.map(build, paths))
        else:
            built = [build(path) for path in paths]

        results: list[int | ClipError] = []
        for entry in built:
            if isinstance(entry, ClipError):
                results.append(entry)
                continue
            try:
                self._insert(entry)
            except ClipError as exc:
                results.append(exc)
            else:
                results.append(entry.id)
        return results

    def remove_item(self, item_id: int) -> ClipBoardItem:
        """Remove an item and return it."""
        with self._lock:
            cached = self._cache.pop(item_id, None)
            item = self._items.pop(item_id, None)
            if item is None and cached is None:
                raise ItemNotFound(item_id)
            item = item or cached
            if cached is not None:
                self._cache_hits += 1
            else:
                self._cache_misses += 1
            self._path_index.discard(item.source_path)
            self._order = [i for i in self._order if i != item_id]
            self._total_size = max(self._total_size - item.metadata.size, 0)
            if item.operation is ClipBoardOperation.COPY:
                self._copy_items = max(self._copy_items - 1, 0)
            else:
                self._move_items = max(self._move_items - 1, 0)
            return item

    def get_item(self, item_id: int) -> ClipBoardItem:
        """Look an item up, preferring the cache."""
        with self._lock:
            cached = self._cache.get(item_id)
            if cached is not None:
                self._cache_hits += 1
                return cached
            item = self._items.get(item_id)
            if item is None:
                raise ItemNotFound(item_id)
            if len(self._cache) < self._config.cache_size:
                self._cache[item_id] = item
            self._cache_misses += 1
            return item

    def get_paste_operation(
        self, item_id: int, dest: str | os.PathLike
    ) -> PasteOperation:
        """Plan pasting an item into the directory ``dest``."""
        return PasteOperation.from_item(self.get_item(item_id), dest)

    def find_by_pattern(self, pattern: str | bytes) -> list[ClipBoardItem]:
        """Items whose source path contains ``pattern``, in insertion order."""
        with self._lock:
            candidates = [self._items[i] for i in self._order if i in self._items]
        return [item for item in candidates if item.matches_pattern(pattern)]

    def items(self) -> list[ClipBoardItem]:
        """All items in insertion order."""
        with self._lock:
            result = []
            for item_id in self._order:
                cached = self._cache.get(item_id)
                if cached is not None:
                    result.append(cached)
                    self._cache_hits += 1
                elif item_id in self._items:
                    result.append(self._items[item_id])
                    self._cache_misses += 1
            return result

    def is_empty(self) -> bool:
        return len(self) == 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def clear(self) -> None:
        """Drop every item and reset the item counters."""
        with self._lock:
            self._items.clear()
            self._path_index.clear()
            self._cache.clear()
            self._order.clear()
            self._total_size = 0
            self._copy_items = 0
            self._move_items = 0

    def stats(self) -> ClipBoardStats:
        with self._lock:
            lookups = self._cache_hits + self._cache_misses
            return ClipBoardStats(
                total_items=len(self._items),
                copy_items=self._copy_items,
                move_items=self._move_items,
                total_size=self._total_size,
                cache_hit_rate=self._cache_hits / lookups if lookups else 0.0,
                created_at=self._created_at,
            )

    def persist_mmap(self, path: str | os.PathLike) -> None:
        """Save the items as MessagePack, through a memory map when large."""
        data = self._serialize()
        if (
            not self._config.enable_mmap
            or self._total_size < self._config.mmap_threshold_bytes
        ):
            try:
                Path(path).write_bytes(data)
            except OSError as exc:
                raise FileSystemError(exc) from exc
            return
        try:
            with open(path, "w+b") as handle:
                handle.truncate(len(data))
                with mmap.mmap(handle.fileno(), len(data)) as mapped:
                    mapped[:] = data
                    mapped.flush()
        except OSError as exc:
            raise MemoryMapError(exc) from exc

    def load_mmap(self, path: str | os.PathLike) -> None:
        """Add the items saved in ``path`` by :meth:`persist_mmap`."""
        try:
            with open(path, "rb") as handle:
                with mmap.mmap(handle.fileno(), 0, access=mmap.ACCESS_READ) as mapped:
                    data = bytes(mapped)
        except OSError as exc:
            raise MemoryMapError(exc) from exc
        except ValueError as exc:
            raise MemoryMapError("InvalidInput") from exc
        try:
            records = msgpack.unpackb(data, raw=False)
        except (ValueError, msgpack.exceptions.UnpackException) as exc:
            raise SerializationError(str(exc)) from exc
        if not isinstance(records, list):
            raise SerializationError("expected a list of clipboard items")
        for record in records:
            if not isinstance(record, dict):
                raise SerializationError("expected a clipboard item map")
            self._insert(ClipBoardItem.from_dict(record))

    def copy(self) -> ClipBoard:
        """A new, empty clipboard with the same configuration."""
        return ClipBoard(self._config)

    def _serialize(self) -> bytes:
        try:
            return msgpack.packb(
                [item.to_dict() for item in self.items()], use_bin_type=True
            )
        except (TypeError, ValueError, OverflowError) as exc:
            raise SerializationError(str(exc)) from exc

    def _insert(self, item: ClipBoardItem) -> None:
        with self._lock:
            if item.source_path in self._path_index:
                raise DuplicateItem(item.source_path)
            while self._order and len(self._items) >= self._config.max_items:
                self.remove_item(self._order[0])
            self._items[item.id] = item
            self._path_index.add(item.source_path)
            if len(self._cache) < self._config.cache_size:
                self._cache[item.id] = item
            self._order.append(item.id)
            self._total_size += item.metadata.size
            if item.operation is ClipBoardOperation.COPY:
                self._copy_items += 1
            else:
                self._move_items += 1