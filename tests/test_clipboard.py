import os
from datetime import timedelta

import pytest

from fsmclip.clipboard import ClipBoard
from fsmclip.config import ClipBoardConfig
from fsmclip.errors import (
    DuplicateItem,
    ItemNotFound,
    MemoryMapError,
    MetadataError,
    SerializationError,
)
from fsmclip.item import ClipBoardOperation


def make_files(directory, names, content=b""):
    directory.mkdir(parents=True, exist_ok=True)
    paths = []
    for name in names:
        path = directory / name
        path.write_bytes(content)
        paths.append(path)
    return paths


def test_batch_operations(tmp_path):
    clipboard = ClipBoard()
    paths = make_files(tmp_path, [f"test_{i}" for i in range(100)])

    results = clipboard.add_batch_parallel(paths, ClipBoardOperation.COPY)

    assert len(results) == 100
    assert all(isinstance(r, int) for r in results)
    stats = clipboard.stats()
    assert stats.total_items == 100
    assert stats.copy_items == 100
    assert stats.move_items == 0


def test_batch_reports_missing_path(tmp_path):
    clipboard = ClipBoard()
    (good,) = make_files(tmp_path, ["present"])
    results = clipboard.add_batch_parallel(
        [good, tmp_path / "absent"], ClipBoardOperation.MOVE
    )
    assert isinstance(results[0], int)
    assert isinstance(results[1], MetadataError)
    assert clipboard.stats().move_items == 1


def test_find_by_pattern(tmp_path):
    clipboard = ClipBoard()
    files = make_files(tmp_path / "zqdir", ["example.txt", "sample.doc"])
    files += make_files(tmp_path / "other", ["file.pdf"])
    for path in files:
        clipboard.add_copy(path)

    assert len(clipboard.find_by_pattern("zqdir")) == 2
    assert len(clipboard.find_by_pattern(".txt")) == 1
    assert clipboard.find_by_pattern("nonexistent") == []


def test_memory_mapped_persistence(tmp_path):
    clipboard = ClipBoard(ClipBoardConfig.high_performance())
    paths = make_files(
        tmp_path / "src", [f"large_test_{i}" for i in range(1000)], b"x" * 300
    )
    for path in paths:
        clipboard.add_copy(path)
    assert clipboard.stats().total_size == 300_000

    target = tmp_path / "clip.msgpack"
    clipboard.persist_mmap(target)

    restored = ClipBoard(ClipBoardConfig.high_performance())
    restored.load_mmap(target)
    assert len(restored) == 1000
    assert restored.stats().copy_items == 1000
    assert [i.source_path for i in restored.items()] == [str(p) for p in paths]


def test_standard_persistence_round_trip(tmp_path):
    clipboard = ClipBoard()
    paths = make_files(tmp_path / "src", ["a", "b"], b"12345")
    clipboard.add_copy(paths[0])
    clipboard.add_move(paths[1])
    target = tmp_path / "small.msgpack"
    clipboard.persist_mmap(target)

    restored = ClipBoard()
    restored.load_mmap(target)
    assert restored.items() == clipboard.items()
    assert restored.stats().move_items == 1


def test_load_garbage_raises(tmp_path):
    target = tmp_path / "bad.msgpack"
    target.write_bytes(b"not msgpack")
    with pytest.raises(SerializationError):
        ClipBoard().load_mmap(target)


def test_load_missing_file_raises(tmp_path):
    with pytest.raises(MemoryMapError):
        ClipBoard().load_mmap(tmp_path / "missing")


def test_cache_performance(tmp_path):
    clipboard = ClipBoard(ClipBoardConfig.high_performance())
    first, second = make_files(tmp_path, ["cached.txt", "other.txt"])
    id1 = clipboard.add_copy(first)
    id2 = clipboard.add_copy(second)

    for _ in range(10):
        assert clipboard.get_item(id1).id == id1
        assert clipboard.get_item(id2).id == id2

    assert clipboard.stats().cache_hit_rate == 1.0


def test_duplicate_rejected(tmp_path):
    clipboard = ClipBoard()
    (path,) = make_files(tmp_path, ["dup"])
    clipboard.add_copy(path)
    with pytest.raises(DuplicateItem):
        clipboard.add_move(path)
    assert len(clipboard) == 1


def test_missing_file_raises(tmp_path):
    with pytest.raises(MetadataError):
        ClipBoard().add_copy(tmp_path / "nothing")


def test_remove_item(tmp_path):
    clipboard = ClipBoard()
    (path,) = make_files(tmp_path, ["gone"], b"abc")
    item_id = clipboard.add_copy(path)

    removed = clipboard.remove_item(item_id)
    assert removed.id == item_id
    assert clipboard.is_empty()
    assert clipboard.stats().total_size == 0
    with pytest.raises(ItemNotFound):
        clipboard.get_item(item_id)
    with pytest.raises(ItemNotFound):
        clipboard.remove_item(item_id)
    clipboard.add_copy(path)
    assert len(clipboard) == 1


def test_oldest_evicted_at_limit(tmp_path):
    clipboard = ClipBoard(ClipBoardConfig(max_items=2))
    paths = make_files(tmp_path, ["one", "two", "three"])
    for path in paths:
        clipboard.add_copy(path)
    assert [i.source_path for i in clipboard.items()] == [str(p) for p in paths[1:]]


def test_clear(tmp_path):
    clipboard = ClipBoard()
    for path in make_files(tmp_path, ["a", "b"], b"zz"):
        clipboard.add_copy(path)
    clipboard.clear()
    stats = clipboard.stats()
    assert clipboard.is_empty()
    assert (stats.total_items, stats.copy_items, stats.total_size) == (0, 0, 0)
    assert clipboard.items() == []


def test_paste_operation(tmp_path):
    clipboard = ClipBoard()
    (path,) = make_files(tmp_path, ["source.txt"])
    item_id = clipboard.add_copy(path)
    op = clipboard.get_paste_operation(item_id, "/dest")
    assert op.item_id == item_id
    assert op.destination_path == os.path.join("/dest", "source.txt")
    assert op.operation_type is ClipBoardOperation.COPY


def test_stats_summary(tmp_path):
    clipboard = ClipBoard()
    (small,) = make_files(tmp_path, ["small"], b"0123456789")
    clipboard.add_copy(small)
    stats = clipboard.stats()
    assert stats.total_size_human() == "10 B"
    assert stats.performance_summary().startswith(
        "Items: 1, Size: 10 B, Cache Hit Rate: 0.0%, Age: "
    )
    assert stats.age() >= timedelta(0)


def test_human_size_kib(tmp_path):
    clipboard = ClipBoard()
    (big,) = make_files(tmp_path, ["big"], b"x" * 2048)
    clipboard.add_copy(big)
    assert clipboard.stats().total_size_human() == "2.0 KiB"


def test_copy_is_empty_with_same_config(tmp_path):
    clipboard = ClipBoard(ClipBoardConfig(max_items=7))
    (path,) = make_files(tmp_path, ["x"])
    clipboard.add_copy(path)
    twin = clipboard.copy()
    assert twin.is_empty()
    assert twin.config.max_items == 7
    assert len(clipboard) == 1