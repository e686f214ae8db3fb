# fsmclip

A clipboard library for file managers. It keeps an ordered list of files and
directories that are marked for copy or move. It can turn those entries into
paste plans and group the plans into batches that do not touch overlapping
paths. It can save the clipboard as MessagePack and load it back. It also holds
the file-manager settings, which are stored as TOML.

## Installation

```
pip install fsmclip
```

To run the tests:

```
pip install "fsmclip[test]"
pytest
```

## Clipboard

```python
from fsmclip.clipboard import ClipBoard
from fsmclip.item import ClipBoardOperation

board = ClipBoard()                          # default ClipBoardConfig
item_id = board.add_copy("/home/me/report.txt")
board.add_move("/home/me/photos")
results = board.add_batch_parallel(["/tmp/a", "/tmp/b"], ClipBoardOperation.COPY)
# each entry in results is either the new item id or the ClipError for that path

for item in board.items():                   # insertion order
    print(item.operation_tag(), item.display_name(), item.age_string())

matches = board.find_by_pattern(".txt")      # substring match on the source path
paste = board.get_paste_operation(item_id, "/home/me/backup")
print(paste.destination_path, paste.priority)

print(len(board), board.stats().performance_summary())

board.persist_mmap("clipboard.msgpack")
restored = ClipBoard()
restored.load_mmap("clipboard.msgpack")
```

Notes on behaviour:

- Every path you add must exist. Its size, modification time, permissions,
  type and flags (directory, symlink, hidden) are read when it is added. The
  clipboard keeps them as a `CompactMetadata`. A path that cannot be read
  raises `MetadataError`.
- A path that is already on the clipboard is refused with `DuplicateItem`.
- When the clipboard holds `max_items` entries, adding another one first drops
  the oldest entry.
- `get_item`, `remove_item` and `get_paste_operation` raise `ItemNotFound` for
  an unknown id.
- `add_batch_parallel` reads the metadata of the paths on a thread pool when
  `enable_parallel` is set. The items are then inserted in the order given.
- `persist_mmap` writes the items as a MessagePack list. It writes through a
  memory map when `enable_mmap` is set and the total size of the items reaches
  `mmap_threshold_bytes`; otherwise it writes the file directly. `load_mmap`
  adds the saved items to the clipboard.
- `stats()` returns a `ClipBoardStats`. It reports item counts, the total size
  (`total_size_human()` gives e.g. `2.0 KiB`), the cache hit rate and the age.
- `copy()` returns a new, empty clipboard with the same configuration.

## Items

`fsmclip.item.ClipBoardItem` carries an id, the source path, the operation
(`ClipBoardOperation.COPY` or `MOVE`), its metadata, the time it was added in
nanoseconds and an `ItemStatus`. It has these helpers:

- `display_name()`: the last path component.
- `operation_tag()`: `"C"` or `"M"`.
- `is_expired(max_age_ns)` and `age_string()`: age checks; `age_string()`
  returns values such as `42s`, `5m`, `3h` or `2d`.
- `matches_pattern(pattern)`: a substring test on the source path.
- `to_dict()` / `from_dict()`: the form used for persistence.

`FilePermissions.from_mode(mode)` reads the owner bits of a Unix mode.
`FileType` gives names to the numeric file types.

## Paste plans and scheduling

```python
from fsmclip.operations import BatchScheduler, PasteOperation

ops = [PasteOperation.from_item(item, "/dest") for item in board.items()]
scheduler = BatchScheduler(ops)
for batch in scheduler.schedule():
    ...  # operations within a batch have no shared or nested paths
print(scheduler.total_estimated_time_ms())
```

A `PasteOperation` places the item's file name inside the destination
directory. Its priority depends on the file size: `HIGH` below 1 MiB, `MEDIUM`
below 100 MiB, and `LOW` otherwise. It also provides `difficulty_score()`,
`estimated_completion_ms()` and `can_parallelize_with(other)`.
`PasteOperation.create_batch(items, dest_dir)` returns one plan per item. An
item that fails appears in the list as its error instead of a plan.

The `file_operation` of a plan is a `FileOperation`. Its flags can be read
with `config_flags()`, which returns an `OperationFlags` that packs into a
single byte with `pack()` and unpacks with `OperationFlags.unpack()`.
`schedule()` sorts the operations by priority and then by difficulty. It fills
each batch with operations that do not conflict, up to one per CPU.

## Clipboard configuration

`fsmclip.config.ClipBoardConfig` is a dataclass with three presets: the
default, `high_performance()` and `conservative()`. It covers capacity
(`max_items`), cache size, item expiry, memory-map use and threshold, and
parallelism. Its other methods:

- `auto_tune()` sets the thread count, cache size and memory-map threshold
  for the current machine's CPUs and available memory.
- `parallel_threads()` returns the thread count to use. A setting of 0 means
  one thread per CPU.
- `simd_enabled()` is true only when `enable_simd` is set and the CPU reports
  suitable vector support.
- `save_to_file(path)` / `load_from_file(path)` store the configuration as
  MessagePack. Failures raise `ConfigError`.
- `default_clipboard_file()` returns the suggested location of the saved
  clipboard in the user's data directory.

## File-manager settings

`fsmclip.appconfig.Config` holds these settings:

- `theme`: a `Theme`, either a preset (`default`, `light`, `dark`,
  `solarized`) or `Theme(name, custom=True)`.
- `keymap`: a `Keymap`, either `vim`, `emacs`, `standard` or a custom one.
- `cache`: a `CacheConfig` with capacity, TTL/TTI durations, memory limit,
  statistics switch and shard count.
- `show_hidden` and `editor_cmd`.

`Config.load()` reads `config.toml` from `Config.config_dir()`. If the file
does not exist yet, it writes one with defaults. `save()` writes the file.
Durations are stored as text such as `"30m"`.

## Errors

All clipboard errors derive from `fsmclip.errors.ClipError`.
`is_recoverable()` is true for `ItemNotFound`, `DuplicateItem`,
`ClipBoardFull` and `LockFreeRetry`. `should_retry()` is true only for
`LockFreeRetry`. File errors (`MetadataError`, `FileSystemError`,
`MemoryMapError`) record a short `kind` such as `NotFound` or
`PermissionDenied`.

## What this package does not do

- It does not copy or move any files. A `PasteOperation` and the batches from
  `BatchScheduler` are plans only; running them is up to the caller.
- The clipboard does not drop expired items by itself. `item_expiry_ns` is a
  setting the caller can check with `ClipBoardItem.is_expired`. In the same
  way, `persist_clipboard` and `clipboard_file` do not cause saving or loading
  on their own.
- There is no command-line program or user interface.