"""Clipboard configuration with presets, tuning and MessagePack persistence."""

from __future__ import annotations

import os
import platform
import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import msgpack
from platformdirs import user_data_dir

from .errors import ConfigError

_GIB = 1024 * 1024 * 1024
_U64_MAX = 2**64 - 1

_INT_FIELDS = (
    "max_items",
    "mmap_threshold_bytes",
    "max_parallel_threads",
    "cache_size",
)
_BOOL_FIELDS = (
    "persist_clipboard",
    "show_clipboard_indicators",
    "confirm_destructive_ops",
    "enable_simd",
    "enable_mmap",
    "enable_parallel",
    "enable_lockfree",
    "enable_performance_monitoring",
)


def _cpu_count() -> int:
    return os.cpu_count() or 1


def _read_cpu_flags() -> set[str] | None:
    try:
        text = Path("/proc/cpuinfo").read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None
    found: set[str] = set()
    for line in text.splitlines():
        key, sep, value = line.partition(":")
        if sep and key.strip() in ("flags", "Features"):
            found.update(value.split())
    return found


def _check_int(data: dict[str, Any], key: str, optional: bool = False) -> int | None:
    if key not in data:
        raise ValueError(f"missing field `{key}`")
    value = data[key]
    if value is None and optional:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= _U64_MAX:
        raise ValueError(f"`{key}` must be an unsigned integer")
    return value


def _check_bool(data: dict[str, Any], key: str) -> bool:
    if key not in data:
        raise ValueError(f"missing field `{key}`")
    value = data[key]
    if not isinstance(value, bool):
        raise ValueError(f"`{key}` must be a boolean")
    return value


@dataclass
class ClipBoardConfig:
    """Settings that govern clipboard capacity, caching and persistence."""

    max_items: int = 1000
    item_expiry_ns: int | None = 3_600_000_000_000
    persist_clipboard: bool = True
    clipboard_file: str | None = None
    show_clipboard_indicators: bool = True
    confirm_destructive_ops: bool = True
    enable_simd: bool = True
    enable_mmap: bool = True
    mmap_threshold_bytes: int = 1_048_576
    enable_parallel: bool = True
    max_parallel_threads: int = 0
    enable_lockfree: bool = True
    cache_size: int = 256
    enable_performance_monitoring: bool = False

    @classmethod
    def high_performance(cls) -> ClipBoardConfig:
        """Large capacity, no expiry, aggressive memory mapping."""
        return cls(
            max_items=10_000,
            item_expiry_ns=None,
            persist_clipboard=True,
            clipboard_file=None,
            show_clipboard_indicators=True,
            confirm_destructive_ops=False,
            enable_simd=True,
            enable_mmap=True,
            mmap_threshold_bytes=262_144,
            enable_parallel=True,
            max_parallel_threads=0,
            enable_lockfree=True,
            cache_size=1024,
            enable_performance_monitoring=True,
        )

    @classmethod
    def conservative(cls) -> ClipBoardConfig:
        """Small capacity, single thread, no persistence or memory mapping."""
        return cls(
            max_items=100,
            item_expiry_ns=1_800_000_000_000,
            persist_clipboard=False,
            clipboard_file=None,
            show_clipboard_indicators=True,
            confirm_destructive_ops=True,
            enable_simd=False,
            enable_mmap=False,
            mmap_threshold_bytes=_U64_MAX,
            enable_parallel=False,
            max_parallel_threads=1,
            enable_lockfree=False,
            cache_size=32,
            enable_performance_monitoring=False,
        )

    @classmethod
    def load_from_file(cls, path: str | os.PathLike) -> ClipBoardConfig:
        """Read a configuration saved with :meth:`save_to_file`."""
        try:
            content = Path(path).read_bytes()
        except OSError as exc:
            raise ConfigError(f"Failed to read config file: {exc}") from exc
        try:
            data = msgpack.unpackb(content, raw=False)
            return cls.from_dict(data)
        except (ValueError, TypeError, msgpack.exceptions.UnpackException) as exc:
            raise ConfigError(f"Failed to parse config: {exc}") from exc

    def save_to_file(self, path: str | os.PathLike) -> None:
        """Write this configuration as MessagePack."""
        try:
            content = msgpack.packb(self.to_dict(), use_bin_type=True)
        except (ValueError, TypeError, OverflowError) as exc:
            raise ConfigError(f"Failed to serialize config: {exc}") from exc
        try:
            Path(path).write_bytes(content)
        except OSError as exc:
            raise ConfigError(f"Failed to write config file: {exc}") from exc

    def simd_enabled(self) -> bool:
        """SIMD is used only when enabled and the CPU supports it."""
        return self.enable_simd and self.cpu_supports_simd()

    def parallel_threads(self) -> int:
        """Thread count to use; 0 in the setting means one per CPU."""
        return self.max_parallel_threads or _cpu_count()

    def set_item_expiry_ns(self, value: int | None) -> None:
        """Change the expiry; has no effect when expiry is disabled or value is None."""
        if self.item_expiry_ns is not None and value is not None:
            self.item_expiry_ns = value

    def cpu_supports_simd(self) -> bool:
        machine = platform.machine().lower()
        if machine in ("aarch64", "arm64"):
            return True
        if machine in ("x86_64", "amd64"):
            cpu_flags = _read_cpu_flags()
            if cpu_flags is None:
                return True
            return "avx2" in cpu_flags or "sse4_2" in cpu_flags
        return False

    @staticmethod
    def default_clipboard_file() -> str:
        """Default location of the persisted clipboard."""
        try:
            if sys.platform == "darwin":
                base = Path(user_data_dir("com.fsm.clipr"))
            elif sys.platform == "win32":
                base = Path(user_data_dir("clipr", "fsm", roaming=True)) / "data"
            else:
                base = Path(user_data_dir("clipr"))
        except (OSError, KeyError, RuntimeError) as exc:
            raise ConfigError("Cannot determine config directory") from exc
        return str(base / "clipboard.msgpack")

    def auto_tune(self) -> None:
        """Adjust threads, cache size and mmap threshold to this machine."""
        available = self.available_memory()

        self.max_parallel_threads = max(_cpu_count() * 3 // 4, 1)

        if available > 8 * _GIB:
            self.cache_size = 2048
        elif available > 4 * _GIB:
            self.cache_size = 1024
        else:
            self.cache_size = 512

        if available > 16 * _GIB:
            self.mmap_threshold_bytes = 128 * 1024
        elif available > 8 * _GIB:
            self.mmap_threshold_bytes = 512 * 1024
        else:
            self.mmap_threshold_bytes = 2 * 1024 * 1024

    @staticmethod
    def available_memory() -> int:
        """Available system memory in bytes, with a fixed fallback."""
        if not sys.platform.startswith("linux"):
            return 8 * _GIB
        try:
            with open("/proc/meminfo", encoding="utf-8") as meminfo:
                for line in meminfo:
                    key, _, value = line.partition(":")
                    if key == "MemAvailable":
                        return int(value.split()[0]) * 1024
        except (OSError, ValueError, IndexError):
            pass
        return 4 * _GIB

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ClipBoardConfig:
        if not isinstance(data, dict):
            raise ValueError("configuration must be a map")
        values: dict[str, Any] = {key: _check_int(data, key) for key in _INT_FIELDS}
        values.update({key: _check_bool(data, key) for key in _BOOL_FIELDS})
        values["item_expiry_ns"] = _check_int(data, "item_expiry_ns", optional=True)
        if "clipboard_file" not in data:
            raise ValueError("missing field `clipboard_file`")
        clipboard_file = data["clipboard_file"]
        if clipboard_file is not None and not isinstance(clipboard_file, str):
            raise ValueError("`clipboard_file` must be a string")
        values["clipboard_file"] = clipboard_file
        return cls(**values)