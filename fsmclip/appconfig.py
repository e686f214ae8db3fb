"""Application configuration stored as TOML in the user's config directory."""

from __future__ import annotations

import logging
import re
import sys
import tomllib
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any, ClassVar

import tomli_w
from platformdirs import user_config_dir

log = logging.getLogger(__name__)

_NS = 1
_US = 1_000
_MS = 1_000_000
_SEC = 1_000_000_000

_PARSE_UNITS: dict[str, int] = {
    "nsec": _NS, "ns": _NS,
    "usec": _US, "us": _US,
    "msec": _MS, "ms": _MS,
    "seconds": _SEC, "second": _SEC, "sec": _SEC, "s": _SEC,
    "minutes": 60 * _SEC, "minute": 60 * _SEC, "min": 60 * _SEC, "m": 60 * _SEC,
    "hours": 3600 * _SEC, "hour": 3600 * _SEC, "hr": 3600 * _SEC, "h": 3600 * _SEC,
    "days": 86400 * _SEC, "day": 86400 * _SEC, "d": 86400 * _SEC,
    "weeks": 604800 * _SEC, "week": 604800 * _SEC, "w": 604800 * _SEC,
    "months": 2_630_016 * _SEC, "month": 2_630_016 * _SEC, "M": 2_630_016 * _SEC,
    "years": 31_557_600 * _SEC, "year": 31_557_600 * _SEC, "y": 31_557_600 * _SEC,
}

_FORMAT_UNITS: tuple[tuple[str, int, bool], ...] = (
    ("year", 31_557_600, True),
    ("month", 2_630_016, True),
    ("day", 86400, True),
    ("h", 3600, False),
    ("m", 60, False),
    ("s", 1, False),
)

_DURATION_SHAPE = re.compile(r"\s*(?:\d+\s*[A-Za-z]+\s*)+")
_DURATION_PART = re.compile(r"(\d+)\s*([A-Za-z]+)")


def _format_duration(value: timedelta) -> str:
    total_us = (value.days * 86400 + value.seconds) * 1_000_000 + value.microseconds
    if total_us < 0:
        raise ValueError("negative durations cannot be written")
    if total_us == 0:
        return "0s"
    seconds, micros = divmod(total_us, 1_000_000)
    parts = []
    for name, size, spelled in _FORMAT_UNITS:
        count, seconds = divmod(seconds, size)
        if count:
            suffix = "s" if spelled and count > 1 else ""
            parts.append(f"{count}{name}{suffix}")
    millis, micros = divmod(micros, 1000)
    if millis:
        parts.append(f"{millis}ms")
    if micros:
        parts.append(f"{micros}us")
    return " ".join(parts)


def _parse_duration(text: Any) -> timedelta:
    if not isinstance(text, str) or not _DURATION_SHAPE.fullmatch(text):
        raise ValueError(f"invalid duration: {text!r}")
    total_ns = 0
    for number, unit in _DURATION_PART.findall(text):
        try:
            total_ns += int(number) * _PARSE_UNITS[unit]
        except KeyError:
            raise ValueError(f"unknown time unit {unit!r} in {text!r}") from None
    return timedelta(microseconds=total_ns // 1000)


def _require(data: dict[str, Any], key: str) -> Any:
    try:
        return data[key]
    except KeyError:
        raise ValueError(f"missing field `{key}`") from None


@dataclass(frozen=True)
class _Variant:
    PRESETS: ClassVar[tuple[str, ...]] = ()

    name: str
    custom: bool = False

    def __post_init__(self) -> None:
        if not self.custom and self.name not in self.PRESETS:
            raise ValueError(
                f"unknown variant `{self.name}`, expected one of {', '.join(self.PRESETS)}"
            )

    def _to_value(self) -> str | dict[str, str]:
        return {"custom": self.name} if self.custom else self.name

    @classmethod
    def _from_value(cls, value: Any):
        if isinstance(value, str):
            return cls(value)
        if isinstance(value, dict) and set(value) == {"custom"} and isinstance(value["custom"], str):
            return cls(value["custom"], custom=True)
        raise ValueError(f"invalid {cls.__name__.lower()}: {value!r}")


@dataclass(frozen=True)
class Theme(_Variant):
    """Colour scheme: a preset name, or a custom one."""

    PRESETS = ("default", "light", "dark", "solarized")
    name: str = "default"


@dataclass(frozen=True)
class Keymap(_Variant):
    """Keyboard shortcut preset, or a custom one."""

    PRESETS = ("vim", "emacs", "standard")
    name: str = "standard"


@dataclass
class CacheConfig:
    max_capacity: int = 32_768
    ttl: timedelta = timedelta(seconds=1800)
    tti: timedelta = timedelta(seconds=600)
    max_memory_mb: int = 256
    enable_stats: bool = True
    num_shards: int = 64


def _cache_to_dict(cache: CacheConfig) -> dict[str, Any]:
    return {
        "max_capacity": cache.max_capacity,
        "ttl": _format_duration(cache.ttl),
        "tti": _format_duration(cache.tti),
        "max_memory_mb": cache.max_memory_mb,
        "enable_stats": cache.enable_stats,
        "num_shards": cache.num_shards,
    }


def _cache_from_dict(data: Any) -> CacheConfig:
    if not isinstance(data, dict):
        raise ValueError("`cache` must be a table")
    return CacheConfig(
        max_capacity=int(_require(data, "max_capacity")),
        ttl=_parse_duration(_require(data, "ttl")),
        tti=_parse_duration(_require(data, "tti")),
        max_memory_mb=int(_require(data, "max_memory_mb")),
        enable_stats=bool(_require(data, "enable_stats")),
        num_shards=int(_require(data, "num_shards")),
    )


@dataclass
class Config:
    theme: Theme = field(default_factory=Theme)
    keymap: Keymap = field(default_factory=Keymap)
    cache: CacheConfig = field(default_factory=CacheConfig)
    show_hidden: bool = False
    editor_cmd: str = "nvim"

    @classmethod
    def load(cls) -> Config:
        """Read the config file, creating it with defaults when missing."""
        path = cls.config_path()
        if path.exists():
            log.info("Loading config from %s", path)
            return cls.from_dict(tomllib.loads(path.read_text(encoding="utf-8")))
        log.info(
            "No config file found at %s, using default configuration. Creating it now.", path
        )
        config = cls()
        config.save()
        return config

    def save(self) -> None:
        """Write the config file, creating its directory if needed."""
        path = self.config_path()
        log.info("Saving config to %s", path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(tomli_w.dumps(self.to_dict()), encoding="utf-8")

    @staticmethod
    def config_dir() -> Path:
        if sys.platform == "darwin":
            return Path(user_config_dir("org.example.FileManager"))
        if sys.platform == "win32":
            return Path(user_config_dir("FileManager", "example", roaming=True)) / "config"
        return Path(user_config_dir("filemanager"))

    @staticmethod
    def config_path() -> Path:
        return Config.config_dir() / "config.toml"

    def to_dict(self) -> dict[str, Any]:
        return {
            "theme": self.theme._to_value(),
            "keymap": self.keymap._to_value(),
            "cache": _cache_to_dict(self.cache),
            "show_hidden": self.show_hidden,
            "editor_cmd": self.editor_cmd,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        editor_cmd = _require(data, "editor_cmd")
        if not isinstance(editor_cmd, str):
            raise ValueError("`editor_cmd` must be a string")
        show_hidden = _require(data, "show_hidden")
        if not isinstance(show_hidden, bool):
            raise ValueError("`show_hidden` must be a boolean")
        return cls(
            theme=Theme._from_value(_require(data, "theme")),
            keymap=Keymap._from_value(_require(data, "keymap")),
            cache=_cache_from_dict(_require(data, "cache")),
            show_hidden=show_hidden,
            editor_cmd=editor_cmd,
        )