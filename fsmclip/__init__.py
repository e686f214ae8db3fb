"""Clipboard for file managers: copy/move lists, paste planning, scheduling and persistence."""

__version__ = "0.1.0"

__all__ = ["appconfig", "clipboard", "config", "errors", "item", "operations"]