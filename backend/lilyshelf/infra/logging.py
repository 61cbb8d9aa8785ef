"""Structured logging helpers shared across the service."""

from __future__ import annotations

import logging
from typing import Any

__all__ = ["configure_logging", "get_logger", "KeyValueFormatter"]

ROOT_LOGGER_NAME = "lilyshelf"
DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# Attributes present on every LogRecord; anything else came in via ``extra``.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None)).keys()
) | {"message", "asctime"}


class KeyValueFormatter(logging.Formatter):
    """Appends ``extra`` fields as ``key=value`` pairs after the event name."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        fields = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        }
        if not fields:
            return base
        rendered = " ".join(f"{key}={_render(value)}" for key, value in sorted(fields.items()))
        return f"{base} {rendered}"


def _render(value: Any) -> str:
    text = str(value)
    if " " in text or not text:
        return repr(text)
    return text


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    """Attach a key=value stream handler to the package root logger once."""

    root = logging.getLogger(ROOT_LOGGER_NAME)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    root.setLevel(level)
    if not any(getattr(handler, "_lilyshelf", False) for handler in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(KeyValueFormatter(DEFAULT_FORMAT))
        handler._lilyshelf = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    return root


def get_logger(name: str) -> logging.Logger:
    """Return a logger namespaced under the package root."""

    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    short = name.rsplit(".lilyshelf.", 1)[-1]
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{short}")
