"""Centralized logging helpers.

Provides one place to configure the root logger and a few helpers used for
structured DEBUG traces (``extra=extra_context(...)``) across the index
modules.
"""
from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, Optional

from constants import Constants

_CONTEXT_KEYS = ("event", "component", "action", "outcome")


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """Configure the root logger once.

    The level comes from ``level``, then ``HACKINDEX_LOG_LEVEL``, then INFO.
    When ``log_file`` is given, records are also written there.
    """
    level_name = (level or os.environ.get(Constants.LOG_LEVEL_ENV_VAR) or "INFO").upper()
    level_value = getattr(logging, level_name, logging.INFO)
    if not isinstance(level_value, int):
        level_value = logging.INFO

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
        root.addHandler(handler)
    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
        root.addHandler(file_handler)
    root.setLevel(level_value)


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records from ``logger`` would be emitted."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an ``extra=`` payload for structured log records.

    Known keys (event, component, action, outcome) become record attributes;
    everything else lands under ``record.context``. None values are dropped.
    """
    payload: Dict[str, Any] = {}
    context: Dict[str, Any] = {}
    for key, value in fields.items():
        if value is None:
            continue
        if key in _CONTEXT_KEYS:
            payload[key] = value
        else:
            context[key] = value
    payload["context"] = context
    return payload


class Timer:
    """Context manager measuring elapsed wall time."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        self._end = None
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        """Elapsed milliseconds so far, or total once the block has exited."""
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
