"""
Session Log
Level-tagged log/progress callbacks used by the pipelines
"""

from __future__ import annotations

from typing import Callable, Optional

LogCallback = Optional[Callable[[str, str], None]]
ProgressCallback = Optional[Callable[[int], None]]
CompleteCallback = Optional[Callable[[bool, Optional[str]], None]]


def _default_logger(message: str, level: str = "INFO") -> None:
    print(f"[{level}] {message}")


class SessionLog:
    """Forwards human-readable lines to a ``log_fn(message, level)`` callback."""

    def __init__(self, log_fn: LogCallback = None):
        self.log_fn = log_fn or _default_logger

    def __call__(self, message: str, level: str = "INFO") -> None:
        self.log_fn(message, level)

    def info(self, message: str) -> None:
        self.log_fn(message, "INFO")

    def success(self, message: str) -> None:
        self.log_fn(message, "SUCCESS")

    def warning(self, message: str) -> None:
        self.log_fn(message, "WARNING")

    def error(self, message: str) -> None:
        self.log_fn(message, "ERROR")


def emit_progress(callback: ProgressCallback, increment: int = 1) -> None:
    if callback:
        callback(increment)
