"""Elapsed-time measurement for log lines."""

from __future__ import annotations

import time

__all__ = ["Timer", "format_duration"]


def format_duration(ms: float) -> str:
    """Human-readable duration: ``850ms``, ``1.3s``, ``2m 5s``, ``1h 2m 5s``."""
    if ms < 1000:
        return f"{ms:.0f}ms"
    if ms < 60_000:
        return f"{ms / 1000:.1f}s"
    total = int(ms // 1000)
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    if hours:
        return f"{hours}h {minutes}m {seconds}s"
    return f"{minutes}m {seconds}s"


class Timer:
    def __init__(self) -> None:
        self._start = time.perf_counter()

    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self._start) * 1000

    def __str__(self) -> str:
        return format_duration(self.elapsed_ms())
