"""Merge counters: lines classified and format-hint cache hits."""

import time
from dataclasses import dataclass, field


@dataclass
class MergeStats:
    lines_processed: int = 0
    cache_hits: int = 0
    started_at: float = field(default_factory=time.monotonic)

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.started_at


def format_stats_text(stats: MergeStats) -> str:
    """Human-readable summary printed after a verbose run."""
    lines = []
    lines.append(f"Lines: {stats.lines_processed}")
    lines.append(f"Cache hits: {stats.cache_hits}")
    lines.append(f"Duration {stats.elapsed:.3f}s")
    return "\n".join(lines)
