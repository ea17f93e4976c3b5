"""Per-source cursor: pulls one line at a time and classifies it."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable

from logmerge.classifier import Outcome, classify
from logmerge.stats import MergeStats

logger = logging.getLogger(__name__)

# Instant given to continuation lines that appear before a source's first
# timestamp.
EARLIEST_INSTANT = datetime.min.replace(tzinfo=timezone.utc)


class LineStatus(Enum):
    TIMESTAMPED = "timestamped"
    CONTINUATION = "continuation"
    SOURCE_DONE = "source_done"


@dataclass(frozen=True)
class ClassifiedLine:
    instant: datetime | None
    payload: str
    status: LineStatus


SOURCE_DONE = ClassifiedLine(None, "", LineStatus.SOURCE_DONE)


def _strip_terminator(line: str) -> str:
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


class SourceCursor:
    """Stateful reader for one source.

    Owns the source's format hint and the last established instant. A
    continuation line never moves ``last_instant``, so it always reflects
    the last line of this source that carried a timestamp.
    """

    def __init__(self, label: str, lines: Iterable[str], stats: MergeStats | None = None):
        self.label = label
        self.format_hint: int | None = None
        self.last_instant = EARLIEST_INSTANT
        self.alive = True
        self._source = lines
        self._lines = iter(lines)
        self._stats = stats

    def next(self) -> ClassifiedLine:
        if not self.alive:
            return SOURCE_DONE

        try:
            raw = next(self._lines)
        except StopIteration:
            self.close()
            return SOURCE_DONE
        except OSError as exc:
            logger.warning("%s: read failed, dropping source: %s", self.label, exc)
            self.close()
            return SOURCE_DONE

        line = _strip_terminator(raw)
        result = classify(line, self.format_hint)
        if self._stats is not None:
            self._stats.lines_processed += 1
            if result.cache_hit:
                self._stats.cache_hits += 1

        if result.outcome is Outcome.CONTINUATION:
            return ClassifiedLine(self.last_instant, line, LineStatus.CONTINUATION)

        self.last_instant = result.instant
        self.format_hint = result.pattern_index
        return ClassifiedLine(result.instant, result.remainder, LineStatus.TIMESTAMPED)

    def close(self) -> None:
        """Retire the cursor and release the underlying stream."""
        if not self.alive:
            return
        self.alive = False
        close = getattr(self._source, "close", None)
        if close is not None:
            try:
                close()
            except OSError as exc:
                logger.debug("%s: error while closing: %s", self.label, exc)
