"""Line classifier: find the timestamp in a line and cut it out.

A cached pattern index (the "hint") is tried first; on a miss every pattern
is scanned and the earliest, then longest, match wins. Lines without a
timestamp are continuations of the previous entry, not errors.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from logmerge.patterns import TIMESTAMP_PATTERNS, TimestampPattern

logger = logging.getLogger(__name__)


class Outcome(Enum):
    TIMESTAMPED = "timestamped"
    CONTINUATION = "continuation"


@dataclass(frozen=True)
class Classification:
    instant: datetime | None
    remainder: str
    outcome: Outcome
    pattern_index: int | None = None
    cache_hit: bool = False


def _timestamp_span(match: re.Match) -> tuple[int, int]:
    if "ts" in match.re.groupindex:
        return match.span("ts")
    return match.span()


def find_best_match(
    line: str, patterns: tuple[TimestampPattern, ...] = TIMESTAMP_PATTERNS
) -> tuple[int, re.Match] | None:
    """Return (pattern index, match) for the best candidate, or None.

    Earliest start wins; on equal starts the longer match wins; a full tie
    keeps the pattern listed first.
    """
    best = None
    for index, pattern in enumerate(patterns):
        match = pattern.regex.search(line)
        if match is None:
            continue
        if best is None:
            best = (index, match)
            continue
        current = best[1]
        if match.start() < current.start():
            best = (index, match)
        elif match.start() == current.start() and len(match.group()) > len(current.group()):
            best = (index, match)
    return best


def _extract(line: str, match: re.Match, pattern: TimestampPattern) -> tuple[datetime, str] | None:
    start, end = _timestamp_span(match)
    try:
        instant = pattern.parse(line[start:end])
    except ValueError as exc:
        logger.debug("Timestamp-shaped text did not parse: %s", exc)
        return None
    return instant, line[:start] + line[end:]


def classify(
    line: str,
    hint: int | None = None,
    patterns: tuple[TimestampPattern, ...] = TIMESTAMP_PATTERNS,
) -> Classification:
    """Classify one line as timestamped or as a continuation.

    With a hint, only that pattern is tried first and a success is reported
    as a cache hit. Otherwise (or when the hint no longer fits) all patterns
    are scanned; the caller should store ``pattern_index`` as its new hint.
    """
    if hint is not None and 0 <= hint < len(patterns):
        pattern = patterns[hint]
        match = pattern.regex.search(line)
        if match is not None:
            extracted = _extract(line, match, pattern)
            if extracted is not None:
                instant, remainder = extracted
                return Classification(instant, remainder, Outcome.TIMESTAMPED, hint, cache_hit=True)

    best = find_best_match(line, patterns)
    if best is not None:
        index, match = best
        extracted = _extract(line, match, patterns[index])
        if extracted is not None:
            instant, remainder = extracted
            return Classification(instant, remainder, Outcome.TIMESTAMPED, index)

    return Classification(None, line, Outcome.CONTINUATION)
