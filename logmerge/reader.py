"""Glob expansion, opening log files, and source labels."""

import glob
import logging
import os

from logmerge.cursor import SourceCursor
from logmerge.stats import MergeStats

logger = logging.getLogger(__name__)

DEFAULT_LABEL_WIDTH = 20


def expand_paths(raw_paths: list[str]) -> list[str]:
    """Expand globs and deduplicate, keeping argument order.

    Patterns that match nothing are logged and skipped.
    Raises FileNotFoundError if expansion produces zero files.
    """
    expanded = []
    seen = set()

    for raw in raw_paths:
        matches = sorted(glob.glob(raw))
        if not matches:
            logger.error("No files match the pattern: %s", raw)
            continue
        for m in matches:
            if m not in seen:
                seen.add(m)
                expanded.append(m)

    if not expanded:
        raise FileNotFoundError("No log files found matching the given paths")

    return expanded


def source_label(filepath: str, width: int = DEFAULT_LABEL_WIDTH) -> str:
    """Base name of the file, keeping only its trailing ``width`` characters."""
    name = os.path.basename(filepath)
    if len(name) > width:
        return name[-width:]
    return name


def open_sources(
    paths: list[str],
    label_width: int = DEFAULT_LABEL_WIDTH,
    stats: MergeStats | None = None,
) -> list[SourceCursor]:
    """Open every path and wrap it in a cursor. Unreadable files are skipped."""
    cursors = []
    for path in paths:
        try:
            fh = open(path, "r", encoding="utf-8", errors="replace")
        except OSError as exc:
            logger.error("Error opening file %s: %s", path, exc)
            continue
        cursors.append(SourceCursor(source_label(path, label_width), fh, stats))
    return cursors
