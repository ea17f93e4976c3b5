"""Output formatting: one "<instant><sep><source><sep><payload>" line per record."""

import sys
from datetime import datetime
from typing import Callable, TextIO

from logmerge.merge import Record


def format_instant(instant: datetime) -> str:
    """YYYY-MM-DD HH:MM:SS in the instant's own offset."""
    # strftime does not zero-pad years below 1000 on every platform.
    return (
        f"{instant.year:04d}-{instant.month:02d}-{instant.day:02d} "
        f"{instant.hour:02d}:{instant.minute:02d}:{instant.second:02d}"
    )


def format_record(record: Record, separator: str = " ") -> str:
    return separator.join((format_instant(record.instant), record.source, record.payload))


def make_sink(stream: TextIO | None = None, separator: str = " ") -> Callable[[Record], None]:
    """Return a callable that writes each record to ``stream`` (stdout by default)."""
    out = stream if stream is not None else sys.stdout

    def write(record: Record) -> None:
        out.write(format_record(record, separator) + "\n")

    return write
