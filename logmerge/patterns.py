"""Timestamp pattern table: ordered (regex, strptime layout) pairs.

Order only matters as a final tie-break: the classifier prefers the match that
starts earliest in the line, then the longest one. Layouts without a year get
the current calendar year.

The timestamp text is the ``ts`` group when a pattern defines one, otherwise
the whole match.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone


@dataclass(frozen=True)
class TimestampPattern:
    regex: re.Pattern
    layout: str
    needs_year: bool = False

    def parse(self, text: str, year: int | None = None) -> datetime:
        """Turn matched timestamp text into an aware datetime.

        Raises ValueError when the text has the right shape but is not a
        real date (e.g. month 13, "Foo 12 10:00:00").
        """
        if self.needs_year:
            # Prefixing the year keeps Feb 29 parseable in leap years.
            if year is None:
                year = datetime.now().year
            parsed = datetime.strptime(f"{year} {text}", f"%Y {self.layout}")
        else:
            parsed = datetime.strptime(text, self.layout)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed


def _pattern(regex: str, layout: str, needs_year: bool = False) -> TimestampPattern:
    return TimestampPattern(re.compile(regex), layout, needs_year)


TIMESTAMP_PATTERNS: tuple[TimestampPattern, ...] = (
    # syslog: "Jan  5 14:30:01"
    _pattern(r"[A-Za-z]{3} +\d+ \d{2}:\d{2}:\d{2}", "%b %d %H:%M:%S", needs_year=True),
    _pattern(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2} [+-]\d{4}", "%Y-%m-%d %H:%M:%S %z"),
    _pattern(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2},\d{3}", "%Y-%m-%d %H:%M:%S,%f"),
    _pattern(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\.\d{3}", "%Y-%m-%d %H:%M:%S.%f"),
    _pattern(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}", "%Y-%m-%d %H:%M:%S"),
    _pattern(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2},\d{3}", "%Y-%m-%dT%H:%M:%S,%f"),
    _pattern(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}", "%Y-%m-%dT%H:%M:%S.%f"),
    _pattern(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}", "%Y-%m-%dT%H:%M:%S"),
    # access logs: "10/Oct/2000 13:55:36" and "10/Oct/2000:13:55:36 -0700"
    _pattern(r"\d{2}/[A-Za-z]{3}/\d{4} \d{2}:\d{2}:\d{2}", "%d/%b/%Y %H:%M:%S"),
    _pattern(r"\d{2}/[A-Za-z]{3}/\d{4}:\d{2}:\d{2}:\d{2} [+-]\d{4}", "%d/%b/%Y:%H:%M:%S %z"),
    _pattern(r"\d{2}:\d{2}:\d{2}\.\d{6}", "%H:%M:%S.%f", needs_year=True),
    # strace -tt: "<pid> 14:30:01.123456"; the pid stays in the line
    _pattern(r"\d+ (?P<ts>\d{2}:\d{2}:\d{2}\.\d{6})", "%H:%M:%S.%f", needs_year=True),
)
