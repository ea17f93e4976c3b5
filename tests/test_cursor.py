"""Tests for logmerge/cursor.py"""

import io
import logging
from datetime import datetime, timezone

from logmerge.cursor import EARLIEST_INSTANT, LineStatus, SourceCursor
from logmerge.stats import MergeStats

UTC = timezone.utc


def _broken_after(lines, exc):
    """Yield the given lines, then fail like a disk or network read would."""
    yield from lines
    raise exc


class TestClassification:
    def test_timestamped_then_continuation_then_done(self):
        cursor = SourceCursor("app.log", [
            "2024-01-01 10:00:00 boom\n",
            "Traceback (most recent call last):\n",
            "2024-01-01 10:00:05 recovered\n",
        ])

        first = cursor.next()
        assert first.status is LineStatus.TIMESTAMPED
        assert first.instant == datetime(2024, 1, 1, 10, 0, 0, tzinfo=UTC)
        assert first.payload == " boom"

        second = cursor.next()
        assert second.status is LineStatus.CONTINUATION
        assert second.instant == datetime(2024, 1, 1, 10, 0, 0, tzinfo=UTC)
        assert second.payload == "Traceback (most recent call last):"

        third = cursor.next()
        assert third.status is LineStatus.TIMESTAMPED
        assert third.instant == datetime(2024, 1, 1, 10, 0, 5, tzinfo=UTC)

        assert cursor.next().status is LineStatus.SOURCE_DONE
        assert cursor.alive is False

    def test_done_is_permanent(self):
        cursor = SourceCursor("a", [])
        assert cursor.next().status is LineStatus.SOURCE_DONE
        assert cursor.next().status is LineStatus.SOURCE_DONE

    def test_leading_continuation_uses_earliest_instant(self):
        cursor = SourceCursor("a", ["banner line\n", "2024-01-01 10:00:00 x\n"])
        line = cursor.next()
        assert line.status is LineStatus.CONTINUATION
        assert line.instant == EARLIEST_INSTANT

    def test_line_terminators_are_stripped(self):
        cursor = SourceCursor("a", ["2024-01-01 10:00:00 windows\r\n"])
        assert cursor.next().payload == " windows"


class TestFormatHint:
    def test_hint_set_after_first_match(self):
        cursor = SourceCursor("a", ["2024-01-01 10:00:00 x\n"])
        assert cursor.format_hint is None
        cursor.next()
        assert cursor.format_hint == 4

    def test_continuation_keeps_hint_and_instant(self):
        cursor = SourceCursor("a", ["2024-01-01 10:00:00 x\n", "no stamp\n"])
        cursor.next()
        cursor.next()
        assert cursor.format_hint == 4
        assert cursor.last_instant == datetime(2024, 1, 1, 10, 0, 0, tzinfo=UTC)

    def test_hint_follows_format_change(self):
        cursor = SourceCursor("a", [
            "2024-01-01 10:00:00 old producer\n",
            "2024-01-01T10:00:01.500 new producer\n",
        ])
        cursor.next()
        line = cursor.next()
        assert line.status is LineStatus.TIMESTAMPED
        assert cursor.format_hint == 6

    def test_stats_count_lines_and_cache_hits(self):
        stats = MergeStats()
        cursor = SourceCursor("a", [
            "2024-01-01 10:00:00 one\n",
            "continuation\n",
            "2024-01-01 10:00:01 two\n",
            "2024-01-01 10:00:02 three\n",
        ], stats)
        while cursor.next().status is not LineStatus.SOURCE_DONE:
            pass
        assert stats.lines_processed == 4
        assert stats.cache_hits == 2


class TestReadFault:
    def test_os_error_retires_cursor(self, caplog):
        lines = _broken_after(["2024-01-01 10:00:00 ok\n"], OSError("stale file handle"))
        cursor = SourceCursor("broken.log", lines)

        assert cursor.next().status is LineStatus.TIMESTAMPED
        with caplog.at_level(logging.WARNING):
            assert cursor.next().status is LineStatus.SOURCE_DONE
        assert cursor.alive is False
        assert "broken.log" in caplog.text
        assert "stale file handle" in caplog.text

    def test_stream_closed_on_exhaustion(self):
        stream = io.StringIO("2024-01-01 10:00:00 x\n")
        cursor = SourceCursor("a", stream)
        cursor.next()
        cursor.next()
        assert stream.closed

    def test_close_retires_without_reading(self):
        stream = io.StringIO("2024-01-01 10:00:00 x\n")
        cursor = SourceCursor("a", stream)
        cursor.close()
        assert stream.closed
        assert cursor.next().status is LineStatus.SOURCE_DONE
