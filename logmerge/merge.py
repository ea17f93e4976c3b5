"""K-way streaming merge over source cursors.

The scheduler holds one pending record per live cursor and always emits the
earliest one. ``run_merge`` drives it on a producer thread and hands records
to the sink through a capacity-zero channel.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Iterable, Iterator

from logmerge.cursor import LineStatus, SourceCursor
from logmerge.handoff import ChannelClosed, Handoff

logger = logging.getLogger(__name__)


class MergeState(Enum):
    RUNNING = "running"
    DRAINING = "draining"
    DONE = "done"


@dataclass(frozen=True)
class Record:
    instant: datetime
    source: str
    payload: str


class MergeScheduler:
    """Emit records from all cursors in global instant order.

    ``start`` and ``end`` are optional window bounds. Records before
    ``start`` are consumed silently; the first selected record after
    ``end`` ends the whole merge.
    """

    def __init__(
        self,
        cursors: Iterable[SourceCursor],
        start: datetime | None = None,
        end: datetime | None = None,
    ):
        self._cursors = list(cursors)
        self._pending: list[Record | None] = [None] * len(self._cursors)
        self.start = start
        self.end = end
        self.state = MergeState.RUNNING
        self.emitted = 0
        self.suppressed = 0

    def _advance(self, index: int) -> None:
        cursor = self._cursors[index]
        line = cursor.next()
        if line.status is LineStatus.SOURCE_DONE:
            self._pending[index] = None
            logger.debug("%s: source retired", cursor.label)
            return
        self._pending[index] = Record(line.instant, cursor.label, line.payload)

    def _select(self) -> int | None:
        earliest = None
        for index, record in enumerate(self._pending):
            if record is None:
                continue
            if earliest is None or record.instant < self._pending[earliest].instant:
                earliest = index
        return earliest

    def close(self) -> None:
        for cursor in self._cursors:
            cursor.close()
        self._pending = [None] * len(self._cursors)
        self.state = MergeState.DONE

    def __iter__(self) -> Iterator[Record]:
        try:
            for index in range(len(self._cursors)):
                self._advance(index)

            while True:
                index = self._select()
                if index is None:
                    break
                record = self._pending[index]
                if self.end is not None and record.instant > self.end:
                    logger.debug("Reached end of window at %s", record.instant)
                    break

                self.state = MergeState.DRAINING
                if self.start is not None and record.instant < self.start:
                    self.suppressed += 1
                else:
                    self.emitted += 1
                    yield record
                self._advance(index)
                self.state = MergeState.RUNNING
        finally:
            self.close()


def run_merge(scheduler: MergeScheduler, sink: Callable[[Record], None]) -> int:
    """Run the scheduler on a producer thread and feed every record to ``sink``.

    Returns the number of records written. An exception raised by the
    producer is re-raised here once the channel has been drained. If the
    sink raises, the producer is stopped and every source is closed before
    the exception propagates.
    """
    channel = Handoff()
    failures: list[Exception] = []

    def produce() -> None:
        records = iter(scheduler)
        try:
            for record in records:
                channel.put(record)
        except ChannelClosed:
            logger.debug("Writer stopped, abandoning merge")
        except Exception as exc:
            failures.append(exc)
        finally:
            records.close()
            channel.close()

    producer = threading.Thread(target=produce, name="logmerge-producer", daemon=True)
    producer.start()

    written = 0
    try:
        for record in channel:
            sink(record)
            written += 1
    except BaseException:
        channel.abort()
        raise
    finally:
        producer.join()

    if failures:
        raise failures[0]
    return written
