"""Capacity-zero handoff channel between the merge producer and the writer."""

import threading

_EMPTY = object()


class ChannelClosed(Exception):
    """Raised on put() after close() or abort(), or on a second close()."""


class Handoff:
    """Synchronous single-producer / single-consumer channel.

    put() returns only once the consumer has finished with the item, so the
    producer can never run ahead of the output. close() is the producer's
    end-of-stream signal; abort() is the consumer's way of saying it will
    take nothing more, which makes a pending or later put() raise.
    """

    def __init__(self):
        self._cond = threading.Condition()
        self._slot = _EMPTY
        self._closed = False
        self._aborted = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def aborted(self) -> bool:
        return self._aborted

    def put(self, item) -> None:
        with self._cond:
            if self._closed or self._aborted:
                raise ChannelClosed("put() on a closed channel")
            self._slot = item
            self._cond.notify_all()
            self._cond.wait_for(lambda: self._slot is _EMPTY or self._aborted)
            if self._aborted:
                raise ChannelClosed("consumer stopped reading")

    def close(self) -> None:
        with self._cond:
            if self._closed:
                raise ChannelClosed("channel already closed")
            self._closed = True
            self._cond.notify_all()

    def abort(self) -> None:
        with self._cond:
            self._aborted = True
            self._cond.notify_all()

    def __iter__(self):
        while True:
            with self._cond:
                self._cond.wait_for(lambda: self._slot is not _EMPTY or self._closed)
                if self._slot is _EMPTY:
                    return
                item = self._slot
            try:
                yield item
            finally:
                # Releases the producer blocked in put().
                with self._cond:
                    self._slot = _EMPTY
                    self._cond.notify_all()
