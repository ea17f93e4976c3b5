"""Tests for logmerge/handoff.py"""

import threading

import pytest

from logmerge.handoff import ChannelClosed, Handoff


def _produce(channel, items):
    for item in items:
        channel.put(item)
    channel.close()


class TestHandoff:
    def test_items_arrive_in_order(self):
        channel = Handoff()
        t = threading.Thread(target=_produce, args=(channel, [1, 2, 3]))
        t.start()
        assert list(channel) == [1, 2, 3]
        t.join(timeout=3)
        assert not t.is_alive()

    def test_close_ends_iteration(self):
        channel = Handoff()
        channel.close()
        assert list(channel) == []
        assert channel.closed

    def test_put_after_close_raises(self):
        channel = Handoff()
        channel.close()
        with pytest.raises(ChannelClosed):
            channel.put("late")

    def test_double_close_raises(self):
        channel = Handoff()
        channel.close()
        with pytest.raises(ChannelClosed):
            channel.close()

    def test_put_blocks_until_consumer_is_done(self):
        channel = Handoff()
        returned = threading.Event()

        def produce():
            channel.put("a")
            returned.set()
            channel.close()

        t = threading.Thread(target=produce)
        t.start()

        items = iter(channel)
        assert next(items) == "a"
        # The consumer still holds "a", so put() must not have returned.
        assert not returned.wait(0.2)

        with pytest.raises(StopIteration):
            next(items)
        assert returned.is_set()
        t.join(timeout=3)
        assert not t.is_alive()

    def test_abort_releases_blocked_producer(self):
        channel = Handoff()
        outcome = []

        def produce():
            try:
                channel.put("a")
            except ChannelClosed:
                outcome.append("stopped")

        t = threading.Thread(target=produce)
        t.start()

        items = iter(channel)
        assert next(items) == "a"
        channel.abort()
        t.join(timeout=3)

        assert not t.is_alive()
        assert outcome == ["stopped"]
        assert channel.aborted

    def test_put_after_abort_raises(self):
        channel = Handoff()
        channel.abort()
        with pytest.raises(ChannelClosed):
            channel.put("late")
