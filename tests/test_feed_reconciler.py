# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-29
# Updated: 2026-10-19
# Description: test_feed_reconciler.py
# -----------------------------------------------------------------------------
import asyncio
from contextlib import asynccontextmanager

from fakes import make_record
from feed.EmojiFeedClient import FeedEvent
from feed.EmojiFeedReconciler import EmojiFeedReconciler, FeedStatus


class ScriptedSource:
    """Feed source driven by the test: bulk records up front, stream events pushed through a queue."""

    def __init__(self, recent=None, *, load_error=None, subscribe_error=None):
        self.recent = list(recent or [])
        self.load_error = load_error
        self.subscribe_error = subscribe_error
        self.events: asyncio.Queue = asyncio.Queue()
        self.load_gate = asyncio.Event()
        self.load_gate.set()
        self.released = False

    async def load_recent(self, limit=50):
        await self.load_gate.wait()
        if self.load_error is not None:
            raise self.load_error
        return self.recent[:limit]

    async def _iter(self):
        while True:
            item = await self.events.get()
            if item is None:
                return
            if isinstance(item, Exception):
                raise item
            yield item

    @asynccontextmanager
    async def subscribe(self):
        if self.subscribe_error is not None:
            raise self.subscribe_error
        try:
            yield self._iter()
        finally:
            self.released = True


async def _settle():
    for _ in range(5):
        await asyncio.sleep(0)


def test_seed_then_stream_is_newest_first_without_duplicates():
    async def scenario():
        bulk = [make_record("r2", offset_seconds=2), make_record("r1", offset_seconds=1)]
        source = ScriptedSource(bulk)
        async with EmojiFeedReconciler(source) as feed:
            await source.events.put(FeedEvent("subscribed"))
            await _settle()
            await source.events.put(FeedEvent("insert", make_record("r3", offset_seconds=3)))
            await source.events.put(FeedEvent("insert", make_record("r3", offset_seconds=3)))
            await _settle()
            status_live = feed.status
            ids = [r.id for r in feed.records]
        return status_live, ids, feed.status, source.released

    status_live, ids, final_status, released = asyncio.run(scenario())

    assert status_live == FeedStatus.SUBSCRIBED
    assert ids == ["r3", "r2", "r1"]
    assert final_status == FeedStatus.CLOSED
    assert released is True


def test_events_before_bulk_load_are_merged():
    async def scenario():
        bulk = [make_record("r1", offset_seconds=1), make_record("r2", offset_seconds=2)]
        source = ScriptedSource(bulk)
        source.load_gate.clear()
        async with EmojiFeedReconciler(source) as feed:
            await source.events.put(FeedEvent("subscribed"))
            await source.events.put(FeedEvent("insert", make_record("r3", offset_seconds=3)))
            await source.events.put(FeedEvent("insert", make_record("r2", offset_seconds=2)))
            await _settle()
            before = [r.id for r in feed.records]
            source.load_gate.set()
            await _settle()
            after = [r.id for r in feed.records]
        return before, after

    before, after = asyncio.run(scenario())

    assert before == ["r2", "r3"]
    assert after == ["r3", "r2", "r1"]


def test_increasing_inserts_end_up_newest_first():
    async def scenario():
        source = ScriptedSource()
        async with EmojiFeedReconciler(source) as feed:
            for i in range(5):
                await source.events.put(FeedEvent("insert", make_record(f"r{i}", offset_seconds=i)))
            await _settle()
            return [r.id for r in feed.records]

    assert asyncio.run(scenario()) == ["r4", "r3", "r2", "r1", "r0"]


def test_stream_error_keeps_loaded_data():
    statuses = []

    async def scenario():
        source = ScriptedSource([make_record("r1", offset_seconds=1)])
        feed = EmojiFeedReconciler(source, on_status=statuses.append)
        feed.start()
        await source.events.put(FeedEvent("subscribed"))
        await source.events.put(FeedEvent("insert", make_record("r2", offset_seconds=2)))
        await _settle()
        await source.events.put(ConnectionError("stream dropped"))
        await _settle()
        errored = feed.status
        ids = [r.id for r in feed.records]
        await feed.close()
        return errored, ids, feed.status

    errored, ids, final_status = asyncio.run(scenario())

    assert errored == FeedStatus.ERROR
    assert ids == ["r2", "r1"]
    assert final_status == FeedStatus.CLOSED
    assert statuses == [FeedStatus.SUBSCRIBED, FeedStatus.ERROR, FeedStatus.CLOSED]


def test_load_failure_keeps_stream_live():
    async def scenario():
        boom = RuntimeError("bulk load failed")
        source = ScriptedSource(load_error=boom)
        async with EmojiFeedReconciler(source) as feed:
            await _settle()
            await source.events.put(FeedEvent("subscribed"))
            await source.events.put(FeedEvent("insert", make_record("live1")))
            await _settle()
            live = (feed.status, [r.id for r in feed.records], feed.last_error is boom, source.released)
        return live, feed.status, source.released

    live, final_status, released = asyncio.run(scenario())

    assert live == (FeedStatus.SUBSCRIBED, ["live1"], True, False)
    assert final_status == FeedStatus.CLOSED
    assert released is True


def test_subscribe_failure_still_seeds_slow_bulk_load():
    async def scenario():
        bulk = [make_record("bulk1", offset_seconds=1), make_record("bulk2", offset_seconds=2)]
        source = ScriptedSource(bulk, subscribe_error=ConnectionError("refused"))
        source.load_gate.clear()
        feed = EmojiFeedReconciler(source)
        task = feed.start()
        await _settle()
        before = (feed.status, feed.records)
        source.load_gate.set()
        await asyncio.wait_for(task, timeout=1)
        return before, feed.status, [r.id for r in feed.records], feed.last_error

    before, status, ids, last_error = asyncio.run(scenario())

    assert before == (FeedStatus.ERROR, [])
    assert status == FeedStatus.ERROR
    assert ids == ["bulk2", "bulk1"]
    assert isinstance(last_error, ConnectionError)


def test_status_callback_failure_does_not_block_data():
    def broken_callback(_status):
        raise ValueError("ui gone")

    async def scenario():
        source = ScriptedSource()
        async with EmojiFeedReconciler(source, on_status=broken_callback) as feed:
            await source.events.put(FeedEvent("subscribed"))
            await source.events.put(FeedEvent("insert", make_record("r1")))
            await _settle()
            return feed.status, [r.id for r in feed.records], feed.last_update

    status, ids, last_update = asyncio.run(scenario())

    assert status == FeedStatus.SUBSCRIBED
    assert ids == ["r1"]
    assert last_update is not None


def test_merge_and_seed_directly():
    feed = EmojiFeedReconciler(ScriptedSource())

    assert feed.merge(make_record("a", offset_seconds=5)) is True
    assert feed.merge(make_record("a", offset_seconds=5)) is False
    feed.seed([make_record("b", offset_seconds=9), make_record("a", offset_seconds=5), make_record("c", offset_seconds=1)])

    assert [r.id for r in feed.records] == ["b", "a", "c"]
