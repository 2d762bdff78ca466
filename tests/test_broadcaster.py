# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-09-28
# Description: test_broadcaster.py
# -----------------------------------------------------------------------------
import asyncio
import threading

from fakes import make_record
from feed.InsertBroadcaster import InsertBroadcaster


def test_publish_reaches_every_subscriber():
    async def scenario():
        broadcaster = InsertBroadcaster()
        async with broadcaster.subscribe() as s1, broadcaster.subscribe() as s2:
            assert broadcaster.subscriber_count == 2
            delivered = broadcaster.publish(make_record("r1"))
            got1 = await asyncio.wait_for(s1.get(), timeout=1.0)
            got2 = await asyncio.wait_for(s2.get(), timeout=1.0)
        return delivered, got1, got2, broadcaster.subscriber_count

    delivered, got1, got2, remaining = asyncio.run(scenario())

    assert delivered == 2
    assert got1.id == got2.id == "r1"
    assert remaining == 0


def test_publish_from_worker_thread():
    async def scenario():
        broadcaster = InsertBroadcaster()
        async with broadcaster.subscribe() as sub:
            t = threading.Thread(target=broadcaster.publish, args=(make_record("threaded"),))
            t.start()
            record = await asyncio.wait_for(sub.get(), timeout=1.0)
            t.join()
        return record

    assert asyncio.run(scenario()).id == "threaded"


def test_full_queue_drops_and_counts():
    async def scenario():
        broadcaster = InsertBroadcaster(queue_size=1)
        async with broadcaster.subscribe() as sub:
            broadcaster.publish(make_record("kept"))
            broadcaster.publish(make_record("dropped"))
            await asyncio.sleep(0)
            first = await asyncio.wait_for(sub.get(), timeout=1.0)
            return first, sub.dropped

    first, dropped = asyncio.run(scenario())

    assert first.id == "kept"
    assert dropped == 1


def test_close_all_ends_iteration():
    async def scenario():
        broadcaster = InsertBroadcaster()
        seen = []
        async with broadcaster.subscribe() as sub:
            broadcaster.publish(make_record("a"))
            broadcaster.close_all()
            async for record in sub:
                seen.append(record.id)
        return seen

    assert asyncio.run(scenario()) == ["a"]
