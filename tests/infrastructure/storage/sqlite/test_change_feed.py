"""Tests for item change notifications."""

import asyncio

import aiosqlite

from stockwatch.core.interfaces import ItemChange
from stockwatch.infrastructure.storage.sqlite import DataVersionWatcher, ItemChangeHub


class TestItemChangeHub:
    def test_publish_reaches_subscribers(self):
        hub = ItemChangeHub()
        received = []
        hub.subscribe(received.append)

        hub.publish(ItemChange(operation="update", item_id=1))

        assert received == [ItemChange(operation="update", item_id=1)]

    def test_unsubscribe_is_idempotent(self):
        hub = ItemChangeHub()
        unsubscribe = hub.subscribe(lambda change: None)

        unsubscribe()
        unsubscribe()

        assert hub.subscriber_count == 0

    def test_failing_handler_does_not_block_others(self):
        hub = ItemChangeHub()
        received = []

        def broken(change):
            raise RuntimeError("handler bug")

        hub.subscribe(broken)
        hub.subscribe(received.append)
        hub.publish(ItemChange(operation="insert", item_id=2))

        assert len(received) == 1

    def test_handler_may_unsubscribe_while_publishing(self):
        hub = ItemChangeHub()
        received = []
        unsubscribe = None

        def once(change):
            received.append(change)
            unsubscribe()

        unsubscribe = hub.subscribe(once)
        hub.publish(ItemChange(operation="update"))
        hub.publish(ItemChange(operation="update"))

        assert len(received) == 1


class TestDataVersionWatcher:
    async def test_detects_commit_from_other_connection(self, migrated_db):
        hub = ItemChangeHub()
        received = []
        hub.subscribe(received.append)
        watcher = DataVersionWatcher(migrated_db, hub, poll_interval=0.01)
        await watcher.start()
        try:
            async with aiosqlite.connect(migrated_db) as conn:
                await conn.execute("INSERT INTO suppliers (name) VALUES ('Elsewhere Ltd')")
                await conn.commit()
            await asyncio.sleep(0.1)
        finally:
            await watcher.stop()

        assert received
        assert received[0].operation == "external"
        assert not watcher.running

    async def test_quiet_database_publishes_nothing(self, migrated_db):
        hub = ItemChangeHub()
        received = []
        hub.subscribe(received.append)
        watcher = DataVersionWatcher(migrated_db, hub, poll_interval=0.01)
        await watcher.start()
        await asyncio.sleep(0.05)
        await watcher.stop()

        assert received == []

    async def test_stop_without_start(self, migrated_db):
        watcher = DataVersionWatcher(migrated_db, ItemChangeHub())
        await watcher.stop()
        assert not watcher.running
