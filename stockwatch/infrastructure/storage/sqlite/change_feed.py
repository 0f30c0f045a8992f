"""
Change notifications for the inventory item table.

SQLite has no server-side push, so writes made through this process publish
directly to the hub, and an optional watcher polls ``PRAGMA data_version``
to notice commits made by other processes.
"""

import asyncio
from pathlib import Path

import aiosqlite

from stockwatch.config import get_logger
from stockwatch.core.interfaces.stock_repository import (
    ItemChange,
    ItemChangeHandler,
    Unsubscribe,
)
from stockwatch.infrastructure.storage.sqlite.connection import open_connection

logger = get_logger(__name__, component="change-feed")


class ItemChangeHub:
    """In-process fan-out of item change notifications."""

    def __init__(self) -> None:
        self._handlers: list[ItemChangeHandler] = []

    def subscribe(self, handler: ItemChangeHandler) -> Unsubscribe:
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def publish(self, change: ItemChange) -> None:
        for handler in list(self._handlers):
            try:
                handler(change)
            except Exception as e:
                logger.error(
                    "item_change_handler_failed",
                    operation=change.operation,
                    error=str(e),
                )

    @property
    def subscriber_count(self) -> int:
        return len(self._handlers)


class DataVersionWatcher:
    """
    Polls ``PRAGMA data_version`` on a dedicated connection.

    The value changes whenever another connection commits to the database,
    which covers writes from other processes. Commits made through the
    pool also bump it, so the hub may see such writes twice; the monitoring
    debounce absorbs the duplicate.
    """

    def __init__(
        self,
        db_path: Path,
        hub: ItemChangeHub,
        poll_interval: float = 2.0,
    ) -> None:
        self._db_path = db_path
        self._hub = hub
        self._poll_interval = poll_interval
        self._conn: aiosqlite.Connection | None = None
        self._task: asyncio.Task | None = None
        self._last_version: int | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.running:
            return
        self._conn = await open_connection(self._db_path)
        self._last_version = await self._read_version()
        self._task = asyncio.get_running_loop().create_task(self._poll())
        logger.info("data_version_watcher_started", poll_interval=self._poll_interval)

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)
            self._task = None
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
        logger.info("data_version_watcher_stopped")

    async def _read_version(self) -> int:
        assert self._conn is not None
        cursor = await self._conn.execute("PRAGMA data_version")
        row = await cursor.fetchone()
        return int(row[0])

    async def _poll(self) -> None:
        while True:
            await asyncio.sleep(self._poll_interval)
            try:
                version = await self._read_version()
            except aiosqlite.Error as e:
                logger.warning("data_version_poll_failed", error=str(e))
                continue
            if version != self._last_version:
                self._last_version = version
                self._hub.publish(ItemChange(operation="external"))
