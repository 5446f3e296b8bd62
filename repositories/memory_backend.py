"""
In-process backend - tables held in dicts.

Used for tests and as the default when no data directory is configured.
Records are deep-copied on the way in and out, so callers never share
state with the "server".
"""

import asyncio

from .base import TableBackend


class MemoryBackend(TableBackend):
    """Memory implementation of the remote backend."""

    def __init__(self, latency: float = 0.0):
        """
        Args:
            latency: Seconds each call waits before touching the tables,
                to simulate a network round trip.
        """
        self.latency = latency
        self._tables: dict[str, dict[str, dict]] = {}

    async def _pause(self) -> None:
        # Always yield once so callers see a real suspension point
        await asyncio.sleep(self.latency)

    async def _load(self, table):
        return self._tables.setdefault(table, {})

    async def _store(self, table, rows):
        self._tables[table] = rows

    async def select(self, table, filters=None, order_by=None, descending=False):
        await self._pause()
        return await super().select(table, filters, order_by, descending)

    async def insert(self, table, record):
        await self._pause()
        return await super().insert(table, record)

    async def update(self, table, id, changes):
        await self._pause()
        return await super().update(table, id, changes)

    async def delete(self, table, id):
        await self._pause()
        return await super().delete(table, id)

    def count(self, table: str) -> int:
        """Row count, for tests and diagnostics."""
        return len(self._tables.get(table, {}))
