import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager


class TableLockRegistry:
    """One asyncio.Lock per table id, created on first use.

    Serialises order placement for a table inside this process. Placements for
    different tables take different locks and never wait on each other.
    """

    def __init__(self) -> None:
        self._locks: dict[int, asyncio.Lock] = {}

    def lock_for(self, table_id: int) -> asyncio.Lock:
        lock = self._locks.get(table_id)
        if lock is None:
            lock = self._locks[table_id] = asyncio.Lock()
        return lock

    @asynccontextmanager
    async def hold(self, table_id: int) -> AsyncIterator[None]:
        async with self.lock_for(table_id):
            yield
