"""Keyed asyncio locks for per-bet and per-user mutation serialization."""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Hashable


class KeyedLockRegistry:
    """
    One asyncio.Lock per key, created on demand and dropped once nobody
    holds or waits on it.

    Serializes check-then-act sequences (participation check, resolution
    check) inside one process. Row locks taken with SELECT ... FOR UPDATE
    extend the guarantee across processes on PostgreSQL.
    """

    def __init__(self) -> None:
        self._locks: dict[Hashable, asyncio.Lock] = {}
        self._users: dict[Hashable, int] = {}

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    def is_held(self, key: Hashable) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)


# Shared by staking and resolution so both paths serialize on the same bet
bet_locks = KeyedLockRegistry()
user_locks = KeyedLockRegistry()
