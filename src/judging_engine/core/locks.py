"""Keyed asyncio locks for per-judge and per-team serialization."""

from __future__ import annotations

import asyncio
from collections import Counter
from collections.abc import AsyncIterator, Iterable
from contextlib import AsyncExitStack, asynccontextmanager


class KeyedLocks:
    """Lazily created asyncio locks, one per key.

    Multiple keys are always acquired in sorted order so two callers locking
    overlapping key sets cannot deadlock. A key's lock is dropped once no
    caller holds or waits for it.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: Counter[str] = Counter()

    def __contains__(self, key: str) -> bool:
        return key in self._locks

    def __len__(self) -> int:
        return len(self._locks)

    def is_locked(self, key: str) -> bool:
        lock = self._locks.get(key)
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def hold(self, *keys: str | None) -> AsyncIterator[None]:
        """Hold the locks for every non-empty key until the block exits."""
        async with AsyncExitStack() as stack:
            for key in _ordered(keys):
                await stack.enter_async_context(self._held(key))
            yield

    @asynccontextmanager
    async def _held(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] += 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if not self._users[key]:
                del self._users[key]
                del self._locks[key]


def _ordered(keys: Iterable[str | None]) -> list[str]:
    return sorted({k for k in keys if k})
