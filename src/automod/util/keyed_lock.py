from __future__ import annotations

import asyncio
import weakref
from typing import Hashable


class KeyedLock:
    """Hands out one ``asyncio.Lock`` per key.

    Locks are held weakly: once no coroutine is using a key's lock it is
    dropped, so the mapping never grows with the number of users seen.

    Usage::

        async with keyed_lock(("guild", 1, "user", 2)):
            ...
    """

    def __init__(self) -> None:
        self._locks: "weakref.WeakValueDictionary[Hashable, asyncio.Lock]" = weakref.WeakValueDictionary()

    def __call__(self, key: Hashable) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    def __len__(self) -> int:
        return len(self._locks)
