"""Per-description build locks.

Locks are scoped to the running event loop, since an ``asyncio.Lock`` cannot be
shared across loops (``build_sync`` starts a fresh loop per call). An entry
lives only while some coroutine holds or waits on it.
"""

from __future__ import annotations

import asyncio
import weakref
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field


@dataclass
class _LockSlot:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


_LockTable = dict[tuple[str, str], _LockSlot]

_locks: weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, _LockTable] = (
    weakref.WeakKeyDictionary()
)


@asynccontextmanager
async def description_lock(store_key: str, description: str) -> AsyncIterator[None]:
    """Hold the lock guarding builds of ``description`` in the store ``store_key``.

    Usage:
        async with description_lock(handler.store_key, description):
            ...
    """
    loop = asyncio.get_running_loop()
    per_loop = _locks.get(loop)
    if per_loop is None:
        per_loop = {}
        _locks[loop] = per_loop

    key = (store_key, description)
    slot = per_loop.get(key)
    if slot is None:
        slot = _LockSlot()
        per_loop[key] = slot

    slot.users += 1
    try:
        async with slot.lock:
            yield
    finally:
        slot.users -= 1
        if slot.users == 0:
            del per_loop[key]
