"""
rolypoly.engine.locks — Store Lock & Per-Guild Mutual Exclusion
================================================================

Two layers of locking:

* :class:`ReadWriteLock` guards the store itself.  Store calls run on pool
  threads (see :func:`~rolypoly.database.engine.run_db`), so this is a
  ``threading`` primitive: any number of readers, or exactly one writer.
* :class:`GuildLocks` serializes the read-modify-write cycle of a single
  guild's configuration on the event loop.  Without it two ``enable``
  commands racing on one guild could both read the same snapshot and the
  second write would silently drop the first.
"""

from __future__ import annotations

import asyncio
import threading
import weakref
from collections.abc import Iterator
from contextlib import contextmanager


class ReadWriteLock:
    """Writer-preferring reader/writer lock.

    Waiting writers block new readers so a steady stream of lookups can't
    starve a persist.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class GuildLocks:
    """Hands out one :class:`asyncio.Lock` per guild id.

    Locks are held weakly: once no command holds or waits on a guild's lock
    it is dropped, and the next caller gets a fresh one.
    """

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[int, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def lock_for(self, guild_id: int) -> asyncio.Lock:
        lock = self._locks.get(guild_id)
        if lock is None:
            lock = self._locks[guild_id] = asyncio.Lock()
        return lock

    def __len__(self) -> int:
        return len(self._locks)
