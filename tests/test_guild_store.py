"""
tests/test_guild_store.py — Guild Record Store Tests
=====================================================
Uses the shared in-memory SQLite engine from conftest.
"""

from __future__ import annotations

import gc
import json
import threading

from sqlalchemy.orm import Session

from rolypoly.database.models import GuildRecord
from rolypoly.engine.emoji import UnicodeEmoji
from rolypoly.engine.guild_config import GuildConfig
from rolypoly.engine.locks import GuildLocks, ReadWriteLock
from rolypoly.engine.role_map import RoleEmojiMap

GUILD_ID = 111222333


def _config(role_id: int = 1, emoji: str = "🎉", **kwargs) -> GuildConfig:
    bindings = RoleEmojiMap()
    bindings.insert(role_id, UnicodeEmoji(emoji))
    return GuildConfig(bindings, **kwargs)


class TestGuildStore:
    def test_missing_guild_is_none(self, store):
        assert store.get(GUILD_ID) is None

    def test_put_then_get(self, store):
        store.put(GUILD_ID, _config(channel_id=5, message_id=6))
        loaded = store.get(GUILD_ID)

        assert loaded.get_role(UnicodeEmoji("🎉")) == 1
        assert loaded.tracking_message_id == 6

    def test_keyed_by_string_guild_id(self, store, db_engine):
        store.put(GUILD_ID, _config())
        with Session(db_engine) as s:
            row = s.get(GuildRecord, str(GUILD_ID))
        assert row is not None
        assert json.loads(row.data_json)["roles"][0]["role_id"] == 1

    def test_put_replaces(self, store):
        store.put(GUILD_ID, _config(1, "🎉"))
        store.put(GUILD_ID, _config(2, "✅"))

        loaded = store.get(GUILD_ID)
        assert list(loaded.bindings) == [(2, UnicodeEmoji("✅"))]
        assert store.guild_ids() == [GUILD_ID]

    def test_guilds_are_isolated(self, store):
        store.put(GUILD_ID, _config(1, "🎉"))
        store.put(999888777, _config(2, "✅"))

        assert store.get(GUILD_ID).get_role(UnicodeEmoji("✅")) is None
        assert sorted(store.guild_ids()) == [GUILD_ID, 999888777]

    def test_corrupt_record_treated_as_absent(self, store, db_engine):
        with Session(db_engine) as s:
            s.add(GuildRecord(guild_id=str(GUILD_ID), data_json="{not json"))
            s.commit()
        assert store.get(GUILD_ID) is None

    def test_delete(self, store):
        store.put(GUILD_ID, _config())
        assert store.delete(GUILD_ID) is True
        assert store.delete(GUILD_ID) is False
        assert store.get(GUILD_ID) is None


class TestReadWriteLock:
    def test_readers_share(self):
        lock = ReadWriteLock()
        with lock.read():
            done = threading.Event()

            def _reader():
                with lock.read():
                    done.set()

            t = threading.Thread(target=_reader)
            t.start()
            assert done.wait(timeout=2)
            t.join()

    def test_writer_waits_for_reader(self):
        lock = ReadWriteLock()
        order: list[str] = []
        writer_started = threading.Event()

        def _writer():
            writer_started.set()
            with lock.write():
                order.append("write")

        with lock.read():
            t = threading.Thread(target=_writer)
            t.start()
            writer_started.wait(timeout=2)
            t.join(timeout=0.2)
            assert t.is_alive()
            order.append("read-done")
        t.join(timeout=2)

        assert order == ["read-done", "write"]

    def test_error_inside_write_releases(self):
        lock = ReadWriteLock()
        try:
            with lock.write():
                raise RuntimeError("boom")
        except RuntimeError:
            pass
        with lock.read():
            pass


class TestGuildLocks:
    def test_same_guild_same_lock(self):
        locks = GuildLocks()
        first, second = locks.lock_for(1), locks.lock_for(2)
        assert locks.lock_for(1) is first
        assert first is not second
        assert len(locks) == 2

    def test_idle_locks_are_released(self):
        locks = GuildLocks()
        held = locks.lock_for(1)
        locks.lock_for(2)
        gc.collect()
        assert len(locks) == 1

        del held
        gc.collect()
        assert len(locks) == 0
