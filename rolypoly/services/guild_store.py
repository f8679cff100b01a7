"""
rolypoly.services.guild_store — Guild Record Store
===================================================

Durable guild id → :class:`GuildConfig` mapping over the ``guild_records``
table.  Keys are the guild snowflake in string form; values are the JSON
produced by :meth:`GuildConfig.to_dict`.

All methods are synchronous — call them from cogs via
:func:`~rolypoly.database.engine.run_db`.  A process-wide
:class:`ReadWriteLock` lets lookups run concurrently while a write holds
exclusive access.  The lock covers single calls only; the per-guild
read-modify-write cycle is serialized by
:class:`~rolypoly.engine.locks.GuildLocks`.
"""

from __future__ import annotations

import json
import logging

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session

from rolypoly.database.engine import get_session
from rolypoly.database.models import GuildRecord
from rolypoly.engine.guild_config import GuildConfig
from rolypoly.engine.locks import ReadWriteLock

logger = logging.getLogger(__name__)


class GuildStore:
    """Persistence for per-guild self-service configuration."""

    def __init__(self, engine: Engine, lock: ReadWriteLock | None = None) -> None:
        self.engine = engine
        self.lock = lock or ReadWriteLock()

    # -----------------------------------------------------------------------
    # Reads
    # -----------------------------------------------------------------------
    def get(self, guild_id: int) -> GuildConfig | None:
        """Load *guild_id*'s configuration, or ``None`` if it has none.

        A row that can't be decoded is logged and treated as absent.
        """
        with self.lock.read(), Session(self.engine) as session:
            row = session.get(GuildRecord, str(guild_id))
            if row is None:
                return None
            raw = row.data_json

        try:
            return GuildConfig.from_dict(json.loads(raw))
        except (json.JSONDecodeError, KeyError, TypeError, ValueError):
            logger.exception("Corrupt guild record for guild %s; ignoring it", guild_id)
            return None

    def guild_ids(self) -> list[int]:
        """Every guild with a stored configuration."""
        with self.lock.read(), Session(self.engine) as session:
            return [int(key) for key in session.scalars(select(GuildRecord.guild_id))]

    # -----------------------------------------------------------------------
    # Writes
    # -----------------------------------------------------------------------
    def put(self, guild_id: int, config: GuildConfig) -> None:
        """Insert or replace *guild_id*'s configuration."""
        data_json = json.dumps(config.to_dict())
        with self.lock.write(), get_session(self.engine) as session:
            row = session.get(GuildRecord, str(guild_id))
            if row is None:
                session.add(GuildRecord(guild_id=str(guild_id), data_json=data_json))
            else:
                row.data_json = data_json
        logger.debug("Stored configuration for guild %s: %r", guild_id, config)

    def delete(self, guild_id: int) -> bool:
        """Drop *guild_id*'s record.  Returns whether one existed."""
        with self.lock.write(), get_session(self.engine) as session:
            row = session.get(GuildRecord, str(guild_id))
            if row is None:
                return False
            session.delete(row)
        logger.info("Deleted configuration for guild %s", guild_id)
        return True
