"""
rolypoly.database.models — SQLAlchemy 2.0 Data Models
======================================================

The store is deliberately a flat key-value table: one row per guild, keyed
by the guild snowflake in string form, holding the serialized
:class:`~rolypoly.engine.guild_config.GuildConfig` as JSON text.

Tables:
- guild_records — guild id → self-service configuration JSON
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Shared base for all RolyPoly ORM models."""


class GuildRecord(Base):
    """One guild's serialized self-service configuration."""

    __tablename__ = "guild_records"

    guild_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    data_json: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<GuildRecord guild_id={self.guild_id}>"
