"""
tests/conftest.py — Shared Test Fixtures
=========================================

In-memory SQLite store plus lightweight stand-ins for the discord.py
objects the services touch (partial messageables, interactions, the bot).
"""

from __future__ import annotations

import asyncio
import itertools
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest
from sqlalchemy import Engine, create_engine
from sqlalchemy.pool import StaticPool

from rolypoly.database.models import Base
from rolypoly.engine.locks import GuildLocks
from rolypoly.services.embeds import DEFAULT_STYLE
from rolypoly.services.guild_store import GuildStore

BOT_USER_ID = 4242


# Helper to run async tests without pytest-asyncio
def run_async(coro):
    """Run an async coroutine in a fresh event loop."""
    return asyncio.run(coro)


def http_error(cls: type[discord.HTTPException] = discord.HTTPException, status: int = 500):
    """Build a discord.py HTTP exception without a real response."""
    response = MagicMock()
    response.status = status
    response.reason = "error"
    return cls(response, "boom")


# ---------------------------------------------------------------------------
# Discord stand-ins
# ---------------------------------------------------------------------------
_message_ids = itertools.count(900_000)


def make_message(message_id: int, reaction_delay: float = 0.0) -> MagicMock:
    msg = MagicMock()
    msg.id = message_id
    msg.edit = AsyncMock()
    msg.clear_reaction = AsyncMock()

    async def _react(emoji):
        await asyncio.sleep(reaction_delay)

    msg.add_reaction = AsyncMock(side_effect=_react)
    return msg


class FakeChannel:
    """Partial messageable that remembers every message it hands out."""

    def __init__(self, channel_id: int, reaction_delay: float = 0.0) -> None:
        self.id = channel_id
        self.reaction_delay = reaction_delay
        self.messages: dict[int, MagicMock] = {}
        self.send = AsyncMock(side_effect=self._send)
        self.fetch_message = AsyncMock(side_effect=self._fetch)

    def get_partial_message(self, message_id: int) -> MagicMock:
        if message_id not in self.messages:
            self.messages[message_id] = make_message(message_id, self.reaction_delay)
        return self.messages[message_id]

    async def _send(self, **kwargs):
        msg = self.get_partial_message(next(_message_ids))
        msg.sent_kwargs = kwargs
        return msg

    async def _fetch(self, message_id: int):
        return self.get_partial_message(message_id)


class FakeBot:
    """Just enough of RolyPolyBot for the services.

    *reaction_delay* makes every ``add_reaction`` sleep, standing in for
    Discord's reaction rate limit.
    """

    def __init__(
        self, store: GuildStore | None = None, *, emojis=(), reaction_delay: float = 0.0,
    ) -> None:
        self.store = store
        self.guild_locks = GuildLocks()
        self.message_style = DEFAULT_STYLE
        self.user = SimpleNamespace(id=BOT_USER_ID)
        self.emojis = list(emojis)
        self.reaction_delay = reaction_delay
        self.channels: dict[int, FakeChannel] = {}
        self.get_partial_messageable = MagicMock(side_effect=self._channel)
        self.get_guild = MagicMock(return_value=None)

    def _channel(self, channel_id: int) -> FakeChannel:
        if channel_id not in self.channels:
            self.channels[channel_id] = FakeChannel(channel_id, self.reaction_delay)
        return self.channels[channel_id]


def make_interaction(guild_id: int | None) -> MagicMock:
    """Interaction whose ``response.is_done()`` flips after defer / send."""
    interaction = MagicMock()
    interaction.guild_id = guild_id
    state = {"done": False}

    async def _respond(*args, **kwargs):
        state["done"] = True

    interaction.response.is_done = MagicMock(side_effect=lambda: state["done"])
    interaction.response.defer = AsyncMock(side_effect=_respond)
    interaction.response.send_message = AsyncMock(side_effect=_respond)
    interaction.followup.send = AsyncMock()
    return interaction


def replies(interaction: MagicMock) -> list[str]:
    """Every message shown to the invoker, direct or via followup."""
    calls = (
        interaction.response.send_message.call_args_list
        + interaction.followup.send.call_args_list
    )
    return [c.args[0] for c in calls]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def db_engine() -> Engine:
    """In-memory SQLite engine with every RolyPoly table.

    Uses StaticPool so all threads share the same in-memory database
    (required by ``asyncio.to_thread`` used in ``run_db``).
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def store(db_engine: Engine) -> GuildStore:
    return GuildStore(db_engine)


@pytest.fixture
def bot(store: GuildStore) -> FakeBot:
    return FakeBot(store)
