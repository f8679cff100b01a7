"""
tests/test_reaction_sync.py — Reaction → Role Tests
====================================================
"""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord

from conftest import BOT_USER_ID, http_error, run_async
from rolypoly.engine.emoji import CustomEmoji, UnicodeEmoji
from rolypoly.engine.guild_config import GuildConfig
from rolypoly.engine.role_map import RoleEmojiMap
from rolypoly.services.reaction_sync import resolve_reaction_role, sync_member_role

GUILD_ID = 111222333
MESSAGE_ID = 600
MEMBER_ID = 777
R1 = 1001
BLOB_ID = 112233445566778899


def _payload(
    *,
    emoji: discord.PartialEmoji | None = None,
    user_id: int = MEMBER_ID,
    message_id: int = MESSAGE_ID,
    guild_id: int | None = GUILD_ID,
    member=None,
) -> SimpleNamespace:
    return SimpleNamespace(
        guild_id=guild_id,
        user_id=user_id,
        message_id=message_id,
        emoji=emoji or discord.PartialEmoji(name="🎉"),
        member=member,
    )


def _member() -> MagicMock:
    member = MagicMock()
    member.add_roles = AsyncMock()
    member.remove_roles = AsyncMock()
    return member


def _setup(bot, store, *, emoji=None) -> MagicMock:
    bindings = RoleEmojiMap()
    bindings.insert(R1, emoji or UnicodeEmoji("🎉"))
    store.put(GUILD_ID, GuildConfig(bindings, channel_id=500, message_id=MESSAGE_ID))

    member = _member()
    guild = MagicMock()
    guild.get_member = MagicMock(return_value=None)
    guild.fetch_member = AsyncMock(return_value=member)
    bot.get_guild.return_value = guild
    return member


class TestResolve:
    def test_bound_emoji_on_tracking_message(self, bot, store):
        _setup(bot, store)
        assert run_async(resolve_reaction_role(bot, _payload())) == R1

    def test_other_message_ignored(self, bot, store):
        _setup(bot, store)
        assert run_async(resolve_reaction_role(bot, _payload(message_id=1))) is None

    def test_unbound_emoji_ignored(self, bot, store):
        _setup(bot, store)
        payload = _payload(emoji=discord.PartialEmoji(name="🔥"))
        assert run_async(resolve_reaction_role(bot, payload)) is None

    def test_no_configuration(self, bot):
        assert run_async(resolve_reaction_role(bot, _payload())) is None

    def test_direct_messages_ignored(self, bot, store):
        _setup(bot, store)
        assert run_async(resolve_reaction_role(bot, _payload(guild_id=None))) is None

    def test_renamed_custom_emoji_still_matches(self, bot, store):
        _setup(bot, store, emoji=CustomEmoji(BLOB_ID, "blob"))
        payload = _payload(emoji=discord.PartialEmoji(name="blob_v2", id=BLOB_ID))
        assert run_async(resolve_reaction_role(bot, payload)) == R1

    def test_presentation_selector_variant_matches(self, bot, store):
        _setup(bot, store, emoji=UnicodeEmoji("❤"))
        payload = _payload(emoji=discord.PartialEmoji(name="❤\ufe0f"))
        assert run_async(resolve_reaction_role(bot, payload)) == R1


class TestSyncMemberRole:
    def test_grant_on_add(self, bot, store):
        member = _setup(bot, store)
        assert run_async(sync_member_role(bot, _payload(), grant=True)) == R1

        member.add_roles.assert_awaited_once()
        assert member.add_roles.call_args.args[0].id == R1
        member.remove_roles.assert_not_awaited()

    def test_revoke_on_remove_fetches_member(self, bot, store):
        member = _setup(bot, store)
        assert run_async(sync_member_role(bot, _payload(), grant=False)) == R1

        bot.get_guild.return_value.fetch_member.assert_awaited_once_with(MEMBER_ID)
        member.remove_roles.assert_awaited_once()
        assert member.remove_roles.call_args.args[0].id == R1

    def test_payload_member_used_when_present(self, bot, store):
        _setup(bot, store)
        reactor = _member()
        run_async(sync_member_role(bot, _payload(member=reactor), grant=True))

        reactor.add_roles.assert_awaited_once()
        bot.get_guild.return_value.fetch_member.assert_not_awaited()

    def test_bot_reaction_never_grants(self, bot, store):
        member = _setup(bot, store)
        payload = _payload(user_id=BOT_USER_ID, member=member)

        assert run_async(sync_member_role(bot, payload, grant=True)) is None
        member.add_roles.assert_not_awaited()

    def test_bot_reaction_ignored_without_configuration(self, bot):
        payload = _payload(user_id=BOT_USER_ID)
        assert run_async(sync_member_role(bot, payload, grant=True)) is None
        bot.get_guild.assert_not_called()

    def test_failure_is_swallowed_and_reported_as_none(self, bot, store):
        member = _setup(bot, store)
        member.add_roles.side_effect = http_error(discord.Forbidden, 403)

        assert run_async(sync_member_role(bot, _payload(), grant=True)) is None

    def test_unknown_guild(self, bot, store):
        _setup(bot, store)
        bot.get_guild.return_value = None
        assert run_async(sync_member_role(bot, _payload(), grant=True)) is None
