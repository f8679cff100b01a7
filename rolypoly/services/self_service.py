"""
rolypoly.services.self_service — ``/role self-service`` handlers
=================================================================

Turns a slash-command invocation into a configuration mutation plus a
private acknowledgment:

- ``enable``  — resolve the emoji, bind it to the role, persist.
- ``disable`` — unbind the role, persist.
- ``message`` — ensure the tracking message exists in a channel, persist.

Each handler defers its reply before waiting on the guild's lock, so a
queued command still answers inside Discord's 3 s window.  The lock is held
from the initial read until the write, so two admins editing the same guild
can't lose each other's changes.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord

from rolypoly.constants import (
    REPLY_DISABLED,
    REPLY_ENABLED,
    REPLY_NO_ROLES,
    REPLY_SENDING,
    REPLY_UNKNOWN_EMOJI,
)
from rolypoly.database.engine import run_db
from rolypoly.engine.emoji import parse_emoji
from rolypoly.engine.guild_config import GuildConfig, SyncReport

if TYPE_CHECKING:
    from rolypoly.bot.core import RolyPolyBot

logger = logging.getLogger(__name__)


async def respond(interaction: discord.Interaction, content: str) -> None:
    """Reply privately to the invoking member; failures are only logged.

    Goes through the followup webhook once the interaction has been deferred.
    """
    try:
        if interaction.response.is_done():
            await interaction.followup.send(content, ephemeral=True)
        else:
            await interaction.response.send_message(content, ephemeral=True)
    except discord.HTTPException as exc:
        logger.error("Could not respond to command: %s", exc)


async def defer(interaction: discord.Interaction) -> None:
    """Acknowledge within Discord's 3 s window before waiting on the guild lock."""
    try:
        await interaction.response.defer(ephemeral=True)
    except discord.HTTPException as exc:
        logger.error("Could not defer command: %s", exc)


def _guild_id(interaction: discord.Interaction) -> int | None:
    if interaction.guild_id is None:
        logger.warning(
            "Command %s invoked outside a guild; Discord should have prevented this",
            interaction.command.qualified_name if interaction.command else "?",
        )
    return interaction.guild_id


async def enable_role(
    bot: RolyPolyBot,
    interaction: discord.Interaction,
    role: discord.Role,
    emoji_text: str,
) -> GuildConfig | None:
    """Bind *role* to the emoji in *emoji_text*.

    Creates the guild's configuration on first use.  Returns the stored
    configuration, or ``None`` if nothing was changed.
    """
    guild_id = _guild_id(interaction)
    if guild_id is None:
        return None

    emoji = parse_emoji(emoji_text, {e.id for e in bot.emojis})
    if emoji is None:
        logger.warning("Guild %s: could not resolve emoji %r", guild_id, emoji_text)
        await respond(interaction, REPLY_UNKNOWN_EMOJI.format(text=emoji_text))
        return None

    await defer(interaction)
    async with bot.guild_locks.lock_for(guild_id):
        config = await run_db(bot.store.get, guild_id) or GuildConfig()
        await config.add_role(bot, role.id, emoji, style=bot.message_style)
        await run_db(bot.store.put, guild_id, config)

    logger.info("Guild %s: enabled role %s with %s", guild_id, role.id, emoji.render())
    await respond(interaction, REPLY_ENABLED.format(role=role.name))
    return config


async def disable_role(
    bot: RolyPolyBot,
    interaction: discord.Interaction,
    role: discord.Role,
) -> GuildConfig | None:
    """Unbind *role*.  Guilds without a configuration just get the reply."""
    guild_id = _guild_id(interaction)
    if guild_id is None:
        return None

    await defer(interaction)
    async with bot.guild_locks.lock_for(guild_id):
        config = await run_db(bot.store.get, guild_id)
        if config is not None:
            await config.remove_role(bot, role.id, style=bot.message_style)
            await run_db(bot.store.put, guild_id, config)

    logger.info("Guild %s: disabled role %s", guild_id, role.id)
    await respond(interaction, REPLY_DISABLED.format(role=role.name))
    return config


async def create_message(
    bot: RolyPolyBot,
    interaction: discord.Interaction,
    channel: discord.abc.GuildChannel,
) -> SyncReport | None:
    """Make sure the tracking message exists in *channel*.

    The reply goes out before any Discord calls so the interaction doesn't
    time out while the message and its reactions are posted.
    """
    guild_id = _guild_id(interaction)
    if guild_id is None:
        return None

    await defer(interaction)
    async with bot.guild_locks.lock_for(guild_id):
        config = await run_db(bot.store.get, guild_id)
        if config is None:
            await respond(interaction, REPLY_NO_ROLES)
            return None

        await respond(interaction, REPLY_SENDING.format(channel=channel.name))
        report = await config.send_message(bot, channel.id, style=bot.message_style)
        await run_db(bot.store.put, guild_id, config)

    return report
