"""
rolypoly.services.reaction_sync — Reaction → Role Membership
=============================================================

Grants the bound role when a member reacts to their guild's tracking
message, and revokes it when they take the reaction away.  Reaction events
have no reply channel, so failures are logged and otherwise dropped.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord

from rolypoly.constants import ROLE_CHANGE_REASON
from rolypoly.database.engine import run_db
from rolypoly.engine.emoji import emoji_from_partial

if TYPE_CHECKING:
    from rolypoly.bot.core import RolyPolyBot

logger = logging.getLogger(__name__)


async def resolve_reaction_role(
    bot: RolyPolyBot, payload: discord.RawReactionActionEvent,
) -> int | None:
    """Role id a reaction maps to, or ``None`` if it should be ignored.

    Ignored: DMs, the bot's own reactions, messages other than the guild's
    tracking message, and emoji with no binding.
    """
    if payload.guild_id is None:
        return None
    if bot.user is not None and payload.user_id == bot.user.id:
        return None

    config = await run_db(bot.store.get, payload.guild_id)
    if config is None or config.tracking_message_id != payload.message_id:
        return None
    return config.get_role(emoji_from_partial(payload.emoji))


async def sync_member_role(
    bot: RolyPolyBot, payload: discord.RawReactionActionEvent, *, grant: bool,
) -> int | None:
    """Grant (``grant=True``) or revoke the role bound to *payload*'s emoji.

    Returns the role id that was changed, or ``None`` when nothing was done.
    """
    role_id = await resolve_reaction_role(bot, payload)
    if role_id is None:
        return None

    guild = bot.get_guild(payload.guild_id)
    if guild is None:
        logger.warning("Reaction for unknown guild %s", payload.guild_id)
        return None

    role = discord.Object(id=role_id)
    try:
        # Removal events never carry the member
        member = payload.member or guild.get_member(payload.user_id)
        if member is None:
            member = await guild.fetch_member(payload.user_id)
        if grant:
            await member.add_roles(role, reason=ROLE_CHANGE_REASON)
        else:
            await member.remove_roles(role, reason=ROLE_CHANGE_REASON)
    except discord.HTTPException as exc:
        verb = "add role to" if grant else "remove role from"
        logger.error("Could not %s user %s: %s", verb, payload.user_id, exc)
        return None

    logger.info(
        "Guild %s: %s role %s %s user %s",
        payload.guild_id, "granted" if grant else "revoked", role_id,
        "to" if grant else "from", payload.user_id,
    )
    return role_id
