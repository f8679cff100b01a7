"""
rolypoly.bot.cogs.self_service — Self-Service Role Commands & Reactions
========================================================================

Slash commands (``/role self-service …``), all restricted to members with
Manage Roles and unavailable in DMs:

- ``enable <role> <emoji>`` — make a role self-assignable with an emoji
- ``disable <role>``        — stop offering a role
- ``message <channel>``     — post the tracking message if it isn't there

Also listens for raw reaction add/remove events on the tracking message
and grants or revokes the bound role.  Raw events are used so reactions on
uncached messages still count.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from rolypoly.constants import REPLY_COMMAND_FAILED
from rolypoly.services.reaction_sync import sync_member_role
from rolypoly.services.self_service import create_message, disable_role, enable_role

if TYPE_CHECKING:
    from rolypoly.bot.core import RolyPolyBot

logger = logging.getLogger(__name__)


class SelfService(commands.Cog, name="SelfService"):
    """Reaction-based self-service role enrollment."""

    role = app_commands.Group(
        name="role",
        description="modify roles",
        guild_only=True,
        default_permissions=discord.Permissions(manage_roles=True),
    )
    self_service = app_commands.Group(
        name="self-service",
        description="modify self-service role enrollment permissions",
        parent=role,
    )

    def __init__(self, bot: RolyPolyBot) -> None:
        self.bot = bot

    # -------------------------------------------------------------------
    # /role self-service enable
    # -------------------------------------------------------------------
    @self_service.command(name="enable", description="enable a role for self-service enrollment")
    @app_commands.describe(
        role="the role to enable",
        emoji="the emoji to associate with this role",
    )
    async def enable(self, interaction: discord.Interaction, role: discord.Role, emoji: str) -> None:
        await enable_role(self.bot, interaction, role, emoji)

    # -------------------------------------------------------------------
    # /role self-service disable
    # -------------------------------------------------------------------
    @self_service.command(name="disable", description="disable a role for self-service enrollment")
    @app_commands.describe(role="the role to disable")
    async def disable(self, interaction: discord.Interaction, role: discord.Role) -> None:
        await disable_role(self.bot, interaction, role)

    # -------------------------------------------------------------------
    # /role self-service message
    # -------------------------------------------------------------------
    @self_service.command(name="message", description="create a message for users to react to")
    @app_commands.describe(channel="the channel to message in")
    async def message(self, interaction: discord.Interaction, channel: discord.TextChannel) -> None:
        await create_message(self.bot, interaction, channel)

    async def cog_app_command_error(
        self, interaction: discord.Interaction, error: app_commands.AppCommandError,
    ) -> None:
        logger.error(
            "Command %s failed in guild %s",
            interaction.command.qualified_name if interaction.command else "?",
            interaction.guild_id,
            exc_info=error,
        )
        try:
            if interaction.response.is_done():
                await interaction.followup.send(REPLY_COMMAND_FAILED, ephemeral=True)
            else:
                await interaction.response.send_message(REPLY_COMMAND_FAILED, ephemeral=True)
        except discord.HTTPException:
            logger.exception("Could not report command failure")

    # -------------------------------------------------------------------
    # Reaction listeners
    # -------------------------------------------------------------------
    @commands.Cog.listener()
    async def on_raw_reaction_add(self, payload: discord.RawReactionActionEvent) -> None:
        try:
            await sync_member_role(self.bot, payload, grant=True)
        except Exception:
            logger.exception(
                "Error processing reaction on message %s from user %s",
                payload.message_id, payload.user_id,
            )

    @commands.Cog.listener()
    async def on_raw_reaction_remove(self, payload: discord.RawReactionActionEvent) -> None:
        try:
            await sync_member_role(self.bot, payload, grant=False)
        except Exception:
            logger.exception(
                "Error processing reaction remove on message %s from user %s",
                payload.message_id, payload.user_id,
            )


async def setup(bot: RolyPolyBot) -> None:
    await bot.add_cog(SelfService(bot))
