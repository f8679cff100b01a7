"""
rolypoly.bot.core — Bot Instance & Cog Loader
==============================================

Defines :class:`RolyPolyBot`, a ``commands.Bot`` subclass that:

1. Carries the shared state every cog and service needs: ``bot.cfg``,
   ``bot.store``, ``bot.guild_locks`` and ``bot.message_style``.
2. Loads every extension in :data:`EXTENSIONS` during ``setup_hook``.
3. Registers the slash-command tree on ``ready`` — scoped to the debug
   guild in development (instant), globally in production (Discord may
   take up to an hour to propagate global commands).
"""

from __future__ import annotations

import logging

import discord
from discord.ext import commands

from rolypoly.config import RolyPolyConfig
from rolypoly.engine.locks import GuildLocks
from rolypoly.services.embeds import MessageStyle
from rolypoly.services.guild_store import GuildStore

logger = logging.getLogger(__name__)

# Cog modules to load on startup.
EXTENSIONS: list[str] = [
    "rolypoly.bot.cogs.self_service",
]


class RolyPolyBot(commands.Bot):
    """Custom Bot subclass that carries project-wide state.

    Parameters
    ----------
    cfg:
        The parsed :class:`RolyPolyConfig` from ``config.yaml``.
    store:
        Guild record persistence.
    debug_guild_id:
        Guild to register commands in for development builds.
    """

    def __init__(
        self,
        cfg: RolyPolyConfig,
        store: GuildStore,
        *,
        debug_guild_id: int | None = None,
    ) -> None:
        # GUILDS            — guild cache + application commands
        # GUILD_REACTIONS   — raw reaction add/remove events
        # EMOJIS_AND_STICKERS — validating custom emoji passed to /enable
        intents = discord.Intents.none()
        intents.guilds = True
        intents.guild_reactions = True
        intents.emojis_and_stickers = True

        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            description="Self-service role enrollment by reaction",
        )

        self.cfg = cfg
        self.store = store
        self.guild_locks = GuildLocks()
        self.message_style = MessageStyle(title=cfg.message_title, color=cfg.embed_color)
        self.debug_guild_id = debug_guild_id

    # -----------------------------------------------------------------------
    # Lifecycle hooks
    # -----------------------------------------------------------------------
    async def setup_hook(self) -> None:
        """Load all cog extensions before connecting.

        A failing extension is logged and skipped.
        """
        for ext in EXTENSIONS:
            try:
                await self.load_extension(ext)
                logger.info("Loaded extension: %s", ext)
            except Exception as exc:
                logger.error("Failed to load extension %s: %s", ext, exc)

    async def on_ready(self) -> None:
        """Fired when the bot has connected and the cache is populated."""
        assert self.user is not None  # guaranteed after on_ready
        logger.info("Logged in as %s (ID: %s)", self.user.name, self.user.id)
        await self.sync_commands()

    async def sync_commands(self) -> list[discord.app_commands.AppCommand]:
        """Register the command tree with Discord.  Failures are logged."""
        try:
            if self.cfg.is_development and self.debug_guild_id is not None:
                guild = discord.Object(id=self.debug_guild_id)
                self.tree.copy_global_to(guild=guild)
                synced = await self.tree.sync(guild=guild)
                logger.info("Synced %d commands to debug guild %s", len(synced), self.debug_guild_id)
            else:
                synced = await self.tree.sync()
                logger.info("Synced %d commands globally", len(synced))
        except discord.HTTPException as exc:
            logger.error("Failed to create app command: %s", exc)
            return []
        return synced
