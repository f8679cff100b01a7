"""
rolypoly.engine.guild_config — Per-Guild Self-Service Configuration
====================================================================

A :class:`GuildConfig` owns one guild's role ↔ emoji bindings and the
pointer to its tracking message, and keeps three things in step:

1. the bindings (in memory, persisted by the caller),
2. the tracking message body (one line per binding),
3. the reactions on that message (one per bound emoji).

Remote updates are best-effort.  Every mutation returns a
:class:`SyncReport`; failures are logged here and also listed in the report
so callers and tests can see them.  Nothing is retried: a failed edit
leaves reactions untouched until the next successful mutation.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

import discord

from rolypoly.engine.emoji import Emoji, emoji_from_dict
from rolypoly.engine.role_map import RoleEmojiMap
from rolypoly.services.embeds import DEFAULT_STYLE, MessageStyle, build_tracking_payload

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SyncReport:
    """What a mutation managed to do on Discord."""

    sent: bool = False
    edited: bool = False
    added: list[Emoji] = field(default_factory=list)
    removed: list[Emoji] = field(default_factory=list)
    failures: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class GuildConfig:
    """One guild's self-service role setup.

    Parameters
    ----------
    bindings:
        Initial role ↔ emoji map.  A fresh empty map if omitted.
    channel_id, message_id:
        The tracking message, if one has been sent.  Both or neither.
    """

    def __init__(
        self,
        bindings: RoleEmojiMap | None = None,
        *,
        channel_id: int | None = None,
        message_id: int | None = None,
    ) -> None:
        if (channel_id is None) != (message_id is None):
            raise ValueError("channel_id and message_id must be set together")
        self.bindings = bindings if bindings is not None else RoleEmojiMap()
        self._channel_id = channel_id
        self._message_id = message_id

    @property
    def tracking_channel_id(self) -> int | None:
        return self._channel_id

    @property
    def tracking_message_id(self) -> int | None:
        return self._message_id

    @property
    def has_tracking_message(self) -> bool:
        return self._message_id is not None

    def get_role(self, emoji: Emoji) -> int | None:
        """Role bound to *emoji*, if any."""
        return self.bindings.role_for(emoji)

    # -----------------------------------------------------------------------
    # Mutations
    # -----------------------------------------------------------------------
    async def add_role(
        self,
        client: discord.Client,
        role_id: int,
        emoji: Emoji,
        *,
        style: MessageStyle = DEFAULT_STYLE,
    ) -> SyncReport:
        """Bind *role_id* to *emoji* (last write wins) and refresh the message.

        If *emoji* belonged to another role, that role loses its binding.
        Reactions for emoji that are no longer bound at all are cleared.
        """
        displaced = self.bindings.insert(role_id, emoji)
        stale = [old for _, old in displaced if old not in self.bindings]
        return await self._update_message(client, add=[emoji], remove=stale, style=style)

    async def remove_role(
        self,
        client: discord.Client,
        role_id: int,
        *,
        style: MessageStyle = DEFAULT_STYLE,
    ) -> SyncReport:
        """Unbind *role_id*.  A role that isn't bound is a no-op."""
        emoji = self.bindings.remove_role(role_id)
        if emoji is None:
            return SyncReport()
        return await self._update_message(client, add=[], remove=[emoji], style=style)

    async def send_message(
        self,
        client: discord.Client,
        channel_id: int,
        *,
        style: MessageStyle = DEFAULT_STYLE,
    ) -> SyncReport:
        """Post the tracking message in *channel_id* unless it already exists.

        Existence is checked with a fetch: ``NotFound`` means the message was
        deleted and a new one is posted; any other HTTP failure leaves the
        configuration alone rather than risk a duplicate.  Asking for a
        different channel than the stored one posts a fresh message there.
        """
        report = SyncReport()
        exists = await self._lookup_message(client, channel_id, report)
        if exists or exists is None:
            return report

        channel = client.get_partial_messageable(channel_id)
        try:
            message = await channel.send(**build_tracking_payload(self.generate_message(), style))
        except discord.HTTPException as exc:
            logger.error("Could not send message to channel %s: %s", channel_id, exc)
            report.failures.append(f"send: {exc}")
            return report

        self._channel_id = channel_id
        self._message_id = message.id
        report.sent = True
        logger.info("Sent tracking message %s in channel %s", message.id, channel_id)

        for emoji in self.bindings.emojis():
            await self._react(message, emoji, report)
        return report

    # -----------------------------------------------------------------------
    # Rendering
    # -----------------------------------------------------------------------
    def generate_message(self) -> str:
        """One ``<@&role>: emoji`` line per binding; empty when unbound."""
        return "".join(f"<@&{role_id}>: {emoji.render()}\n" for role_id, emoji in self.bindings)

    # -----------------------------------------------------------------------
    # Serialization
    # -----------------------------------------------------------------------
    def to_dict(self) -> dict[str, Any]:
        return {
            "channel_id": self._channel_id,
            "message_id": self._message_id,
            "roles": [
                {"role_id": role_id, "emoji": emoji.to_dict()}
                for role_id, emoji in self.bindings
            ],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GuildConfig:
        bindings = RoleEmojiMap()
        for entry in data.get("roles", []):
            bindings.insert(int(entry["role_id"]), emoji_from_dict(entry["emoji"]))

        channel_id = data.get("channel_id")
        message_id = data.get("message_id")
        return cls(
            bindings,
            channel_id=int(channel_id) if channel_id is not None else None,
            message_id=int(message_id) if message_id is not None else None,
        )

    def __repr__(self) -> str:
        return (
            f"<GuildConfig bindings={len(self.bindings)} "
            f"channel_id={self._channel_id} message_id={self._message_id}>"
        )

    # -----------------------------------------------------------------------
    # Internals
    # -----------------------------------------------------------------------
    async def _update_message(
        self,
        client: discord.Client,
        *,
        add: Iterable[Emoji],
        remove: Iterable[Emoji],
        style: MessageStyle,
    ) -> SyncReport:
        report = SyncReport()
        if self._channel_id is None or self._message_id is None:
            return report

        message = client.get_partial_messageable(self._channel_id).get_partial_message(
            self._message_id
        )
        try:
            await message.edit(**build_tracking_payload(self.generate_message(), style))
        except discord.HTTPException as exc:
            logger.error("Could not edit message for channel %s: %s", self._channel_id, exc)
            report.failures.append(f"edit: {exc}")
            return report
        report.edited = True

        for emoji in add:
            await self._react(message, emoji, report)

        for emoji in remove:
            try:
                await message.clear_reaction(emoji.to_reaction())
            except discord.HTTPException as exc:
                logger.error(
                    "Could not remove reactions to message for channel %s: %s",
                    self._channel_id, exc,
                )
                report.failures.append(f"clear_reaction {emoji.render()}: {exc}")
            else:
                report.removed.append(emoji)
        return report

    async def _react(
        self,
        message: discord.PartialMessage | discord.Message,
        emoji: Emoji,
        report: SyncReport,
    ) -> None:
        try:
            await message.add_reaction(emoji.to_reaction())
        except discord.HTTPException as exc:
            logger.error(
                "Could not react to message %s with %s: %s", message.id, emoji.render(), exc,
            )
            report.failures.append(f"add_reaction {emoji.render()}: {exc}")
        else:
            report.added.append(emoji)

    async def _lookup_message(
        self, client: discord.Client, channel_id: int, report: SyncReport,
    ) -> bool | None:
        """``True`` if the tracking message is live in *channel_id*,
        ``False`` if there is none there, ``None`` if the fetch failed
        for some other reason.
        """
        if self._message_id is None or self._channel_id != channel_id:
            return False
        try:
            await client.get_partial_messageable(channel_id).fetch_message(self._message_id)
        except discord.NotFound:
            logger.info(
                "Tracking message %s in channel %s is gone; posting a new one",
                self._message_id, channel_id,
            )
            return False
        except discord.HTTPException as exc:
            logger.error(
                "Could not check message %s in channel %s: %s",
                self._message_id, channel_id, exc,
            )
            report.failures.append(f"fetch: {exc}")
            return None
        return True
