"""
rolypoly.services.embeds — Tracking message payloads
=====================================================

All tracking-message layout lives here so :class:`GuildConfig` only
supplies the rendered binding list.  The same payload shape is used for
``send`` and ``edit`` so an edit fully replaces whatever was there before.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import discord

from rolypoly.constants import (
    DEFAULT_EMBED_COLOR,
    DEFAULT_MESSAGE_TITLE,
    NO_ROLES_PLACEHOLDER,
)


@dataclass(frozen=True, slots=True)
class MessageStyle:
    """Presentation knobs for the tracking message (from ``config.yaml``)."""

    title: str = DEFAULT_MESSAGE_TITLE
    color: int = DEFAULT_EMBED_COLOR


DEFAULT_STYLE = MessageStyle()


def build_roles_embed(body: str, style: MessageStyle = DEFAULT_STYLE) -> discord.Embed:
    """Build the embed listing every role binding."""
    embed = discord.Embed(color=discord.Color(style.color))
    embed.add_field(name=style.title, value=body, inline=True)
    return embed


def build_tracking_payload(body: str, style: MessageStyle = DEFAULT_STYLE) -> dict[str, Any]:
    """Keyword arguments for ``send()`` / ``edit()`` of the tracking message.

    An empty *body* means no roles are configured: plain placeholder text
    and no embed.
    """
    if not body:
        return {"content": NO_ROLES_PLACEHOLDER, "embed": None}
    return {"content": None, "embed": build_roles_embed(body, style)}
