"""
rolypoly.engine.emoji — Unicode / Custom Emoji Variant
=======================================================

A binding's emoji is one of two shapes:

* :class:`UnicodeEmoji` — a standard emoji such as ``🎉``.
* :class:`CustomEmoji` — a guild emoji identified by its snowflake, with the
  name and animated flag needed to render it (``<:name:id>`` / ``<a:name:id>``).

Custom emoji compare and hash by id only; Discord reports a renamed emoji
under its new name and the binding must still match.
"""

from __future__ import annotations

import re
from collections.abc import Collection
from dataclasses import dataclass, field
from typing import Any, TypeAlias

import discord
import emoji as emoji_lib

__all__ = [
    "CustomEmoji",
    "Emoji",
    "UnicodeEmoji",
    "emoji_from_dict",
    "emoji_from_partial",
    "parse_emoji",
]

_CUSTOM_TAG_RE = re.compile(r"^<(?P<animated>a?):(?P<name>[A-Za-z0-9_]{2,32}):(?P<id>[0-9]{15,21})>$")

_VARIATION_SELECTOR = "\ufe0f"


@dataclass(frozen=True, slots=True, eq=False)
class UnicodeEmoji:
    """A standard Unicode emoji.

    Equality ignores the emoji presentation selector (U+FE0F): clients send
    ``❤`` and ``❤️`` interchangeably for the same reaction.  ``value`` keeps
    whatever form was given, for rendering.
    """

    value: str

    @property
    def key(self) -> str:
        return self.value.replace(_VARIATION_SELECTOR, "")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UnicodeEmoji):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def render(self) -> str:
        return self.value

    def to_reaction(self) -> str:
        return self.value

    def to_dict(self) -> dict[str, Any]:
        return {"type": "unicode", "value": self.value}


@dataclass(frozen=True, slots=True)
class CustomEmoji:
    """A custom guild emoji.  Identity is the snowflake ``id``."""

    id: int
    name: str = field(compare=False)
    animated: bool = field(default=False, compare=False)

    def render(self) -> str:
        prefix = "a" if self.animated else ""
        return f"<{prefix}:{self.name}:{self.id}>"

    def to_reaction(self) -> discord.PartialEmoji:
        return discord.PartialEmoji(name=self.name, id=self.id, animated=self.animated)

    def to_dict(self) -> dict[str, Any]:
        return {"type": "custom", "id": self.id, "name": self.name, "animated": self.animated}


Emoji: TypeAlias = UnicodeEmoji | CustomEmoji


# ---------------------------------------------------------------------------
# Conversions
# ---------------------------------------------------------------------------
def emoji_from_dict(data: dict[str, Any]) -> Emoji:
    """Rebuild an emoji from its :meth:`to_dict` form.

    Raises
    ------
    ValueError
        If ``type`` is neither ``unicode`` nor ``custom``.
    """
    kind = data.get("type")
    if kind == "unicode":
        return UnicodeEmoji(str(data["value"]))
    if kind == "custom":
        return CustomEmoji(
            id=int(data["id"]),
            name=str(data["name"]),
            animated=bool(data.get("animated", False)),
        )
    raise ValueError(f"Unknown emoji type: {kind!r}")


def emoji_from_partial(partial: discord.PartialEmoji) -> Emoji:
    """Convert the emoji carried by a reaction event."""
    if partial.id is not None:
        return CustomEmoji(id=partial.id, name=partial.name or "_", animated=partial.animated)
    return UnicodeEmoji(partial.name)


def parse_emoji(text: str, known_custom_ids: Collection[int]) -> Emoji | None:
    """Resolve user input from ``/role self-service enable``.

    Accepts a custom emoji tag naming an emoji the bot can see (its id must
    be in *known_custom_ids*) or exactly one Unicode emoji.  Returns ``None``
    for anything else.
    """
    text = text.strip()
    if not text:
        return None

    if text.startswith("<"):
        match = _CUSTOM_TAG_RE.match(text)
        if match is None:
            return None
        emoji_id = int(match["id"])
        if emoji_id not in known_custom_ids:
            return None
        return CustomEmoji(id=emoji_id, name=match["name"], animated=bool(match["animated"]))

    if emoji_lib.is_emoji(text):
        return UnicodeEmoji(text)
    return None
