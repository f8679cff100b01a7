"""
rolypoly.engine.role_map — Role ↔ Emoji Bijection
==================================================

Two synchronized dicts so both lookups are O(1): the reaction listener
resolves emoji → role, the commands resolve role → emoji.  Every insert
evicts whatever pairs would break uniqueness in either direction.
"""

from __future__ import annotations

from collections.abc import Iterator

from rolypoly.engine.emoji import Emoji


class RoleEmojiMap:
    """A one-to-one mapping of role ids to emoji."""

    def __init__(self) -> None:
        self._by_role: dict[int, Emoji] = {}
        self._by_emoji: dict[Emoji, int] = {}

    def insert(self, role_id: int, emoji: Emoji) -> list[tuple[int, Emoji]]:
        """Bind *role_id* to *emoji* and return the pairs that were displaced.

        A displaced pair is either the role's previous binding or another
        role that held *emoji*.  Re-inserting an identical pair displaces
        nothing.
        """
        displaced: list[tuple[int, Emoji]] = []

        old_emoji = self._by_role.get(role_id)
        if old_emoji is not None and old_emoji == emoji:
            # Same binding; refresh the stored value (a custom emoji may
            # have been renamed) without reporting it as displaced.
            self._by_role[role_id] = emoji
            del self._by_emoji[old_emoji]
            self._by_emoji[emoji] = role_id
            return displaced

        if old_emoji is not None:
            del self._by_emoji[old_emoji]
            del self._by_role[role_id]
            displaced.append((role_id, old_emoji))

        other_role = self._by_emoji.get(emoji)
        if other_role is not None:
            old = self._by_role.pop(other_role)
            del self._by_emoji[emoji]
            displaced.append((other_role, old))

        self._by_role[role_id] = emoji
        self._by_emoji[emoji] = role_id
        return displaced

    def remove_role(self, role_id: int) -> Emoji | None:
        """Drop the binding for *role_id*, returning its emoji if it had one."""
        emoji = self._by_role.pop(role_id, None)
        if emoji is not None:
            del self._by_emoji[emoji]
        return emoji

    def role_for(self, emoji: Emoji) -> int | None:
        return self._by_emoji.get(emoji)

    def emoji_for(self, role_id: int) -> Emoji | None:
        return self._by_role.get(role_id)

    def emojis(self) -> list[Emoji]:
        return list(self._by_role.values())

    def __contains__(self, emoji: object) -> bool:
        return emoji in self._by_emoji

    def __iter__(self) -> Iterator[tuple[int, Emoji]]:
        return iter(list(self._by_role.items()))

    def __len__(self) -> int:
        return len(self._by_role)

    def __bool__(self) -> bool:
        return bool(self._by_role)

    def __repr__(self) -> str:
        return f"<RoleEmojiMap bindings={len(self)}>"
