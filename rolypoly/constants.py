"""
rolypoly.constants — Shared Constants
======================================

Single source of truth for user-facing text and tracking message
presentation.  Import from here instead of duplicating in cogs and services.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Tracking message
# ---------------------------------------------------------------------------
DEFAULT_MESSAGE_TITLE = "Self-Assignable Roles"
DEFAULT_EMBED_COLOR = 0x546E7A  # discord.Color.darker_grey()
NO_ROLES_PLACEHOLDER = "No configured roles to display"

# ---------------------------------------------------------------------------
# Command replies (always ephemeral)
# ---------------------------------------------------------------------------
REPLY_ENABLED = "Enabled {role} for self-service access"
REPLY_DISABLED = "Disabled {role} for self-service access"
REPLY_UNKNOWN_EMOJI = "Could not find emoji: {text}"
REPLY_SENDING = "Sending a message to #{channel} if one does not already exist"
REPLY_NO_ROLES = "You have not configured any roles"
REPLY_COMMAND_FAILED = "Something went wrong while running that command."

# Audit-log reason attached to role grants / revocations
ROLE_CHANGE_REASON = "Self-service role reaction"

# Default on-disk store
DEFAULT_DATABASE_URL = "sqlite:///roly-poly-rolies.db"
