"""
RolyPoly — Self-Service Roles for Discord
==========================================
Lets guild administrators mark roles as "self-service": members claim or
drop a role by reacting to a single bot-managed tracking message.

Package layout::

    rolypoly/
    ├── config.py          # YAML + .env → typed Python config
    ├── constants.py       # Message text, colours, option names
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine + async helper
    │   └── models.py      # GuildRecord (guild id → JSON config)
    ├── engine/
    │   ├── emoji.py       # Unicode / custom emoji variant
    │   ├── role_map.py    # Role ↔ emoji bijection
    │   ├── locks.py       # Store RW lock + per-guild asyncio locks
    │   └── guild_config.py # Binding set + tracking message reconciliation
    ├── services/
    │   ├── guild_store.py # Guild record persistence
    │   ├── embeds.py      # Tracking message payloads
    │   ├── self_service.py # /role self-service handlers
    │   └── reaction_sync.py # Reaction → role grant / revoke
    └── bot/
        ├── core.py        # Bot subclass, cog loader, command sync
        └── cogs/
            └── self_service.py # Slash commands + raw reaction listeners
"""

__version__ = "0.1.0"
