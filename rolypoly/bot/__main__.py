"""
rolypoly.bot.__main__ — Entry point for ``python -m rolypoly.bot``
==================================================================

Wiring:
1. Load .env (secrets).
2. Load config.yaml (soft settings).
3. Resolve the token and, for development, the debug guild.
4. Create the SQLAlchemy engine and ensure tables exist.
5. Create the RolyPolyBot and hand it config + store.
6. Start the bot (blocking — runs the asyncio event loop).
"""

from __future__ import annotations

import logging
import sys

from dotenv import load_dotenv

from rolypoly.bot.core import RolyPolyBot
from rolypoly.config import ConfigError, load_config, load_debug_guild_id, load_token
from rolypoly.database.engine import create_db_engine, init_db
from rolypoly.services.guild_store import GuildStore

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("rolypoly")


def main() -> None:
    """Bootstrap and run the RolyPoly bot."""

    # 1. Environment variables (secrets).
    load_dotenv()

    # 2-3. Configuration.  Anything missing here is fatal.
    try:
        cfg = load_config()
        logging.getLogger().setLevel(cfg.log_level)
        token = load_token()
        debug_guild_id = load_debug_guild_id() if cfg.is_development else None
    except (ConfigError, FileNotFoundError, ValueError) as exc:
        logger.critical("%s", exc)
        sys.exit(1)
    logger.info("Config loaded — environment: %s", cfg.environment)

    # 4. Database.
    engine = create_db_engine(cfg.database_url)
    init_db(engine)
    store = GuildStore(engine)
    logger.info("%d guild configurations on record", len(store.guild_ids()))

    # 5. Bot.
    bot = RolyPolyBot(cfg=cfg, store=store, debug_guild_id=debug_guild_id)

    # 6. Run (blocks until Ctrl+C or SIGTERM).
    logger.info("Starting RolyPoly bot…")
    try:
        bot.run(token, log_handler=None)
    except KeyboardInterrupt:
        logger.info("Shutting down gracefully…")


if __name__ == "__main__":
    main()
