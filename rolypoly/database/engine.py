"""
rolypoly.database.engine — Database Connection & Async Helper
==============================================================

Discord bots run on an ``asyncio`` event loop while SQLAlchemy is
synchronous.  Cogs and services never touch the engine directly from a
coroutine; they go through :func:`run_db`, which ships the sync call to the
default thread pool via ``asyncio.to_thread()``.

Usage::

    from rolypoly.database.engine import create_db_engine, init_db, run_db

    engine = create_db_engine()          # DATABASE_URL or ./roly-poly-rolies.db
    init_db(engine)                      # CREATE TABLE IF NOT EXISTS …

    # Inside an async Cog method:
    cfg = await run_db(store.get, guild_id)
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable
from contextlib import contextmanager
from typing import ParamSpec, TypeVar

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session

from rolypoly.constants import DEFAULT_DATABASE_URL
from rolypoly.database.models import Base

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


# ---------------------------------------------------------------------------
# Engine creation
# ---------------------------------------------------------------------------
def create_db_engine(url: str | None = None) -> Engine:
    """Build a SQLAlchemy :class:`Engine`.

    Resolution order for the URL: the *url* argument, the ``DATABASE_URL``
    env var, then a SQLite file in the working directory.

    SQLite connections are opened with ``check_same_thread=False`` because
    :func:`run_db` executes queries on pool threads.
    """
    url = url or os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL

    kwargs: dict = {"echo": False}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs.update(
            pool_size=5,
            max_overflow=10,
            pool_pre_ping=True,   # Reconnect stale connections automatically
            pool_timeout=10,
            pool_recycle=3600,
        )

    engine = create_engine(url, **kwargs)
    logger.info("Database engine created → %s", engine.url.render_as_string(hide_password=True))
    return engine


# ---------------------------------------------------------------------------
# Schema initialization
# ---------------------------------------------------------------------------
def init_db(engine: Engine) -> None:
    """Create all tables defined in :mod:`rolypoly.database.models`.

    Safe to call on every startup — ``CREATE TABLE IF NOT EXISTS`` under
    the hood.
    """
    Base.metadata.create_all(engine)
    logger.info("Database tables verified / created.")


# ---------------------------------------------------------------------------
# Session helper
# ---------------------------------------------------------------------------
@contextmanager
def get_session(engine: Engine):
    """Yield a :class:`Session` that auto-commits on success and rolls back
    on exception.
    """
    session = Session(engine)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


# ---------------------------------------------------------------------------
# Async bridge
# ---------------------------------------------------------------------------
async def run_db(func: Callable[P, T], *args: P.args, **kwargs: P.kwargs) -> T:
    """Run a **synchronous** database function on a background thread.

    Every store call made from a coroutine should go through this wrapper::

        cfg = await run_db(store.get, guild_id)

    Parameters
    ----------
    func:
        Any sync callable.
    *args, **kwargs:
        Forwarded to *func*.

    Returns
    -------
    T
        Whatever *func* returns.
    """
    return await asyncio.to_thread(func, *args, **kwargs)
