"""SQLite database connection for the audit history.

The database lives in ``$DATA_DIR/history.db`` (``~/.git-auditor`` by default).
The engine is created lazily and rebuilt if ``DATA_DIR`` changes between calls.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from .config import DEFAULT_DATA_DIR

logger = logging.getLogger(__name__)

DB_FILENAME = "history.db"


def get_data_dir() -> Path:
    """Get the data directory, creating it if needed."""
    data_dir = Path(os.environ.get("DATA_DIR", DEFAULT_DATA_DIR))
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


def get_db_url() -> str:
    return f"sqlite+aiosqlite:///{get_data_dir() / DB_FILENAME}"


def _enable_wal(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()


_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def get_engine() -> AsyncEngine:
    global _engine, _session_factory
    url = get_db_url()
    if _engine is not None and str(_engine.url) != url:
        # DATA_DIR moved; the old engine is left for close_db() callers to dispose.
        logger.debug("Data directory changed, opening %s", url)
        _engine = None
        _session_factory = None
    if _engine is None:
        _engine = create_async_engine(url, echo=False)
        event.listen(_engine.sync_engine, "connect", _enable_wal)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    engine = get_engine()
    if _session_factory is None:
        _session_factory = async_sessionmaker(engine, expire_on_commit=False)
    return _session_factory


async def init_db() -> None:
    """Create the history tables if they don't exist."""
    from .sqlmodels import Base

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.debug("History database ready at %s", get_data_dir() / DB_FILENAME)


async def close_db() -> None:
    """Dispose of the engine and its connection pool."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
