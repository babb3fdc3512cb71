# manages the local sqlite file holding persisted client state
import asyncio
import os.path
from contextlib import asynccontextmanager
from typing import Optional

import aiosqlite

from utils.config import DB_PATH
from utils.logger import get_logger

_logger = get_logger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS kv (
    key   TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""

_initialized = set()
_init_lock = asyncio.Lock()


async def _init_db(conn: aiosqlite.Connection) -> None:
    await conn.executescript(SCHEMA)
    await conn.commit()


@asynccontextmanager
async def connect(path: Optional[str] = None) -> aiosqlite.Connection:
    """Async context manager yielding an aiosqlite connection.

    Creates the parent directory and the schema on first use of a path.
    """
    path = path or DB_PATH
    folder = os.path.dirname(path)
    if folder:
        os.makedirs(folder, exist_ok=True)

    conn = await aiosqlite.connect(path)
    try:
        if path not in _initialized:
            async with _init_lock:
                if path not in _initialized:
                    _logger.info(f"Initializing local store at {path}...")
                    await _init_db(conn)
                    _initialized.add(path)
        yield conn
    finally:
        await conn.close()
