"""
Async SQLite connection pool with aiosqlite.

Connections run in autocommit mode; write transactions are opened explicitly
with BEGIN IMMEDIATE so the read-check-write sequences of the ledger and the
order workflow hold the database write lock from their first read.
"""

import asyncio
import sqlite3
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from partsledger.config import get_logger, get_settings
from partsledger.core.exceptions import ConcurrencyConflictError

logger = get_logger(__name__)

_LOCK_MESSAGES = ("database is locked", "database is busy", "database table is locked")


def is_lock_error(error: Exception) -> bool:
    """True for SQLite busy/locked failures."""
    return isinstance(error, sqlite3.OperationalError) and any(
        msg in str(error).lower() for msg in _LOCK_MESSAGES
    )


class ConnectionPool:
    """
    Async SQLite connection pool.

    Manages a pool of connections with configurable size.
    """

    def __init__(
        self,
        db_path: Path,
        pool_size: int = 5,
        busy_timeout: int = 30000,
    ):
        self.db_path = db_path
        self.pool_size = pool_size
        self.busy_timeout = busy_timeout

        self._pool: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue(maxsize=pool_size)
        self._connections: list[aiosqlite.Connection] = []
        self._initialized = False
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Initialize the connection pool."""
        async with self._lock:
            if self._initialized:
                return

            self.db_path.parent.mkdir(parents=True, exist_ok=True)

            for _ in range(self.pool_size):
                conn = await self._create_connection()
                self._connections.append(conn)
                await self._pool.put(conn)

            self._initialized = True
            logger.info(
                "connection_pool_initialized",
                db_path=str(self.db_path),
                pool_size=self.pool_size,
            )

    async def _create_connection(self) -> aiosqlite.Connection:
        """Create a new database connection with optimized settings."""
        conn = await aiosqlite.connect(self.db_path, isolation_level=None)

        # WAL lets readers proceed while a writer holds the lock
        await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute("PRAGMA synchronous=NORMAL")
        await conn.execute(f"PRAGMA busy_timeout={self.busy_timeout}")
        await conn.execute("PRAGMA foreign_keys=ON")

        conn.row_factory = aiosqlite.Row

        return conn

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Acquire a connection from the pool.

        Usage:
            async with pool.acquire() as conn:
                await conn.execute(...)
        """
        if not self._initialized:
            await self.initialize()

        conn = await self._pool.get()
        try:
            yield conn
        finally:
            await self._pool.put(conn)

    @asynccontextmanager
    async def transaction(self, operation: str = "transaction") -> AsyncIterator[aiosqlite.Connection]:
        """
        Acquire a connection inside a write-locked transaction.

        Commits on success, rolls back on any exception. Lock timeouts are
        raised as ConcurrencyConflictError.
        """
        async with self.acquire() as conn:
            try:
                await conn.execute("BEGIN IMMEDIATE")
            except sqlite3.OperationalError as e:
                if is_lock_error(e):
                    logger.warning("transaction_lock_timeout", operation=operation, error=str(e))
                    raise ConcurrencyConflictError(operation, str(e)) from e
                raise

            try:
                yield conn
                await conn.commit()
            except Exception as e:
                await conn.rollback()
                if is_lock_error(e):
                    logger.warning("transaction_lock_timeout", operation=operation, error=str(e))
                    raise ConcurrencyConflictError(operation, str(e)) from e
                raise

    async def close(self) -> None:
        """Close all connections in the pool."""
        async with self._lock:
            for conn in self._connections:
                await conn.close()
            self._connections.clear()
            self._pool = asyncio.Queue(maxsize=self.pool_size)
            self._initialized = False
            logger.info("connection_pool_closed")


# Global connection pool
_pool: ConnectionPool | None = None


async def get_pool() -> ConnectionPool:
    """Get or create the global connection pool."""
    global _pool
    if _pool is None:
        settings = get_settings()
        _pool = ConnectionPool(
            db_path=settings.storage.db_path,
            pool_size=settings.storage.pool_size,
            busy_timeout=settings.storage.busy_timeout,
        )
        await _pool.initialize()
    return _pool


async def close_pool() -> None:
    """Close the global connection pool."""
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None


@asynccontextmanager
async def get_connection() -> AsyncIterator[aiosqlite.Connection]:
    """
    Get a connection from the global pool.

    Convenience wrapper for reads.
    """
    pool = await get_pool()
    async with pool.acquire() as conn:
        yield conn


@asynccontextmanager
async def get_transaction(operation: str = "transaction") -> AsyncIterator[aiosqlite.Connection]:
    """
    Get a connection with a write-locked transaction.

    Convenience wrapper for transactional operations.
    """
    pool = await get_pool()
    async with pool.transaction(operation) as conn:
        yield conn
