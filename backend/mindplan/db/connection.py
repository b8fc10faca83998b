"""Async SQLite connection wrapper with WAL mode, schema initialization and transactions."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import aiosqlite

from mindplan.db.schema import SCHEMA_SQL, run_migrations


class Database:
    """Thin async wrapper around aiosqlite with WAL mode and auto-schema.

    Statements run outside ``transaction()`` commit immediately. Inside a
    transaction they are held until the block exits, then committed together
    (or rolled back if the block raised).
    """

    def __init__(self, connection: aiosqlite.Connection) -> None:
        self._conn = connection
        self._write_lock = asyncio.Lock()
        self._tx_owner: asyncio.Task | None = None

    @classmethod
    async def connect(cls, path: str = "mindplan.db") -> "Database":
        """Create a connection with WAL mode, foreign keys, and schema init."""
        conn = await aiosqlite.connect(path)
        conn.row_factory = aiosqlite.Row
        await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute("PRAGMA foreign_keys=ON")
        await conn.execute("PRAGMA busy_timeout=5000")
        db = cls(conn)
        await db._ensure_schema()
        return db

    async def _ensure_schema(self) -> None:
        """Create tables if they don't exist, then add late columns. Idempotent."""
        await self._conn.executescript(SCHEMA_SQL)
        await self._conn.commit()
        await run_migrations(self)

    @property
    def in_transaction(self) -> bool:
        return self._tx_owner is not None and self._tx_owner is asyncio.current_task()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Run the enclosed statements as one atomic unit.

        A transaction opened while the current task already holds one joins
        the outer transaction.
        """
        if self.in_transaction:
            yield
            return

        async with self._write_lock:
            self._tx_owner = asyncio.current_task()
            try:
                yield
            except BaseException:
                await self._conn.rollback()
                raise
            else:
                await self._conn.commit()
            finally:
                self._tx_owner = None

    async def execute(self, sql: str, params: tuple | None = None) -> aiosqlite.Cursor:
        """Execute a single SQL statement."""
        if self.in_transaction:
            return await self._conn.execute(sql, params or ())
        async with self._write_lock:
            cursor = await self._conn.execute(sql, params or ())
            await self._conn.commit()
            return cursor

    async def fetchone(self, sql: str, params: tuple | None = None) -> aiosqlite.Row | None:
        """Execute and return a single row."""
        cursor = await self._conn.execute(sql, params or ())
        return await cursor.fetchone()

    async def fetchall(self, sql: str, params: tuple | None = None) -> list[aiosqlite.Row]:
        """Execute and return all rows."""
        cursor = await self._conn.execute(sql, params or ())
        return list(await cursor.fetchall())

    async def close(self) -> None:
        """Close the database connection."""
        await self._conn.close()
