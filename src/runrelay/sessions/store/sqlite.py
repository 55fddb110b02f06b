from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

This module provides a SQLite session backend.
"""

import sqlite3
from typing import Optional

import aiosqlite

from ...errors import SessionStoreError
from ..models import Session
from .base import SessionStore


class SQLiteSessionStore(SessionStore):
    """Persistent local session backend backed by SQLite."""

    def __init__(self, path: str = "runrelay_sessions.sqlite3") -> None:
        super().__init__()
        self.path = path
        self._connection: aiosqlite.Connection | None = None

    async def setup(self) -> None:
        self._connection = await aiosqlite.connect(self.path)
        self._connection.row_factory = aiosqlite.Row
        await self._connection.execute("PRAGMA journal_mode=WAL;")
        await self._connection.execute("PRAGMA synchronous=NORMAL;")
        await self._create_tables()
        await self._connection.commit()
        await super().setup()

    async def close(self) -> None:
        if self._connection is not None:
            await self._connection.close()
            self._connection = None
        await super().close()

    def _db(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise RuntimeError(
                "SQLiteSessionStore is not initialized. Call setup() first."
            )
        return self._connection

    async def _create_tables(self) -> None:
        db = self._db()
        await db.execute(
            """
            CREATE TABLE IF NOT EXISTS sessions (
              session_id TEXT PRIMARY KEY,
              platform TEXT NOT NULL,
              username TEXT NOT NULL,
              status TEXT NOT NULL,
              timestamp INTEGER NOT NULL,
              UNIQUE(platform, username)
            );
            """,
        )

    @staticmethod
    def _row_to_session(row: aiosqlite.Row) -> Session:
        return Session(
            session_id=row["session_id"],
            platform=row["platform"],
            username=row["username"],
            status=row["status"],
            timestamp=int(row["timestamp"]),
        )

    async def get_by_identity(self, platform: str, username: str) -> Optional[Session]:
        self._ensure_setup()
        db = self._db()
        async with db.execute(
            "SELECT * FROM sessions WHERE platform = ? AND username = ?",
            (platform, username),
        ) as cur:
            row = await cur.fetchone()
        return self._row_to_session(row) if row is not None else None

    async def get(self, session_id: str) -> Optional[Session]:
        self._ensure_setup()
        db = self._db()
        async with db.execute(
            "SELECT * FROM sessions WHERE session_id = ?", (session_id,)
        ) as cur:
            row = await cur.fetchone()
        return self._row_to_session(row) if row is not None else None

    async def add(self, session: Session) -> None:
        self._ensure_setup()
        db = self._db()
        try:
            await db.execute(
                """
                INSERT INTO sessions (session_id, platform, username, status, timestamp)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    session.session_id,
                    session.platform,
                    session.username,
                    session.status,
                    session.timestamp,
                ),
            )
        except sqlite3.IntegrityError as e:
            await db.rollback()
            raise SessionStoreError(f"Cannot add session {session.session_id}: {e}") from e
        await db.commit()

    async def update_status(self, session_id: str, status: str) -> bool:
        self._ensure_setup()
        db = self._db()
        cur = await db.execute(
            "UPDATE sessions SET status = ? WHERE session_id = ?", (status, session_id)
        )
        await db.commit()
        return cur.rowcount > 0
