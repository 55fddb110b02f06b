from __future__ import annotations

"""In-process session store implementation for local development and tests."""

import asyncio
import dataclasses
from typing import Optional

from ...errors import SessionStoreError
from ..models import Session
from .base import SessionStore


class InMemorySessionStore(SessionStore):
    def __init__(self) -> None:
        super().__init__()
        self._lock = asyncio.Lock()
        self._sessions_by_id: dict[str, Session] = {}
        self._ids_by_identity: dict[tuple[str, str], str] = {}

    async def get_by_identity(self, platform: str, username: str) -> Optional[Session]:
        self._ensure_setup()
        async with self._lock:
            session_id = self._ids_by_identity.get((platform, username))
            return self._sessions_by_id.get(session_id) if session_id is not None else None

    async def get(self, session_id: str) -> Optional[Session]:
        self._ensure_setup()
        async with self._lock:
            return self._sessions_by_id.get(session_id)

    async def add(self, session: Session) -> None:
        self._ensure_setup()
        identity = (session.platform, session.username)
        async with self._lock:
            if session.session_id in self._sessions_by_id:
                raise SessionStoreError(f"Session already exists: {session.session_id}")
            if identity in self._ids_by_identity:
                raise SessionStoreError(
                    f"A session already exists for {session.username} on {session.platform}"
                )
            self._sessions_by_id[session.session_id] = session
            self._ids_by_identity[identity] = session.session_id

    async def update_status(self, session_id: str, status: str) -> bool:
        self._ensure_setup()
        async with self._lock:
            session = self._sessions_by_id.get(session_id)
            if session is None:
                return False
            self._sessions_by_id[session_id] = dataclasses.replace(session, status=status)
            return True
