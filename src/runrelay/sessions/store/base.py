from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

This module defines the abstract interface for session store backends.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..models import Session


class SessionStore(ABC):
    """
    Base contract for session persistence.

    The run engine never touches a store; only the gateway does, to reuse a
    session for a returning user and to record run outcomes.
    """

    def __init__(self) -> None:
        self._is_setup = False

    @property
    def is_setup(self) -> bool:
        return self._is_setup

    async def setup(self) -> None:
        """Initialize backend resources."""
        self._is_setup = True

    async def close(self) -> None:
        """Release backend resources."""
        self._is_setup = False

    async def __aenter__(self) -> "SessionStore":
        await self.setup()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _ensure_setup(self) -> None:
        if not self._is_setup:
            raise RuntimeError(
                "SessionStore is not initialized. Call setup() or use `async with`."
            )

    @abstractmethod
    async def get_by_identity(self, platform: str, username: str) -> Optional[Session]:
        """Return the session stored for a platform/username pair."""

    @abstractmethod
    async def get(self, session_id: str) -> Optional[Session]:
        """Return one session by id."""

    @abstractmethod
    async def add(self, session: Session) -> None:
        """Persist a new session. Raises SessionStoreError if the id or identity is taken."""

    @abstractmethod
    async def update_status(self, session_id: str, status: str) -> bool:
        """Set the status of a session. Returns False when the session is unknown."""
