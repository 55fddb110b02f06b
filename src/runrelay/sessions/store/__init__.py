from __future__ import annotations

from .base import SessionStore
from .in_memory import InMemorySessionStore
from .sqlite import SQLiteSessionStore

__all__ = ["SessionStore", "InMemorySessionStore", "SQLiteSessionStore"]
