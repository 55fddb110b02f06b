from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

Session tracking: the (platform, username) -> remote thread mapping kept by the gateway.
"""

from .factory import create_session_store, create_session_store_from_env
from .models import DEFAULT_PLATFORM, DEFAULT_USERNAME, STATUS_ARRIVED, Session, now_ms
from .store import InMemorySessionStore, SessionStore, SQLiteSessionStore

__all__ = [
    "DEFAULT_PLATFORM",
    "DEFAULT_USERNAME",
    "STATUS_ARRIVED",
    "Session",
    "now_ms",
    "SessionStore",
    "InMemorySessionStore",
    "SQLiteSessionStore",
    "create_session_store",
    "create_session_store_from_env",
]
