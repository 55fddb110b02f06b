from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

This module provides factory functions for creating session store backends from configuration.
"""

from ..config import GatewayConfig
from .store.base import SessionStore
from .store.in_memory import InMemorySessionStore
from .store.sqlite import SQLiteSessionStore


def create_session_store(config: GatewayConfig) -> SessionStore:
    """Create a session store for `config.session_backend`."""
    backend = config.session_backend.strip().lower()

    if backend in ("mem", "memory", "inmemory", "in_memory"):
        return InMemorySessionStore()

    if backend in ("sqlite", "sqlite3"):
        return SQLiteSessionStore(path=config.sqlite_path)

    raise ValueError(f"Unknown RUNRELAY_SESSION_BACKEND: {backend}")


def create_session_store_from_env() -> SessionStore:
    return create_session_store(GatewayConfig.from_env())
