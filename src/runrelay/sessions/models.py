from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

This module defines the session record kept for each (platform, username) pair.
"""

import time
from dataclasses import dataclass, field

DEFAULT_PLATFORM = "Not Specified"
DEFAULT_USERNAME = "Not Specified"
STATUS_ARRIVED = "Arrived"


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True, slots=True)
class Session:
    """A conversation identity bound to one remote thread."""

    session_id: str
    platform: str = DEFAULT_PLATFORM
    username: str = DEFAULT_USERNAME
    status: str = STATUS_ARRIVED
    timestamp: int = field(default_factory=now_ms)
