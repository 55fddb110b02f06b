from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

runrelay: a conversational-agent gateway that drives hosted assistant runs,
dispatches their tool calls to local handlers and returns plain-text answers.
"""

from .config import GatewayConfig, configure_logging
from .engine import (
    POLL_INTERVAL_S,
    RUN_DEADLINE_S,
    Clock,
    MonotonicClock,
    Run,
    RunOutcome,
    RunPoller,
    RunState,
    advance_run,
)
from .errors import (
    InvalidRunTransitionError,
    MalformedMessageError,
    MissingIdentifierError,
    RemoteConfigurationError,
    RemoteServiceError,
    RunRelayError,
    SessionStoreError,
)
from .gateway import ConversationGateway, SessionStart, build_gateway
from .sanitize import sanitize

__all__ = [
    "GatewayConfig",
    "configure_logging",
    "POLL_INTERVAL_S",
    "RUN_DEADLINE_S",
    "Clock",
    "MonotonicClock",
    "Run",
    "RunOutcome",
    "RunPoller",
    "RunState",
    "advance_run",
    "ConversationGateway",
    "SessionStart",
    "build_gateway",
    "sanitize",
    "RunRelayError",
    "MissingIdentifierError",
    "InvalidRunTransitionError",
    "RemoteServiceError",
    "RemoteConfigurationError",
    "MalformedMessageError",
    "SessionStoreError",
]
