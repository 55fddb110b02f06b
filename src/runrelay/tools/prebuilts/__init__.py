from __future__ import annotations

"""Built-in tool sources shipped with the gateway."""

from typing import TYPE_CHECKING

from .conversation_summary import (
    ConversationSummaryArgs,
    build_conversation_summary_payload,
    build_conversation_summary_source,
    build_conversation_summary_tool,
)
from .current_time import CurrentTimeArgs, build_current_time_source, build_current_time_tool

if TYPE_CHECKING:
    from ...config import GatewayConfig
    from ..registry import ToolSource


def build_default_sources(config: "GatewayConfig") -> list["ToolSource"]:
    return [
        build_conversation_summary_source(config.webhook_url, timeout_s=config.request_timeout_s),
        build_current_time_source(config.world_time_base_url, timeout_s=config.request_timeout_s),
    ]


__all__ = [
    "ConversationSummaryArgs",
    "CurrentTimeArgs",
    "build_conversation_summary_payload",
    "build_conversation_summary_source",
    "build_conversation_summary_tool",
    "build_current_time_source",
    "build_current_time_tool",
    "build_default_sources",
]
