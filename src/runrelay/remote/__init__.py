from __future__ import annotations

"""Remote execution service contract and the OpenAI Assistants adapter."""

from .openai import OpenAIAssistantsService
from .types import (
    ACTION_SUBMIT_TOOL_OUTPUTS,
    STATUS_CANCELLED,
    STATUS_CANCELLING,
    STATUS_COMPLETED,
    STATUS_EXPIRED,
    STATUS_FAILED,
    STATUS_IN_PROGRESS,
    STATUS_QUEUED,
    STATUS_REQUIRES_ACTION,
    RemoteExecutionService,
    RemoteRun,
    ToolCallRequest,
    ToolOutput,
    extract_latest_text,
)

__all__ = [
    "ACTION_SUBMIT_TOOL_OUTPUTS",
    "STATUS_CANCELLED",
    "STATUS_CANCELLING",
    "STATUS_COMPLETED",
    "STATUS_EXPIRED",
    "STATUS_FAILED",
    "STATUS_IN_PROGRESS",
    "STATUS_QUEUED",
    "STATUS_REQUIRES_ACTION",
    "OpenAIAssistantsService",
    "RemoteExecutionService",
    "RemoteRun",
    "ToolCallRequest",
    "ToolOutput",
    "extract_latest_text",
]
