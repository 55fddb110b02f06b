from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

runrelay tools public API.

This package exposes:
- Core tool types (Tool, ToolSpec, ToolResult)
- The @tool decorator for authoring handlers quickly
- ToolSource / ToolRegistry for explicit, startup-time discovery
- Export helpers for OpenAI function-tool descriptors
"""

from .base import Tool, ToolFn, ToolResult, ToolSpec, as_async
from .decorator import tool
from .errors import (
    ToolAlreadyRegisteredError,
    ToolError,
    ToolExecutionError,
    ToolNotFoundError,
    ToolRegistryFrozenError,
    ToolSourceError,
    ToolValidationError,
)
from .export import (
    normalize_json_schema,
    to_openai_tools,
    tool_to_openai_tool,
    toolspec_to_openai_tool,
)
from .registry import (
    ToolRegistry,
    ToolRegistryEntry,
    ToolSource,
    discover,
    load_source,
)

__all__ = [
    # core
    "Tool",
    "ToolSpec",
    "ToolResult",
    "ToolFn",
    "as_async",
    # decorators
    "tool",
    # registry
    "ToolRegistry",
    "ToolRegistryEntry",
    "ToolSource",
    "discover",
    "load_source",
    # export
    "normalize_json_schema",
    "to_openai_tools",
    "tool_to_openai_tool",
    "toolspec_to_openai_tool",
    # errors
    "ToolError",
    "ToolAlreadyRegisteredError",
    "ToolExecutionError",
    "ToolNotFoundError",
    "ToolRegistryFrozenError",
    "ToolSourceError",
    "ToolValidationError",
]
