from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

Tool export utilities.

The Assistants API expects OpenAI function-tool definitions. This module turns
Tool/ToolSpec objects into those descriptor payloads.
"""

from typing import Any, Dict, Iterable, List

from .base import Tool, ToolSpec


def normalize_json_schema(schema: Dict[str, Any]) -> Dict[str, Any]:
    """
    Pydantic v2's model_json_schema() is generally usable as-is.
    We ensure it is at least an object schema with 'properties' to avoid edge cases.
    """
    if not isinstance(schema, dict):
        return {"type": "object", "properties": {}}

    out = dict(schema)
    out.setdefault("type", "object")
    out.setdefault("properties", {})
    return out


def toolspec_to_openai_tool(spec: ToolSpec) -> Dict[str, Any]:
    """
    Convert a ToolSpec into an OpenAI function-tool descriptor:
      {
        "type": "function",
        "function": {
          "name": "...",
          "description": "...",
          "parameters": { ...JSON Schema... }
        }
      }
    """
    return {
        "type": "function",
        "function": {
            "name": spec.name,
            "description": spec.description,
            "parameters": normalize_json_schema(spec.parameters_schema),
        },
    }


def tool_to_openai_tool(tool: Tool[Any, Any]) -> Dict[str, Any]:
    return toolspec_to_openai_tool(tool.spec)


def to_openai_tools(tools: Iterable[Tool[Any, Any]]) -> List[Dict[str, Any]]:
    return [tool_to_openai_tool(t) for t in tools]

