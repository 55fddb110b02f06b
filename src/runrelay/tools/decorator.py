from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

This module provides the @tool decorator for defining tool handlers in a concise way.
"""

import inspect
from typing import Any, Callable, Type, TypeVar

from pydantic import BaseModel

from .base import Tool, ToolFn, ToolSpec


ArgsT = TypeVar("ArgsT", bound=BaseModel)
ReturnT = TypeVar("ReturnT")


def _default_description(fn: Callable[..., Any], fallback: str) -> str:
    doc = inspect.getdoc(fn) or ""
    first_line = doc.splitlines()[0].strip() if doc else ""
    return first_line or fallback


def tool(
    *,
    args_model: Type[ArgsT] | None = None,
    name: str | None = None,
    description: str | None = None,
) -> Callable[[ToolFn], Tool[ArgsT, ReturnT]]:
    """
    Create a Tool from a sync/async function and an optional Pydantic v2 args model.

    The function takes a single argument:
      def/async def fn(args: ArgsModel) -> Any     (with args_model)
      def/async def fn(arguments: dict) -> Any     (without)

    The advertised parameter schema comes from `args_model.model_json_schema()`.
    Give model fields defaults when the handler should still run on the empty
    argument set the engine falls back to for undecodable arguments.
    """

    def decorator(fn: ToolFn) -> Tool[ArgsT, ReturnT]:
        tool_name = name or getattr(fn, "__name__", "tool")
        tool_desc = description or _default_description(fn, tool_name)

        if args_model is not None:
            schema = args_model.model_json_schema()
        else:
            schema = {"type": "object", "properties": {}}
        spec = ToolSpec(name=tool_name, description=tool_desc, parameters_schema=schema)

        return Tool(spec=spec, fn=fn, args_model=args_model)

    return decorator
