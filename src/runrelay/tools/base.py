from __future__ import annotations

"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

This module defines the types and base class for tool handlers the run engine can dispatch to.
"""

import asyncio
import functools
import inspect
from dataclasses import dataclass, field
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Generic,
    Optional,
    Type,
    TypeVar,
    Union,
)

from pydantic import BaseModel, ValidationError

from .errors import ToolExecutionError, ToolValidationError


ArgsT = TypeVar("ArgsT", bound=BaseModel)
ReturnT = TypeVar("ReturnT")

AsyncToolFn = Callable[..., Awaitable[Any]]
SyncToolFn = Callable[..., Any]
ToolFn = Union[AsyncToolFn, SyncToolFn]


@dataclass(frozen=True, slots=True)
class ToolSpec:
    """
    Stable tool metadata used for registry listing + assistant-facing export.
    """

    name: str
    description: str
    parameters_schema: Dict[str, Any]  # JSON Schema for the tool's arguments


@dataclass(frozen=True, slots=True)
class ToolResult(Generic[ReturnT]):
    """
    Standardized result object returned by `Tool.call`.

    The run engine only submits an output when `success` is true; a failed result
    is logged and the tool call is left without an output.
    """

    output: Optional[ReturnT] = None
    success: bool = True
    error_message: Optional[str] = None
    tool_name: Optional[str] = None
    call_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


def as_async(fn: ToolFn) -> AsyncToolFn:
    """
    Utility function to convert a synchronous function into an asynchronous one.
    This allows the registry and the run engine to treat all handlers as async.
    """
    if inspect.iscoroutinefunction(fn):
        return fn  # type: ignore[return-value]

    async def _wrapped(*args: Any, **kwargs: Any) -> Any:
        # run sync function in threadpool
        return await asyncio.to_thread(functools.partial(fn, *args, **kwargs))

    return _wrapped


def _check_signature(fn: Callable[..., Any]) -> None:
    """
    Handlers take exactly one positional argument: the decoded arguments
    (a dict, or an instance of the tool's args model).
    """
    sig = inspect.signature(fn)
    params = list(sig.parameters.values())

    if any(p.kind in (p.VAR_KEYWORD, p.VAR_POSITIONAL) for p in params):
        raise ToolValidationError(
            f"Tool function '{getattr(fn, '__name__', 'unknown')}' cannot have *args or **kwargs."
        )

    required = [p for p in params if p.default is p.empty]
    if len(params) < 1 or len(required) > 1:
        raise ToolValidationError(
            f"Tool function '{getattr(fn, '__name__', 'unknown')}' has invalid signature. "
            f"Expected (arguments). Got {sig}."
        )


class Tool(Generic[ArgsT, ReturnT]):
    """
    One invocable capability: `invoke(arguments) -> result`.

    When an `args_model` is given the raw argument dict is coerced through it
    before the function runs; otherwise the function receives the dict as-is.
    The spec is advertised to the assistant but never used to validate calls.
    """

    def __init__(
        self,
        *,
        spec: ToolSpec,
        fn: ToolFn,
        args_model: Optional[Type[ArgsT]] = None,
    ) -> None:
        _check_signature(fn)
        self.spec = spec
        self._original_fn = fn
        self.fn = as_async(fn)
        self.args_model = args_model

    @property
    def name(self) -> str:
        return self.spec.name

    @classmethod
    def from_callable(
        cls,
        fn: ToolFn,
        *,
        name: str | None = None,
        description: str | None = None,
    ) -> "Tool[Any, Any]":
        """Wrap a plain function exported by a tool source."""
        tool_name = name or getattr(fn, "__name__", "tool")
        doc = inspect.getdoc(fn) or ""
        tool_desc = description or (doc.splitlines()[0].strip() if doc else tool_name)
        spec = ToolSpec(
            name=tool_name,
            description=tool_desc,
            parameters_schema={"type": "object", "properties": {}},
        )
        return cls(spec=spec, fn=fn)

    def validate(self, raw_args: Dict[str, Any]) -> Any:
        if self.args_model is None:
            return raw_args
        try:
            return self.args_model.model_validate(raw_args)
        except ValidationError as e:
            raise ToolValidationError(
                f"Invalid arguments for tool '{self.spec.name}': {e}"
            ) from e

    async def invoke(self, arguments: Dict[str, Any]) -> ReturnT:
        """Run the handler, raising on invalid arguments or handler failure."""
        args = self.validate(arguments)
        try:
            return await self.fn(args)
        except Exception as e:
            raise ToolExecutionError(f"Error executing tool '{self.spec.name}': {e}") from e

    async def call(
        self,
        arguments: Dict[str, Any],
        *,
        call_id: Optional[str] = None,
    ) -> ToolResult[ReturnT]:
        """Like `invoke`, but reports failures in the returned `ToolResult`."""
        try:
            output = await self.invoke(arguments)
        except (ToolValidationError, ToolExecutionError) as e:
            return ToolResult(
                output=None,
                success=False,
                error_message=str(e),
                tool_name=self.spec.name,
                call_id=call_id,
            )

        return ToolResult(
            output=output,
            success=True,
            error_message=None,
            tool_name=self.spec.name,
            call_id=call_id,
        )
