from __future__ import annotations
"""
MIT License
Copyright (c) 2026 socioy
See LICENSE file for full license text.

This module implements the ToolRegistry for runrelay.

A registry is built once at startup from an ordered set of tool sources. Each
source contributes zero-or-one descriptor (advertised to the assistant) and
zero-or-more named handlers. Sources are registered explicitly: either passed
as `ToolSource` objects, referenced by "package.module:ATTR" path, or found
through entry points. Once built, the registry is frozen and shared read-only
by every run.
"""

import importlib
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

try:
    # Python 3.10+
    from importlib import metadata as importlib_metadata
except Exception:  # pragma: no cover
    import importlib_metadata  # type: ignore

from .base import Tool, ToolFn
from .errors import (
    ToolAlreadyRegisteredError,
    ToolNotFoundError,
    ToolRegistryFrozenError,
    ToolSourceError,
)
from .export import toolspec_to_openai_tool

logger = logging.getLogger(__name__)

Handler = Union[Tool[Any, Any], ToolFn]


@dataclass(frozen=True, slots=True)
class ToolSource:
    """
    One bundle of tool definitions.

    `descriptor` is an OpenAI function-tool dict (or None when the source only
    provides handlers); `handlers` maps exported names to Tool objects or plain
    callables.
    """

    name: str
    descriptor: Optional[Dict[str, Any]] = None
    handlers: Mapping[str, Handler] = field(default_factory=dict)

    @classmethod
    def from_tools(cls, name: str, *tools: Tool[Any, Any], advertise: bool = True) -> "ToolSource":
        """Build a source whose descriptor advertises the first tool."""
        descriptor = toolspec_to_openai_tool(tools[0].spec) if (advertise and tools) else None
        return cls(name=name, descriptor=descriptor, handlers={t.spec.name: t for t in tools})


@dataclass(frozen=True, slots=True)
class ToolRegistryEntry:
    name: str
    handler: Tool[Any, Any]
    descriptor: Optional[Dict[str, Any]] = None
    source: Optional[str] = None


SourceRef = Union[ToolSource, str]


def load_source(ref: SourceRef) -> ToolSource:
    """
    Resolve a source reference into a ToolSource.

    String references use entry-point syntax, "package.module:ATTR". ATTR may be a
    ToolSource instance or a zero-argument factory returning one. Without ":ATTR"
    the module attribute `TOOL_SOURCE` is used.
    """
    if isinstance(ref, ToolSource):
        return ref
    if not isinstance(ref, str) or not ref.strip():
        raise ToolSourceError(f"Invalid tool source reference: {ref!r}")

    module_path, _, attr = ref.strip().partition(":")
    attr = attr or "TOOL_SOURCE"
    try:
        module = importlib.import_module(module_path)
    except Exception as e:
        raise ToolSourceError(f"Cannot import tool source module '{module_path}': {e}") from e

    try:
        obj = getattr(module, attr)
    except AttributeError as e:
        raise ToolSourceError(f"Tool source module '{module_path}' has no attribute '{attr}'") from e

    return _coerce_source(obj, ref)


def _coerce_source(obj: Any, ref: str) -> ToolSource:
    if isinstance(obj, ToolSource):
        return obj
    if callable(obj):
        try:
            maybe = obj()
        except Exception as e:
            raise ToolSourceError(f"Tool source factory '{ref}' failed: {e}") from e
        if isinstance(maybe, ToolSource):
            return maybe
    raise ToolSourceError(f"'{ref}' is not a ToolSource or a factory returning one")


def _as_tool(name: str, handler: Handler, source_name: str) -> Tool[Any, Any]:
    if isinstance(handler, Tool):
        return handler
    if callable(handler):
        try:
            return Tool.from_callable(handler, name=name)
        except Exception as e:
            raise ToolSourceError(f"Handler '{name}' of source '{source_name}' is not usable: {e}") from e
    raise ToolSourceError(f"Handler '{name}' of source '{source_name}' is not callable")


# ---------- ToolRegistry ----------

class ToolRegistry:
    """
    Stores tool handlers by name plus the descriptors advertised upstream.

    Lookups (`resolve`, `get`, `has`) are pure; a frozen registry rejects
    further registration so concurrent runs can read it without locking.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, ToolRegistryEntry] = {}
        self._descriptors: List[Dict[str, Any]] = []
        self._frozen = False

    # ''''''''''''''''''''''''''''''''''''''
    # Registration / discovery
    # ''''''''''''''''''''''''''''''''''''''

    @classmethod
    def discover(cls, sources: Iterable[SourceRef]) -> "ToolRegistry":
        """
        Build a frozen registry from `sources`, in order.

        Later sources overwrite earlier ones on a name collision. Any source that
        fails to load raises ToolSourceError and nothing is returned.
        """
        registry = cls()
        for ref in sources:
            registry.add_source(load_source(ref), overwrite=True)
        registry.freeze()
        logger.info(
            "Tool registry ready: %d handler(s), %d descriptor(s)",
            len(registry._entries),
            len(registry._descriptors),
        )
        return registry

    def add_source(self, source: ToolSource, *, overwrite: bool = True) -> None:
        self._ensure_mutable()
        tools = {name: _as_tool(name, h, source.name) for name, h in source.handlers.items()}

        if source.descriptor is not None:
            self._descriptors.append(dict(source.descriptor))

        for name, t in tools.items():
            if name in self._entries:
                if not overwrite:
                    raise ToolAlreadyRegisteredError(f"Tool already registered: {name}")
                logger.warning(
                    "Tool '%s' from source '%s' replaces the one from '%s'",
                    name,
                    source.name,
                    self._entries[name].source,
                )
            self._entries[name] = ToolRegistryEntry(
                name=name,
                handler=t,
                descriptor=source.descriptor,
                source=source.name,
            )

    def register(self, tool: Tool[Any, Any], *, overwrite: bool = False) -> None:
        self._ensure_mutable()
        name = tool.spec.name
        if not overwrite and name in self._entries:
            raise ToolAlreadyRegisteredError(f"Tool already registered: {name}")
        self._entries[name] = ToolRegistryEntry(name=name, handler=tool)

    def load_plugins(self, *, entry_point_group: str = "runrelay.tools") -> int:
        """
        Load ToolSource objects (or factories returning one) from Python entry points.

        Plugin pyproject.toml example:
          [project.entry-points."runrelay.tools"]
          crm = "my_pkg.tools:TOOL_SOURCE"

        Returns number of sources loaded.
        """
        self._ensure_mutable()
        eps = importlib_metadata.entry_points()
        group = eps.select(group=entry_point_group)

        loaded = 0
        for ep in group:
            try:
                obj = ep.load()
            except Exception as e:
                raise ToolSourceError(f"Cannot load tool plugin '{ep.name}': {e}") from e
            self.add_source(_coerce_source(obj, ep.value), overwrite=True)
            loaded += 1

        return loaded

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _ensure_mutable(self) -> None:
        if self._frozen:
            raise ToolRegistryFrozenError("Tool registry is frozen; build a new one to change tools")

    # ''''''''''''''''''''''''''''''''''''''
    # Lookup
    # ''''''''''''''''''''''''''''''''''''''

    def resolve(self, name: str) -> Tool[Any, Any] | None:
        entry = self._entries.get(name)
        return entry.handler if entry is not None else None

    def get(self, name: str) -> Tool[Any, Any]:
        try:
            return self._entries[name].handler
        except KeyError as e:
            raise ToolNotFoundError(f"Unknown tool: {name}") from e

    def has(self, name: str) -> bool:
        return name in self._entries

    def names(self) -> List[str]:
        return list(self._entries.keys())

    def entries(self) -> List[ToolRegistryEntry]:
        return list(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    # ''''''''''''''''''''''''''''''''''''''
    # Export / descriptors
    # ''''''''''''''''''''''''''''''''''''''

    @property
    def descriptors(self) -> List[Dict[str, Any]]:
        """Descriptors in discovery order, as sent to the assistant."""
        return [dict(d) for d in self._descriptors]

    def list_tool_summaries(self) -> List[Dict[str, Any]]:
        """
        Lightweight listing for UIs / debugging.
        """
        return [
            {"name": e.name, "description": e.handler.spec.description, "source": e.source}
            for e in self._entries.values()
        ]


def discover(sources: Iterable[SourceRef]) -> ToolRegistry:
    return ToolRegistry.discover(sources)
